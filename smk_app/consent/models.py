"""Consent data models."""

from enum import Enum


class ConsentState(str, Enum):
    """Whether the user allows datasets to be persisted locally."""
    GRANTED = "granted"
    DENIED = "denied"
    UNDECIDED = "undecided"
