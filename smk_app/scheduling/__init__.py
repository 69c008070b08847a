"""
Scheduling of consumer notifications: debouncing and lazy activation.
"""
from .activation import (
    ConsumerCallback,
    ConsumerRegistration,
    LazyActivationManager,
    ManualReadiness,
    ReadinessSource,
    ThresholdReadiness,
)
from .debounce import Debouncer, Throttle, schedule

__all__ = [
    "ConsumerCallback",
    "ConsumerRegistration",
    "Debouncer",
    "LazyActivationManager",
    "ManualReadiness",
    "ReadinessSource",
    "ThresholdReadiness",
    "Throttle",
    "schedule",
]
