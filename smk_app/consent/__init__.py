"""
Storage consent: tri-state permission gating persistent cache writes.
"""
from .gate import ConsentGate
from .models import ConsentState
from .store import ConsentStore

__all__ = ["ConsentGate", "ConsentState", "ConsentStore"]
