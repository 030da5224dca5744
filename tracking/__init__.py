"""Function-call tracking used across the reservation domain."""

from .runtime import reset, snapshot, t

__all__ = ["t", "snapshot", "reset"]
