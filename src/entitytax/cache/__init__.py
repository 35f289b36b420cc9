"""Cache layer for the comparison engine."""

from .memo_cache import MISSING, BoundedCache

__all__ = [
    "MISSING",
    "BoundedCache",
]
