"""Health package for the composite probe and shared marker files."""

from .marker import HealthMarker
from .probe import HttpCheckPolicy, HealthProbe

__all__ = [
    "HealthMarker",
    "HealthProbe",
    "HttpCheckPolicy",
]
