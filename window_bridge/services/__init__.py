"""Services for window-bridge: the window/view registry and the creation correlator."""

from .window_registry import WindowRegistry, RegistryStats
from .creation_correlator import CreationCorrelator, PendingCreation

__all__ = [
    "WindowRegistry",
    "RegistryStats",
    "CreationCorrelator",
    "PendingCreation",
]
