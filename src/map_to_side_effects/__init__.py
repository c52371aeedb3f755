"""Register callbacks once and bind editor keys to the ``<Plug>`` triggers."""

from .api import RegistryStats, SideEffects
from .registry import ActionKind, InputMode, SetUpOptions

__all__ = [
    "api",
    "errors",
    "host",
    "mappings",
    "registry",
    "runtime",
    "ActionKind",
    "InputMode",
    "RegistryStats",
    "SetUpOptions",
    "SideEffects",
]

__version__ = "0.1.0"
