"""Mapping synthesis and the dispatch shims synthesized mappings call."""

from .models import (
    TRIGGER_KEY,
    CountSource,
    MappingSpec,
    Mechanism,
    Shim,
    ShimCall,
    trigger_for,
)
from .synthesizer import MappingRecipe, MappingSynthesizer
from .shims import Dispatcher

__all__ = [
    "TRIGGER_KEY",
    "CountSource",
    "MappingSpec",
    "Mechanism",
    "Shim",
    "ShimCall",
    "trigger_for",
    "MappingRecipe",
    "MappingSynthesizer",
    "Dispatcher",
]
