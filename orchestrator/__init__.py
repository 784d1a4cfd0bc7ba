"""
Orchestrator - Central coordination for Project Symposium

The orchestrator manages engine registration and discovery, dispatches
consultations to engines concurrently, and synthesizes their insights.
"""

from .registry import EngineRegistry, default_registry, get_default_registry
from .synthesis import SynthesisStrategy, synthesize
from .deliberation import identify_tensions
from .consultation import EngineOrchestrator, create_orchestrator

__all__ = [
    "EngineRegistry",
    "default_registry",
    "get_default_registry",
    "SynthesisStrategy",
    "synthesize",
    "identify_tensions",
    "EngineOrchestrator",
    "create_orchestrator",
]
