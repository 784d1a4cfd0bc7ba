"""
Project Symposium - Test Fixtures

Provides engine factories, registries and orchestrators shared by the
integration tests. Engines are real Engine subclasses; nothing is mocked
below the HTTP client.
"""

import asyncio
import os
import tempfile
from pathlib import Path
from typing import Any, Dict, List, Optional

import pytest
from dotenv import load_dotenv

project_root = Path(__file__).parent.parent

# Load .env file for tests, then keep log files out of the working tree
load_dotenv(project_root / ".env")
os.environ.setdefault("LOG_DIR", tempfile.mkdtemp(prefix="symposium-logs-"))

from engines.shared.base_engine import Engine
from engines.shared.schemas import Insight
from orchestrator.consultation import EngineOrchestrator
from orchestrator.registry import EngineRegistry


class StaticEngine(Engine):
    """Engine that answers every input with a fixed insight."""

    def __init__(
        self,
        id: str,
        confidence: float = 0.5,
        content: Optional[str] = None,
        domain: str = "ethics",
        capabilities: Optional[List[str]] = None,
        delay: float = 0.0,
        error: Optional[Exception] = None,
        **definition: Any
    ):
        super().__init__(
            id=id,
            domain=domain,
            capabilities=capabilities or ["moral-evaluation"],
            **definition
        )
        self.answer = content or f"{id} answer"
        self.answer_confidence = confidence
        self.delay = delay
        self.error = error
        self.calls: List[Dict[str, Any]] = []
        self.cancelled = False

    async def assess(self, input: Any, context: Dict[str, Any]) -> Insight:
        self.calls.append({"input": input, "context": context})
        if self.delay:
            try:
                await asyncio.sleep(self.delay)
            except asyncio.CancelledError:
                self.cancelled = True
                raise
        if self.error is not None:
            raise self.error
        return self.create_insight(self.answer, self.answer_confidence, [f"{self.id} reasoning"])


@pytest.fixture
def make_engine():
    """
    Factory for StaticEngine instances.

    Usage:
        engine = make_engine("stoic", confidence=0.6, tradition="stoic")
    """
    def _make(id: str, **kwargs: Any) -> StaticEngine:
        return StaticEngine(id, **kwargs)

    return _make


@pytest.fixture
def registry():
    """Empty engine registry"""
    return EngineRegistry()


@pytest.fixture
def orchestrator(registry):
    """Orchestrator over the empty registry with a short timeout"""
    return EngineOrchestrator(registry, timeout=0.5)


@pytest.fixture
def ethics_registry(registry, make_engine):
    """Registry with three ethics engines from two traditions"""
    registry.register(make_engine("stoic-a", confidence=0.6, tradition="stoic"))
    registry.register(make_engine("stoic-b", confidence=0.4, tradition="stoic"))
    registry.register(make_engine("kantian", confidence=0.5, tradition="kantian"))
    return registry


@pytest.fixture
def sample_dilemma():
    """Classic dilemma text exercising several built-in engines"""
    return (
        "Should I lie to my colleague to protect the team from harm? "
        "Everyone knows the project will fail and many people could lose their jobs."
    )
