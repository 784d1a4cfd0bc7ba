"""
Project Symposium - Base Engine Class

Abstract base class for all capability engines, plus the factory that wraps a
plain evaluation callback into an engine.
"""

import asyncio
import inspect
import json
import logging
from abc import ABC, abstractmethod
from collections.abc import Mapping
from datetime import datetime, UTC
from enum import Enum
from typing import Optional, Dict, Any, List, Callable, Iterable

from .errors import (
    EngineFailureError,
    InvalidConfigurationError,
    MissingFieldError,
)
from .schemas import EngineDefinition, EngineStats, Insight

logger = logging.getLogger(__name__)


class EngineStatus(str, Enum):
    """Lifecycle status of an engine"""
    IDLE = "idle"
    EVALUATING = "evaluating"
    ERROR = "error"
    DISABLED = "disabled"


class EngineDomain:
    """Known engine domains"""

    # Philosophy
    LOGIC = "logic"
    EPISTEMOLOGY = "epistemology"
    METAPHYSICS = "metaphysics"
    ETHICS = "ethics"
    AESTHETICS = "aesthetics"
    MIND = "mind"
    LANGUAGE = "language"
    SCIENCE = "science"

    # Eastern & Regional
    EASTERN = "eastern"
    AFRICAN = "african"
    ISLAMIC = "islamic"
    LATIN_AMERICAN = "latin-american"

    # Applied
    LAW = "law"
    ECONOMICS = "economics"
    POLITICS = "politics"
    SOCIAL = "social"

    # Analytical
    MATHEMATICS = "mathematics"
    PHYSICS = "physics"
    GAME_THEORY = "game-theory"
    DECISION = "decision"

    # Meta
    INTEGRATION = "integration"
    SYNTHESIS = "synthesis"


def input_text(input: Any) -> str:
    """Extract the text an engine should read from a consultation input."""
    if isinstance(input, str):
        return input
    if isinstance(input, Mapping):
        for key in ("question", "dilemma", "text", "content"):
            if isinstance(input.get(key), str):
                return input[key]
    return json.dumps(input, default=str)


def _tag_list(values: Optional[Iterable[str]], field: str, engine_id: str) -> List[str]:
    """Validate a list of non-empty string tags."""
    if values is None:
        return []
    if isinstance(values, str):
        raise InvalidConfigurationError(
            f"Engine '{engine_id}': {field} must be a list of strings, not a string"
        )
    tags = list(values)
    for tag in tags:
        if not isinstance(tag, str) or not tag.strip():
            raise InvalidConfigurationError(
                f"Engine '{engine_id}': {field} entries must be non-empty strings, got {tag!r}"
            )
    return tags


class Engine(ABC):
    """
    Abstract base class for all Symposium engines.

    An engine is a domain expert with one operation, evaluate(), that turns an
    input into an Insight. Subclasses implement assess(); evaluate() owns the
    status lifecycle, statistics and error wrapping so every engine fails the
    same way.
    """

    def __init__(
        self,
        id: str,
        domain: str,
        capabilities: List[str],
        name: Optional[str] = None,
        subdomains: Optional[List[str]] = None,
        dependencies: Optional[List[str]] = None,
        description: str = "",
        tradition: Optional[str] = None
    ):
        """
        Initialize base engine.

        Args:
            id: Unique engine identifier
            domain: Primary domain
            capabilities: Non-empty list of capability tags
            name: Human-readable name (defaults to id)
            subdomains: Additional domains the engine is discoverable under
            dependencies: Ids of engines this one logically requires
            description: Engine description
            tradition: School of thought used for dialectic pairing

        Raises:
            MissingFieldError: If id, domain or capabilities is absent
            InvalidConfigurationError: If a tag list is malformed
        """
        if not id or not isinstance(id, str):
            raise MissingFieldError("id")
        if not domain or not isinstance(domain, str):
            raise MissingFieldError("domain", id)
        if not capabilities:
            raise MissingFieldError("capabilities", id)

        self._id = id
        self._domain = domain
        self._capabilities = tuple(_tag_list(capabilities, "capabilities", id))
        self._subdomains = tuple(_tag_list(subdomains, "subdomains", id))
        self._dependencies = tuple(_tag_list(dependencies, "dependencies", id))
        if id in self._dependencies:
            raise InvalidConfigurationError(f"Engine '{id}' cannot depend on itself")

        self._name = name or id
        self._description = description or ""
        self._tradition = tradition

        self._status = EngineStatus.IDLE
        self.last_evaluation: Optional[Insight] = None
        self.last_evaluated_at: Optional[datetime] = None
        self.evaluation_count = 0
        self.total_confidence = 0.0

    # Identity is read-only after construction

    @property
    def id(self) -> str:
        return self._id

    @property
    def name(self) -> str:
        return self._name

    @property
    def domain(self) -> str:
        return self._domain

    @property
    def subdomains(self) -> List[str]:
        return list(self._subdomains)

    @property
    def capabilities(self) -> List[str]:
        return list(self._capabilities)

    @property
    def dependencies(self) -> List[str]:
        return list(self._dependencies)

    @property
    def description(self) -> str:
        return self._description

    @property
    def tradition(self) -> Optional[str]:
        return self._tradition

    @property
    def status(self) -> EngineStatus:
        return self._status

    @abstractmethod
    async def assess(self, input: Any, context: Dict[str, Any]) -> Insight:
        """
        Produce an insight for the input.
        Must be implemented by subclasses, usually via create_insight().

        Args:
            input: The question or data to evaluate
            context: Orchestration context (query options, deadline, mode)

        Returns:
            Insight
        """
        pass

    async def evaluate(self, input: Any, context: Optional[Dict[str, Any]] = None) -> Insight:
        """
        Evaluate an input and produce an insight.

        Args:
            input: The question or data to evaluate
            context: Optional orchestration context

        Returns:
            Insight with confidence capped at the golden-ratio ceiling

        Raises:
            EngineFailureError: If the engine is disabled or assess() raised
        """
        if self._status == EngineStatus.DISABLED:
            raise EngineFailureError(self._id, "engine is disabled")

        self._status = EngineStatus.EVALUATING
        try:
            insight = await self.assess(input, context or {})
        except asyncio.CancelledError:
            self._settle(EngineStatus.ERROR)
            logger.warning(f"Engine '{self._id}' evaluation cancelled")
            raise
        except EngineFailureError:
            self._settle(EngineStatus.ERROR)
            raise
        except Exception as e:
            self._settle(EngineStatus.ERROR)
            logger.error(f"Engine '{self._id}' evaluation failed: {e}")
            raise EngineFailureError(self._id, str(e)) from e

        if not isinstance(insight, Insight):
            self._settle(EngineStatus.ERROR)
            raise EngineFailureError(
                self._id, f"assess() returned {type(insight).__name__}, expected Insight"
            )

        self._settle(EngineStatus.IDLE)
        self.last_evaluation = insight
        self.last_evaluated_at = datetime.now(UTC)
        self.evaluation_count += 1
        self.total_confidence += insight.confidence
        return insight

    def _settle(self, status: EngineStatus) -> None:
        # disable() during an evaluation wins over the evaluation outcome
        if self._status != EngineStatus.DISABLED:
            self._status = status

    def has_capability(self, capability: str) -> bool:
        """Check if this engine offers a capability."""
        return capability in self._capabilities

    def in_domain(self, domain: str) -> bool:
        """Check if this engine belongs to a domain (primary or subdomain)."""
        return self._domain == domain or domain in self._subdomains

    def create_insight(
        self,
        content: str,
        confidence: float,
        reasoning: Optional[List[str]] = None,
        metadata: Optional[Dict[str, Any]] = None
    ) -> Insight:
        """
        Create an insight attributed to this engine.

        Args:
            content: The insight text
            confidence: Raw confidence, capped by the Insight model
            reasoning: Ordered supporting statements
            metadata: Additional data

        Returns:
            Insight
        """
        return Insight(
            engine_id=self._id,
            domain=self._domain,
            perspective=self._tradition or self._name,
            content=content,
            confidence=confidence,
            reasoning=list(reasoning or []),
            metadata={
                **(metadata or {}),
                "evaluated_at": datetime.now(UTC).isoformat(),
                "tradition": self._tradition,
            }
        )

    def get_stats(self) -> EngineStats:
        """Get engine statistics."""
        return EngineStats(
            id=self._id,
            domain=self._domain,
            status=self._status.value,
            evaluation_count=self.evaluation_count,
            average_confidence=(
                self.total_confidence / self.evaluation_count
                if self.evaluation_count > 0 else 0.0
            ),
            last_evaluated_at=self.last_evaluated_at
        )

    def get_definition(self) -> EngineDefinition:
        """Get the serializable engine definition."""
        return EngineDefinition(
            id=self._id,
            name=self._name,
            domain=self._domain,
            subdomains=list(self._subdomains),
            capabilities=list(self._capabilities),
            dependencies=list(self._dependencies),
            description=self._description,
            tradition=self._tradition
        )

    def disable(self) -> None:
        """Exclude this engine from consultations."""
        self._status = EngineStatus.DISABLED

    def enable(self) -> None:
        """Return a disabled engine to service."""
        if self._status == EngineStatus.DISABLED:
            self._status = EngineStatus.IDLE

    def reset(self) -> None:
        """Reset status and statistics."""
        self._status = EngineStatus.IDLE
        self.last_evaluation = None
        self.last_evaluated_at = None
        self.evaluation_count = 0
        self.total_confidence = 0.0

    def __repr__(self) -> str:
        return f"{type(self).__name__}(id={self._id!r}, domain={self._domain!r}, status={self._status.value!r})"


class FunctionalEngine(Engine):
    """
    Engine backed by a plain evaluation callback.

    The callback takes (input, context) and returns, or resolves to, a mapping
    with 'insight' (or 'content'), 'confidence' and optional 'reasoning' and
    'metadata'.
    """

    def __init__(self, evaluator: Callable[[Any, Dict[str, Any]], Any], **definition: Any):
        if not callable(evaluator):
            raise InvalidConfigurationError("Functional engine requires an evaluator callable")
        super().__init__(**definition)
        self._evaluator = evaluator

    async def assess(self, input: Any, context: Dict[str, Any]) -> Insight:
        if inspect.iscoroutinefunction(self._evaluator):
            result = self._evaluator(input, context)
        else:
            # Blocking callbacks run in a worker thread so timeouts can pre-empt them
            result = await asyncio.to_thread(self._evaluator, input, context)
        if inspect.isawaitable(result):
            result = await result

        if not isinstance(result, Mapping):
            raise ValueError(f"evaluator returned {type(result).__name__}, expected a mapping")

        content = result.get("insight", result.get("content"))
        if content is None:
            raise ValueError("evaluator result is missing 'insight'")
        if result.get("confidence") is None:
            raise ValueError("evaluator result is missing 'confidence'")

        return self.create_insight(
            str(content),
            float(result["confidence"]),
            result.get("reasoning") or [],
            result.get("metadata") or {}
        )


def create_functional_engine(evaluator: Callable[[Any, Dict[str, Any]], Any] = None, **definition: Any) -> Engine:
    """
    Create an engine from a simple evaluator function.

    Args:
        evaluator: Callable (input, context) -> mapping, sync or async
        **definition: Engine fields (id, domain, capabilities, ...)

    Returns:
        Engine indistinguishable from a subclass to the registry and orchestrator

    Example:
        stoic = create_functional_engine(
            id="stoic-engine",
            domain="ethics",
            capabilities=["virtue-ethics"],
            evaluator=lambda input, context: {
                "insight": "Focus on what you can control",
                "confidence": 0.6,
            },
        )
    """
    return FunctionalEngine(evaluator, **definition)
