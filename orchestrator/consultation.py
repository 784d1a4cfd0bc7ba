"""
Engine Orchestrator - consult several engines and combine their insights

Selection -> concurrent dispatch -> synthesis:
1. Select engines by explicit id, by domain/capability, or all of them
2. Evaluate every selected engine at once, each against its own deadline
3. Wait for every evaluation to settle (success, failure or timeout)
4. Reduce the surviving insights with a synthesis strategy

Per-engine failures and timeouts are contained: they lower the number of
insights, they never raise to the caller.
"""

import asyncio
import json
import logging
from datetime import datetime, UTC
from typing import Any, Dict, List, Optional, Tuple

from engines.shared.base_engine import Engine, EngineDomain, EngineStatus
from engines.shared.errors import (
    EngineNotFoundError,
    EngineTimeoutError,
    InvalidConfigurationError,
)
from engines.shared.schemas import ConsultationResult, DeliberationResult, Insight
from orchestrator.deliberation import (
    NO_RECOMMENDATION_CONFIDENCE,
    filter_by_traditions,
    identify_tensions,
    position_from_insight,
    recommend,
)
from orchestrator.registry import EngineRegistry, get_default_registry
from orchestrator.synthesis import SynthesisStrategy, resolve_strategy, synthesize

logger = logging.getLogger(__name__)

# Configuration constants
DEFAULT_ENGINE_TIMEOUT = 5.0  # seconds per engine
DEFAULT_MAX_ENGINES = 10

# Outcome of one engine invocation
SUCCESS = "success"
FAILED = "error"
TIMED_OUT = "timeout"

Outcome = Tuple[Engine, str, Optional[Insight]]


def _describe(value: Any) -> str:
    if isinstance(value, str):
        return value
    return json.dumps(value, default=str)


class EngineOrchestrator:
    """
    Coordinates queries across multiple engines and synthesizes the results.

    The registry is injected; use create_orchestrator() for the process-wide
    default registry.

    Example:
        orchestrator = EngineOrchestrator(registry)
        result = await orchestrator.consult(
            "Is this action ethical?",
            domains=["ethics", "logic"],
        )
    """

    def __init__(
        self,
        registry: EngineRegistry,
        default_strategy: Any = SynthesisStrategy.WEIGHTED_AVERAGE,
        timeout: float = DEFAULT_ENGINE_TIMEOUT,
        max_engines: int = DEFAULT_MAX_ENGINES,
        deliberation_domain: str = EngineDomain.ETHICS
    ):
        """
        Initialize orchestrator.

        Args:
            registry: Engine registry to select engines from
            default_strategy: Synthesis strategy when consult() names none
            timeout: Default per-engine time budget in seconds
            max_engines: Default cap on engines per consultation
            deliberation_domain: Domain whose engines take part in deliberate()

        Raises:
            InvalidConfigurationError: On unknown strategy, non-positive timeout or negative max_engines
        """
        if not isinstance(registry, EngineRegistry):
            raise InvalidConfigurationError("EngineOrchestrator requires an EngineRegistry")
        if timeout is None or timeout <= 0:
            raise InvalidConfigurationError(f"timeout must be positive, got {timeout}")
        if max_engines is None or max_engines < 0:
            raise InvalidConfigurationError(f"max_engines must not be negative, got {max_engines}")

        self.registry = registry
        self.default_strategy = resolve_strategy(default_strategy)
        self.timeout = timeout
        self.max_engines = max_engines
        self.deliberation_domain = deliberation_domain

    async def consult(
        self,
        input: Any,
        domains: Optional[List[str]] = None,
        capabilities: Optional[List[str]] = None,
        engines: Optional[List[str]] = None,
        strategy: Any = None,
        max_engines: Optional[int] = None,
        timeout: Optional[float] = None
    ) -> ConsultationResult:
        """
        Consult engines on a question.

        Args:
            input: Question or input data
            domains: Domains to consult (union across domains)
            capabilities: Capabilities every selected engine must offer
            engines: Specific engine ids; takes precedence over domains/capabilities
            strategy: Synthesis strategy (defaults to the orchestrator's)
            max_engines: Maximum engines to consult
            timeout: Per-engine timeout in seconds

        Returns:
            ConsultationResult; an empty selection yields no insights and no synthesis

        Raises:
            InvalidConfigurationError: On unknown strategy, non-positive timeout or negative max_engines
        """
        strategy = resolve_strategy(strategy or self.default_strategy)
        timeout = self._resolve_timeout(timeout)
        max_engines = self.max_engines if max_engines is None else max_engines
        if max_engines < 0:
            raise InvalidConfigurationError(f"max_engines must not be negative, got {max_engines}")
        question = _describe(input)

        selected = self.select_engines(
            domains=domains,
            capabilities=capabilities,
            engine_ids=engines,
            max_engines=max_engines
        )

        if not selected:
            logger.info(f"No engines available for consultation: {question[:50]}")
            return ConsultationResult(
                question=question,
                overall_confidence=0.0,
                metadata={
                    "error": "No engines available for this query",
                    "strategy": strategy.value,
                    "total_engines": 0,
                    "successful_engines": 0,
                    "evaluated_at": datetime.now(UTC).isoformat(),
                }
            )

        logger.info(f"Consulting {len(selected)} engines ({strategy.value}): {question[:50]}")

        context = {
            "query": {
                "domains": domains,
                "capabilities": capabilities,
                "engines": engines,
                "strategy": strategy.value,
                "max_engines": max_engines,
                "timeout": timeout,
            },
        }
        outcomes = await self._dispatch(selected, input, context, timeout)

        insights = [insight for _, status, insight in outcomes if status == SUCCESS]
        synthesis = synthesize(insights, strategy)

        return ConsultationResult(
            question=question,
            insights=insights,
            synthesis=synthesis,
            engines_consulted=[engine.id for engine, status, _ in outcomes if status == SUCCESS],
            overall_confidence=synthesis.confidence if synthesis else 0.0,
            metadata={
                "strategy": strategy.value,
                "total_engines": len(selected),
                "successful_engines": len(insights),
                "failed_engines": [engine.id for engine, status, _ in outcomes if status == FAILED],
                "timed_out_engines": [engine.id for engine, status, _ in outcomes if status == TIMED_OUT],
                "evaluated_at": datetime.now(UTC).isoformat(),
            }
        )

    def select_engines(
        self,
        domains: Optional[List[str]] = None,
        capabilities: Optional[List[str]] = None,
        engine_ids: Optional[List[str]] = None,
        max_engines: Optional[int] = None
    ) -> List[Engine]:
        """
        Pick the engines a consultation will dispatch to.

        Explicit ids win (unknown ids are dropped), then a domain/capability
        query unioned across domains, then every registered engine. The list
        is truncated to max_engines before disabled engines are removed.

        Returns:
            Snapshot list of engines in selection order
        """
        selected: List[Engine] = []

        if engine_ids:
            seen = set()
            for engine_id in engine_ids:
                engine = self.registry.get(engine_id)
                if engine is not None and engine.id not in seen:
                    seen.add(engine.id)
                    selected.append(engine)

        elif domains or capabilities:
            seen = set()
            for domain in (domains or [None]):
                for engine in self.registry.query(domain=domain, capabilities=capabilities):
                    if engine.id not in seen:
                        seen.add(engine.id)
                        selected.append(engine)

        else:
            selected = self.registry.get_all()

        if max_engines is not None and len(selected) > max_engines:
            selected = selected[:max_engines]

        return [e for e in selected if e.status != EngineStatus.DISABLED]

    async def deliberate(
        self,
        dilemma: Any,
        traditions: Optional[List[str]] = None,
        timeout: Optional[float] = None
    ) -> DeliberationResult:
        """
        Deliberate on a dilemma using opposing traditions.

        Args:
            dilemma: The dilemma to deliberate
            traditions: Traditions to include (all when omitted)
            timeout: Per-engine timeout in seconds

        Returns:
            DeliberationResult with positions, tensions and a recommendation
        """
        timeout = self._resolve_timeout(timeout)
        text = _describe(dilemma)

        engines = filter_by_traditions(
            self.registry.get_by_domain(self.deliberation_domain),
            traditions
        )
        engines = [e for e in engines if e.status != EngineStatus.DISABLED]

        if not engines:
            logger.info(f"No {self.deliberation_domain} engines available for deliberation")
            return DeliberationResult(
                dilemma=text,
                confidence=0.0,
                metadata={
                    "error": "No engines available for deliberation",
                    "engines_consulted": [],
                    "tension_count": 0,
                    "evaluated_at": datetime.now(UTC).isoformat(),
                }
            )

        context = {
            "mode": "deliberation",
            "dilemma": dilemma,
            "query": {"traditions": traditions, "timeout": timeout},
        }
        outcomes = await self._dispatch(engines, dilemma, context, timeout)

        positions = [
            position_from_insight(engine, insight)
            for engine, status, insight in outcomes
            if status == SUCCESS
        ]
        tensions = identify_tensions(positions)
        recommendation = recommend(positions, tensions)

        logger.info(
            f"Deliberation: {len(positions)}/{len(engines)} positions, {len(tensions)} tensions"
        )

        return DeliberationResult(
            dilemma=text,
            positions=positions,
            tensions=tensions,
            recommendation=recommendation,
            confidence=(
                recommendation.confidence if recommendation is not None
                else NO_RECOMMENDATION_CONFIDENCE
            ),
            metadata={
                "engines_consulted": [p.engine_id for p in positions],
                "tension_count": len(tensions),
                "evaluated_at": datetime.now(UTC).isoformat(),
            }
        )

    async def evaluate_with(
        self,
        engine_id: str,
        input: Any,
        context: Optional[Dict[str, Any]] = None,
        timeout: Optional[float] = None
    ) -> Insight:
        """
        Evaluate with a single engine.

        Unlike consult(), failures are raised.

        Args:
            engine_id: Engine to use
            input: Input to evaluate
            context: Optional context passed to the engine
            timeout: Optional time budget in seconds

        Returns:
            Insight

        Raises:
            EngineNotFoundError: If engine_id is not registered
            EngineTimeoutError: If the engine exceeds the timeout
            EngineFailureError: If the engine's evaluation raised
        """
        engine = self.registry.get(engine_id)
        if engine is None:
            raise EngineNotFoundError(engine_id)

        if timeout is None:
            return await engine.evaluate(input, context or {})

        try:
            return await asyncio.wait_for(engine.evaluate(input, context or {}), timeout=timeout)
        except asyncio.TimeoutError:
            raise EngineTimeoutError(engine_id, timeout) from None

    def get_stats(self) -> Dict[str, Any]:
        """Get orchestrator statistics."""
        return {
            "registry": self.registry.get_stats().model_dump(),
            "default_strategy": self.default_strategy.value,
            "timeout": self.timeout,
            "max_engines": self.max_engines,
            "deliberation_domain": self.deliberation_domain,
        }

    def _resolve_timeout(self, timeout: Optional[float]) -> float:
        timeout = self.timeout if timeout is None else timeout
        if timeout <= 0:
            raise InvalidConfigurationError(f"timeout must be positive, got {timeout}")
        return timeout

    async def _dispatch(
        self,
        engines: List[Engine],
        input: Any,
        context: Dict[str, Any],
        timeout: float
    ) -> List[Outcome]:
        """
        Evaluate every engine concurrently and wait for all of them.

        Returns:
            One outcome per engine, in the order given
        """
        return await asyncio.gather(*[
            self._evaluate_with_timeout(engine, input, context, timeout)
            for engine in engines
        ])

    async def _evaluate_with_timeout(
        self,
        engine: Engine,
        input: Any,
        context: Dict[str, Any],
        timeout: float
    ) -> Outcome:
        loop = asyncio.get_running_loop()
        engine_context = {**context, "timeout": timeout, "deadline": loop.time() + timeout}

        try:
            insight = await asyncio.wait_for(engine.evaluate(input, engine_context), timeout=timeout)
            return engine, SUCCESS, insight
        except asyncio.TimeoutError:
            logger.warning(f"Engine '{engine.id}' timed out after {timeout}s")
            return engine, TIMED_OUT, None
        except Exception as e:
            logger.warning(f"Engine '{engine.id}' failed: {e}")
            return engine, FAILED, None


def create_orchestrator(registry: Optional[EngineRegistry] = None, **options: Any) -> EngineOrchestrator:
    """
    Create an orchestrator, over the default registry when none is given.

    Args:
        registry: Engine registry (defaults to the process-wide registry)
        **options: EngineOrchestrator keyword options

    Returns:
        EngineOrchestrator
    """
    if registry is None:
        registry = get_default_registry()
    return EngineOrchestrator(registry, **options)
