"""
Synthesis Strategies - reduce several insights into one

Every strategy returns an Insight (or None for no input), so the confidence
ceiling enforced by the Insight model holds for syntheses too.
"""

import statistics
from enum import Enum
from typing import Any, List, Optional, Sequence

from engines.shared.base_engine import EngineDomain
from engines.shared.constants import (
    CONSENSUS_BOOST,
    CONSENSUS_VARIANCE_THRESHOLD,
    MAX_CONFIDENCE,
    PHI_INV_2,
)
from engines.shared.errors import InvalidConfigurationError
from engines.shared.schemas import Insight, Position, Tension

SYNTHESIS_ENGINE_ID = "orchestrator"


class SynthesisStrategy(str, Enum):
    """How to combine insights"""
    WEIGHTED_AVERAGE = "weighted-average"
    HIGHEST_CONFIDENCE = "highest-confidence"
    CONSENSUS = "consensus"
    MULTI_PERSPECTIVE = "multi-perspective"
    DIALECTIC = "dialectic"


def resolve_strategy(strategy: Any) -> SynthesisStrategy:
    """
    Normalize a strategy name.

    Raises:
        InvalidConfigurationError: If the name is not a known strategy
    """
    try:
        return SynthesisStrategy(strategy)
    except ValueError:
        known = ", ".join(s.value for s in SynthesisStrategy)
        raise InvalidConfigurationError(
            f"Unknown synthesis strategy: {strategy!r} (known: {known})"
        ) from None


def _tagged(insight: Insight) -> str:
    return f"[{insight.perspective}] {insight.content}"


def weighted_average(insights: Sequence[Insight]) -> Insight:
    """Concatenate every perspective; confidence is the mean."""
    combined = [_tagged(i) for i in insights]
    mean_confidence = statistics.fmean(i.confidence for i in insights)

    return Insight(
        engine_id=SYNTHESIS_ENGINE_ID,
        domain=EngineDomain.SYNTHESIS,
        perspective=SynthesisStrategy.WEIGHTED_AVERAGE.value,
        content=f"Synthesized from {len(insights)} perspectives: {'; '.join(combined)}",
        confidence=min(mean_confidence, MAX_CONFIDENCE),
        reasoning=combined,
        metadata={
            "strategy": SynthesisStrategy.WEIGHTED_AVERAGE.value,
            "source_count": len(insights),
            "sources": [i.engine_id for i in insights],
        }
    )


def highest_confidence(insights: Sequence[Insight]) -> Insight:
    """Pick the most confident insight; the first one wins ties."""
    best = insights[0]
    for insight in insights[1:]:
        if insight.confidence > best.confidence:
            best = insight

    # Confidence was capped when `best` was created; it is passed through as is
    return best.model_copy(update={
        "metadata": {
            **best.metadata,
            "strategy": SynthesisStrategy.HIGHEST_CONFIDENCE.value,
            "other_perspectives": len(insights) - 1,
        }
    })


def multi_perspective(insights: Sequence[Insight], **extra_metadata: Any) -> Insight:
    """Keep every insight; low fixed confidence signals unresolved disagreement."""
    return Insight(
        engine_id=SYNTHESIS_ENGINE_ID,
        domain=EngineDomain.SYNTHESIS,
        perspective=SynthesisStrategy.MULTI_PERSPECTIVE.value,
        content=f"{len(insights)} distinct perspectives available",
        confidence=PHI_INV_2,
        reasoning=[_tagged(i) for i in insights],
        perspectives=list(insights),
        metadata={
            **extra_metadata,
            "strategy": SynthesisStrategy.MULTI_PERSPECTIVE.value,
            "perspective_count": len(insights),
        }
    )


def consensus(insights: Sequence[Insight]) -> Insight:
    """
    Declare consensus when confidences barely vary.

    Agreement is judged on the spread of confidences only. Without it the
    result falls back to multi-perspective.
    """
    confidences = [i.confidence for i in insights]
    mean_confidence = statistics.fmean(confidences)
    variance = statistics.pvariance(confidences, mu=mean_confidence)

    if variance < CONSENSUS_VARIANCE_THRESHOLD:
        return Insight(
            engine_id=SYNTHESIS_ENGINE_ID,
            domain=EngineDomain.SYNTHESIS,
            perspective=SynthesisStrategy.CONSENSUS.value,
            content=f"Consensus reached among {len(insights)} engines",
            confidence=min(mean_confidence * CONSENSUS_BOOST, MAX_CONFIDENCE),
            reasoning=[i.content for i in insights],
            metadata={
                "strategy": SynthesisStrategy.CONSENSUS.value,
                "consensus_strength": 1 - variance,
                "variance": variance,
                "source_count": len(insights),
            }
        )

    return multi_perspective(insights, consensus_variance=variance)


def dialectic_synthesis(
    positions: Sequence[Position],
    tensions: Optional[Sequence[Tension]] = None
) -> Optional[Insight]:
    """
    Thesis + antithesis -> synthesis.

    The thesis is the most confident position. The antithesis is the most
    confident position from a different tradition, or the runner-up when
    every position shares one tradition.

    Args:
        positions: Positions to reconcile
        tensions: Tensions already identified between the positions

    Returns:
        Synthesized insight, or None if there are no positions
    """
    if not positions:
        return None

    if len(positions) == 1:
        only = positions[0]
        return Insight(
            engine_id=only.engine_id,
            domain=EngineDomain.SYNTHESIS,
            perspective=only.tradition or only.engine_id,
            content=only.position,
            confidence=only.confidence,
            reasoning=list(only.reasoning),
            metadata={"strategy": SynthesisStrategy.DIALECTIC.value, "tension_count": 0}
        )

    ranked = sorted(positions, key=lambda p: p.confidence, reverse=True)
    thesis = ranked[0]
    antithesis = next(
        (p for p in ranked[1:] if p.tradition != thesis.tradition),
        ranked[1]
    )

    return Insight(
        engine_id=SYNTHESIS_ENGINE_ID,
        domain=EngineDomain.SYNTHESIS,
        perspective=SynthesisStrategy.DIALECTIC.value,
        content=(
            f"Synthesis: Balancing {thesis.tradition or 'primary'} ({thesis.position}) "
            f"with {antithesis.tradition or 'secondary'} perspective"
        ),
        confidence=min((thesis.confidence + antithesis.confidence) / 2, MAX_CONFIDENCE),
        reasoning=[
            f"Thesis [{thesis.tradition}]: {thesis.position}",
            f"Antithesis [{antithesis.tradition}]: {antithesis.position}",
            "Synthesis: Integration of both perspectives",
        ],
        thesis=thesis.position,
        antithesis=antithesis.position,
        metadata={
            "strategy": SynthesisStrategy.DIALECTIC.value,
            "thesis_engine": thesis.engine_id,
            "antithesis_engine": antithesis.engine_id,
            "tension_count": len(tensions or []),
        }
    )


def insight_to_position(insight: Insight) -> Position:
    """View an insight as a dialectic position; its perspective stands in for a tradition."""
    return Position(
        engine_id=insight.engine_id,
        tradition=insight.perspective,
        position=insight.content,
        confidence=insight.confidence,
        reasoning=list(insight.reasoning)
    )


def dialectic(insights: Sequence[Insight]) -> Optional[Insight]:
    """Dialectic synthesis over consultation insights."""
    return dialectic_synthesis([insight_to_position(i) for i in insights])


_STRATEGIES = {
    SynthesisStrategy.WEIGHTED_AVERAGE: weighted_average,
    SynthesisStrategy.HIGHEST_CONFIDENCE: highest_confidence,
    SynthesisStrategy.CONSENSUS: consensus,
    SynthesisStrategy.MULTI_PERSPECTIVE: multi_perspective,
    SynthesisStrategy.DIALECTIC: dialectic,
}


def synthesize(insights: List[Insight], strategy: Any = SynthesisStrategy.WEIGHTED_AVERAGE) -> Optional[Insight]:
    """
    Reduce insights to one using the named strategy.

    Args:
        insights: Surviving insights in selection order
        strategy: SynthesisStrategy or its string value

    Returns:
        None for no insights, the sole insight for one, otherwise the synthesis

    Raises:
        InvalidConfigurationError: If the strategy is unknown
    """
    reducer = _STRATEGIES[resolve_strategy(strategy)]

    if not insights:
        return None
    if len(insights) == 1:
        return insights[0]

    return reducer(insights)
