"""
Deliberation - surface tensions between traditions on a dilemma

Positions are compared pairwise; every pair held by different traditions is a
tension. The recommendation is the dialectic synthesis of the positions.
"""

from typing import List, Optional, Sequence

from engines.shared.base_engine import Engine
from engines.shared.constants import PHI_INV_2
from engines.shared.schemas import Insight, Position, Tension
from orchestrator.synthesis import dialectic_synthesis

# Confidence reported when positions exist but no recommendation could be formed
NO_RECOMMENDATION_CONFIDENCE = PHI_INV_2


def position_from_insight(engine: Engine, insight: Insight) -> Position:
    """Record an engine's insight as its position on the dilemma."""
    return Position(
        engine_id=engine.id,
        tradition=engine.tradition,
        position=insight.content,
        confidence=insight.confidence,
        reasoning=list(insight.reasoning)
    )


def identify_tensions(positions: Sequence[Position]) -> List[Tension]:
    """
    Find every unordered pair of positions from different traditions.

    Args:
        positions: Positions in consultation order

    Returns:
        One tension per disagreeing pair
    """
    tensions = []

    for i, first in enumerate(positions):
        for second in positions[i + 1:]:
            if first.tradition != second.tradition:
                tensions.append(Tension(
                    between=[first.engine_id, second.engine_id],
                    traditions=[first.tradition, second.tradition],
                    description=f"{first.tradition} vs {second.tradition}"
                ))

    return tensions


def recommend(positions: Sequence[Position], tensions: Sequence[Tension]) -> Optional[Insight]:
    """Dialectic recommendation over the surviving positions."""
    return dialectic_synthesis(positions, tensions)


def filter_by_traditions(engines: Sequence[Engine], traditions: Optional[Sequence[str]]) -> List[Engine]:
    """Keep engines whose tradition was requested; no request keeps all."""
    if not traditions:
        return list(engines)
    return [e for e in engines if e.tradition in traditions]
