"""
Project Symposium - Data Schemas

Pydantic models for everything engines produce and the orchestrator returns.
These are also the serializable shapes handed to any persistence layer.
"""

import math
from datetime import datetime, UTC
from typing import Optional, Dict, Any, List

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .constants import MAX_CONFIDENCE


class SymposiumBaseModel(BaseModel):
    """Base class for all Symposium records"""
    model_config = ConfigDict(
        populate_by_name=True,
        use_enum_values=True
    )

    def to_json(self) -> str:
        """Serialize to JSON string"""
        return self.model_dump_json()

    @classmethod
    def from_json(cls, json_str: str):
        """Deserialize from JSON string"""
        return cls.model_validate_json(json_str)


def clamp_confidence(value: float) -> float:
    """Clamp a confidence value into [0, MAX_CONFIDENCE]."""
    if not math.isfinite(value):
        raise ValueError(f"confidence must be a finite number, got {value}")
    return min(max(value, 0.0), MAX_CONFIDENCE)


# ============================================
# Engine Output
# ============================================

class Insight(SymposiumBaseModel):
    """
    Immutable, confidence-bounded output of one engine invocation.

    Confidence is clamped to the golden-ratio ceiling on creation, whoever
    builds the insight.
    """
    model_config = ConfigDict(
        populate_by_name=True,
        use_enum_values=True,
        frozen=True
    )

    engine_id: str
    domain: str
    perspective: str
    content: str
    confidence: float
    reasoning: List[str] = Field(default_factory=list)
    metadata: Dict[str, Any] = Field(default_factory=dict)

    # Populated by synthesis strategies only
    perspectives: List["Insight"] = Field(default_factory=list)
    thesis: Optional[str] = None
    antithesis: Optional[str] = None

    @field_validator("confidence")
    @classmethod
    def _cap_confidence(cls, value: float) -> float:
        return clamp_confidence(value)


Insight.model_rebuild()


# ============================================
# Engine Description
# ============================================

class EngineDefinition(SymposiumBaseModel):
    """Identity record of an engine, as exported by the registry"""
    id: str
    name: str
    domain: str
    subdomains: List[str] = Field(default_factory=list)
    capabilities: List[str]
    dependencies: List[str] = Field(default_factory=list)
    description: str = ""
    tradition: Optional[str] = None


class EngineStats(SymposiumBaseModel):
    """Running statistics for one engine"""
    id: str
    domain: str
    status: str
    evaluation_count: int
    average_confidence: float
    last_evaluated_at: Optional[datetime] = None


class RegistryStats(SymposiumBaseModel):
    """Aggregate registry counts"""
    total_engines: int
    domains: int
    capabilities: int
    by_status: Dict[str, int] = Field(default_factory=dict)
    by_domain: Dict[str, int] = Field(default_factory=dict)


class RegistrySnapshot(SymposiumBaseModel):
    """Serializable export of a registry"""
    engines: List[EngineDefinition]
    stats: RegistryStats
    exported_at: datetime = Field(default_factory=lambda: datetime.now(UTC))


# ============================================
# Orchestration Results
# ============================================

class ConsultationResult(SymposiumBaseModel):
    """Outcome of consulting several engines on one question"""
    question: str
    insights: List[Insight] = Field(default_factory=list)
    synthesis: Optional[Insight] = None
    engines_consulted: List[str] = Field(default_factory=list)
    overall_confidence: float = 0.0
    metadata: Dict[str, Any] = Field(default_factory=dict)


class Position(SymposiumBaseModel):
    """One engine's stance on a dilemma"""
    engine_id: str
    tradition: Optional[str] = None
    position: str
    confidence: float
    reasoning: List[str] = Field(default_factory=list)


class Tension(SymposiumBaseModel):
    """Two positions held by different traditions"""
    between: List[str]
    traditions: List[Optional[str]]
    description: str


class DeliberationResult(SymposiumBaseModel):
    """Outcome of deliberating a dilemma across traditions"""
    dilemma: str
    positions: List[Position] = Field(default_factory=list)
    tensions: List[Tension] = Field(default_factory=list)
    recommendation: Optional[Insight] = None
    confidence: float = 0.0
    metadata: Dict[str, Any] = Field(default_factory=dict)
