"""
Built-in Engine Catalog

The default engine population for a service registry:
- stoic (virtue ethics)
- kantian (deontology, depends on fallacy-detector)
- utilitarian (consequentialism)
- fallacy-detector (informal logic)
- pragmatist (functional engine, depends on utilitarian)
"""

import logging
import re
from typing import Any, Dict, List

from engines.consequentialism.engine import UtilitarianEngine
from engines.deontology.engine import KantianEngine
from engines.logic.engine import FallacyEngine
from engines.shared.base_engine import Engine, EngineDomain, create_functional_engine, input_text
from engines.virtue.engine import StoicEngine

logger = logging.getLogger(__name__)

_PRACTICAL_TERMS = r'\b(should|could|plan|try|test|work\w*|practical|option\w*)\b'


def pragmatist_evaluator(input: Any, context: Dict[str, Any]) -> Dict[str, Any]:
    """Judge an idea by whether acting on it would make a practical difference."""
    text = input_text(input)
    practical = len(re.findall(_PRACTICAL_TERMS, text, re.IGNORECASE))

    if practical:
        insight = "Try the option on a small scale and keep what works in practice"
        confidence = 0.45
    else:
        insight = "Ask what difference each answer would make to what you actually do"
        confidence = 0.35

    return {
        "insight": insight,
        "confidence": confidence,
        "reasoning": ["Meaning lies in practical consequences (Peirce, James)"],
        "metadata": {"practical_markers": practical},
    }


def create_pragmatist_engine() -> Engine:
    """Pragmatist engine built from a plain callback."""
    return create_functional_engine(
        id="pragmatist",
        name="Pragmatist Engine",
        domain=EngineDomain.ETHICS,
        subdomains=[EngineDomain.DECISION],
        capabilities=["pragmatism", "moral-evaluation"],
        dependencies=["utilitarian"],
        description="Truth and value as what works in practice",
        tradition="pragmatist",
        evaluator=pragmatist_evaluator,
    )


def builtin_engines() -> List[Engine]:
    """Fresh instances of every built-in engine, dependencies first."""
    return [
        FallacyEngine(),
        StoicEngine(),
        KantianEngine(),
        UtilitarianEngine(),
        create_pragmatist_engine(),
    ]


def load_builtin_engines(registry) -> List[str]:
    """
    Register every built-in engine not already present.

    Args:
        registry: EngineRegistry to populate

    Returns:
        Ids of the engines registered by this call
    """
    registered = []
    for engine in builtin_engines():
        if registry.has(engine.id):
            logger.debug(f"Engine {engine.id} already registered, skipping")
            continue
        registry.register(engine)
        registered.append(engine.id)

    logger.info(f"Loaded {len(registered)} built-in engines")
    return registered
