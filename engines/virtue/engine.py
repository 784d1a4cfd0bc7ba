"""
Stoic Virtue Engine

Evaluates questions through the Stoic dichotomy of control:
- Separate what is up to us (judgement, intention, action) from what is not
- Flag passions (anger, fear, envy) that cloud judgement
- Point the question back at the cardinal virtues
"""

import re
from typing import Any, Dict, List

from engines.shared.base_engine import Engine, EngineDomain, input_text
from engines.shared.schemas import Insight


class StoicEngine(Engine):
    """
    Stoic Engine - virtue ethics from the Stoa.

    Capabilities:
    - virtue-ethics: judge an action by the character it expresses
    - moral-evaluation: general moral assessment
    """

    def __init__(self):
        """Initialize Stoic engine"""
        super().__init__(
            id="stoic",
            name="Stoic Virtue Engine",
            domain=EngineDomain.ETHICS,
            subdomains=[EngineDomain.MIND],
            capabilities=["virtue-ethics", "moral-evaluation"],
            description="Dichotomy of control and the cardinal virtues",
            tradition="stoic"
        )

        self.external_patterns = {
            "reputation": r'\b(reputation|opinion|praise|blame|status)\b',
            "wealth": r'\b(money|wealth|profit|salary|rich)\b',
            "outcome": r'\b(outcome|result|luck|fate|future)\b',
            "others": r'\b(they|others|people|colleague|boss)\b',
        }
        self.passion_patterns = {
            "anger": r'\b(anger|angry|furious|rage|resent)\w*',
            "fear": r'\b(fear|afraid|anxious|worry|worried)\w*',
            "desire": r'\b(crave|envy|envious|greed|want)\w*',
        }

    def _matches(self, patterns: Dict[str, str], text: str) -> List[str]:
        return [name for name, pattern in patterns.items() if re.search(pattern, text, re.IGNORECASE)]

    async def assess(self, input: Any, context: Dict[str, Any]) -> Insight:
        text = input_text(input)
        externals = self._matches(self.external_patterns, text)
        passions = self._matches(self.passion_patterns, text)

        reasoning = ["Some things are up to us, others are not (Enchiridion 1)"]
        if externals:
            reasoning.append(f"Not up to us: {', '.join(externals)}")
        if passions:
            reasoning.append(f"Passions to examine before acting: {', '.join(passions)}")
        reasoning.append("Act from justice, courage, temperance and wisdom; accept the rest")

        if externals or passions:
            content = (
                "Focus on your own judgement and conduct; "
                f"{', '.join(externals + passions)} lie outside your control"
            )
        else:
            content = "The matter is within your control: choose the virtuous action and own it"

        confidence = 0.45 + 0.05 * len(externals) + 0.05 * len(passions)

        return self.create_insight(
            content,
            confidence,
            reasoning,
            {"externals": externals, "passions": passions}
        )
