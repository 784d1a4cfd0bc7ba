"""
Utilitarian Engine

Weighs the expected benefits of an action against its harms and scales the
verdict by how many people are affected.
"""

import re
from typing import Any, Dict

from engines.shared.base_engine import Engine, EngineDomain, input_text
from engines.shared.schemas import Insight


class UtilitarianEngine(Engine):
    """Utilitarian Engine - greatest good for the greatest number."""

    def __init__(self):
        """Initialize Utilitarian engine"""
        super().__init__(
            id="utilitarian",
            name="Utilitarian Engine",
            domain=EngineDomain.ETHICS,
            subdomains=[EngineDomain.ECONOMICS, EngineDomain.DECISION],
            capabilities=["consequentialism", "moral-evaluation", "cost-benefit"],
            description="Net welfare across everyone affected",
            tradition="utilitarian"
        )

        self.benefit_terms = r'\b(help\w*|save\w*|benefit\w*|happ\w+|welfare|well-being|improv\w*|protect\w*)\b'
        self.harm_terms = r'\b(harm\w*|hurt\w*|suffer\w*|kill\w*|pain\w*|damag\w*|cost\w*|los[es]\w*)\b'
        self.scale_terms = r'\b(everyone|many|thousands|millions|community|society|public)\b'

    async def assess(self, input: Any, context: Dict[str, Any]) -> Insight:
        text = input_text(input)

        benefits = len(re.findall(self.benefit_terms, text, re.IGNORECASE))
        harms = len(re.findall(self.harm_terms, text, re.IGNORECASE))
        scale = len(re.findall(self.scale_terms, text, re.IGNORECASE))
        net = benefits - harms
        total = benefits + harms

        reasoning = [
            f"Benefits identified: {benefits}",
            f"Harms identified: {harms}",
        ]
        if scale:
            reasoning.append("Consequences reach many people; weigh aggregate welfare")

        if total == 0:
            content = "Consequences are unclear; gather evidence on who is affected and how"
            confidence = 0.3
        elif net > 0:
            content = "Likely justified: expected benefits outweigh expected harms"
            confidence = 0.4 + 0.3 * (net / total)
        elif net < 0:
            content = "Likely unjustified: expected harms outweigh expected benefits"
            confidence = 0.4 + 0.3 * (-net / total)
        else:
            content = "Benefits and harms balance; prefer the option that harms fewest"
            confidence = 0.35

        if scale:
            confidence += 0.05

        return self.create_insight(
            content,
            confidence,
            reasoning,
            {"benefits": benefits, "harms": harms, "net_utility": net, "scale": scale}
        )
