"""
Kantian Duty Engine

Tests the maxim behind a proposed action against the categorical imperative:
- Universal law: could everyone act on this maxim without contradiction?
- Humanity: does it treat a person merely as a means?
"""

import re
from typing import Any, Dict

from engines.shared.base_engine import Engine, EngineDomain, input_text
from engines.shared.schemas import Insight


class KantianEngine(Engine):
    """
    Kantian Engine - deontological ethics.

    Depends on the fallacy detector for the consistency check of a maxim.
    """

    def __init__(self):
        """Initialize Kantian engine"""
        super().__init__(
            id="kantian",
            name="Kantian Duty Engine",
            domain=EngineDomain.ETHICS,
            capabilities=["deontology", "moral-evaluation"],
            dependencies=["fallacy-detector"],
            description="Categorical imperative: universal law and humanity formulas",
            tradition="kantian"
        )

        # Maxims that contradict themselves when universalized
        self.universal_law_violations = {
            "deception": r'\b(lie|lying|deceiv\w*|mislead\w*|cheat\w*)\b',
            "false promise": r'\b(break(ing)? (a|the|my) promise|false promise)\b',
            "theft": r'\b(steal\w*|theft)\b',
        }
        # Treating persons merely as means
        self.humanity_violations = {
            "instrumentalization": r'\b(us(e|ing) (him|her|them|people)|means to an end)\b',
            "manipulation": r'\bmanipulat\w*',
            "coercion": r'\b(coerc\w*|force (him|her|them))\b',
        }
        self.duty_markers = r'\b(duty|obligation|promise|consent|respect|right)s?\b'

    async def assess(self, input: Any, context: Dict[str, Any]) -> Insight:
        text = input_text(input)

        universal = [n for n, p in self.universal_law_violations.items() if re.search(p, text, re.IGNORECASE)]
        humanity = [n for n, p in self.humanity_violations.items() if re.search(p, text, re.IGNORECASE)]
        duty_mentions = len(re.findall(self.duty_markers, text, re.IGNORECASE))

        reasoning = []
        if universal:
            reasoning.append(f"Universal law fails for: {', '.join(universal)}")
        else:
            reasoning.append("No self-defeating maxim detected under universalization")
        if humanity:
            reasoning.append(f"Humanity formula violated by: {', '.join(humanity)}")
        if duty_mentions:
            reasoning.append(f"{duty_mentions} explicit duty or right at stake")

        if universal or humanity:
            content = "Impermissible: the maxim cannot be willed as universal law or uses persons merely as means"
            confidence = 0.55 + 0.05 * (len(universal) + len(humanity))
        else:
            content = "Permissible if done from duty and with respect for every person involved"
            confidence = 0.4 + 0.05 * min(duty_mentions, 3)

        return self.create_insight(
            content,
            confidence,
            reasoning,
            {"universal_law": universal, "humanity": humanity}
        )
