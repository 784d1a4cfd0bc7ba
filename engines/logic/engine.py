"""
Fallacy Detector Engine

Scans an argument for common informal fallacies:
- Ad hominem
- Slippery slope
- False dilemma
- Appeal to popularity
- Hasty generalization
"""

import re
from typing import Any, Dict

from engines.shared.base_engine import Engine, EngineDomain, input_text
from engines.shared.schemas import Insight


class FallacyEngine(Engine):
    """Fallacy Detector - argument analysis in the informal logic tradition."""

    def __init__(self):
        """Initialize Fallacy Detector engine"""
        super().__init__(
            id="fallacy-detector",
            name="Fallacy Detector",
            domain=EngineDomain.LOGIC,
            subdomains=[EngineDomain.EPISTEMOLOGY, EngineDomain.LANGUAGE],
            capabilities=["fallacy-detection", "argument-analysis"],
            description="Detects informal fallacies in arguments",
            tradition="informal-logic"
        )

        self.fallacy_patterns = {
            "ad_hominem": r"\b(you'?re|he'?s|she'?s|they'?re) (an? )?(idiot|liar|fool|hypocrite)s?\b",
            "slippery_slope": r'\b(will (inevitably )?lead to|next thing|before you know it|where does it end)\b',
            "false_dilemma": r'\b(either\b.*\bor\b|only two (options|choices)|no other (option|choice))',
            "appeal_to_popularity": r'\b(everyone (knows|agrees|does)|most people (think|believe))\b',
            "hasty_generalization": r'\b(all|every|always|never) \w+ (are|is|do|does)\b',
        }

    async def assess(self, input: Any, context: Dict[str, Any]) -> Insight:
        text = input_text(input)

        detected = [
            name for name, pattern in self.fallacy_patterns.items()
            if re.search(pattern, text, re.IGNORECASE)
        ]

        if detected:
            labels = [name.replace("_", " ") for name in detected]
            content = f"Argument relies on {len(detected)} fallacious move(s): {', '.join(labels)}"
            reasoning = [f"Detected {label}" for label in labels]
            confidence = 0.5 + 0.05 * len(detected)
        else:
            content = "No common informal fallacy detected; soundness still depends on the premises"
            reasoning = ["Checked ad hominem, slippery slope, false dilemma, popularity and generalization"]
            confidence = 0.35

        return self.create_insight(content, confidence, reasoning, {"fallacies": detected})
