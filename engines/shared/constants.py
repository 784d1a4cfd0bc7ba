"""
Project Symposium - Confidence Bounds

Golden-ratio constants shared by engines, the registry and the orchestrator.
No insight or synthesis may claim more than PHI_INV confidence.
"""

PHI = 1.618033988749895
PHI_INV = 0.618033988749895    # confidence ceiling
PHI_INV_2 = 0.381966011250105  # unresolved-disagreement confidence

MAX_CONFIDENCE = PHI_INV
MIN_DOUBT = PHI_INV_2

# Confidence variance below which engines are considered to agree
CONSENSUS_VARIANCE_THRESHOLD = 0.01
CONSENSUS_BOOST = 1.1
