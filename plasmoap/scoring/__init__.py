"""
PlasmoAP scoring.

Submodules:
    rules: The two rule sets and the additional point, on mature sequences
    scorer: Signal peptide resolution, score aggregation and batch scoring
"""

from .rules import RuleEvaluator, meets_ratio
from .scorer import (
    DEFAULT_PREDICTOR,
    EXPECTED_SIGNALP_VERSION,
    InputContractError,
    PlasmoAP,
    score,
)

__all__ = [
    "RuleEvaluator",
    "meets_ratio",
    "PlasmoAP",
    "score",
    "InputContractError",
    "DEFAULT_PREDICTOR",
    "EXPECTED_SIGNALP_VERSION",
]
