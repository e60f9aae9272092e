"""
PlasmoAP: prediction of apicoplast targeting in Plasmodium falciparum.

Most nuclear-encoded apicoplast proteins of the malaria parasite reach the
organelle through a bipartite leader: a classical signal peptide that
routes them into the secretory pathway, followed by a transit peptide that
is depleted in acidic residues and enriched in basic residues, asparagines
and lysines. PlasmoAP scores a protein on these features with fixed rules
from the original publication and reports 0-5 points:

    0-2  '-'   not targeted
    3    '0'   uncertain
    4    '+'   targeted
    5    '++'  targeted

Key components:
    - core: Protein and result models, residue counting, sliding windows
    - predictors: Signal peptide prediction (SignalP 3.0 wrapper)
    - scoring: Targeting rules and the PlasmoAP scorer
    - cli: Command-line interface

Basic usage:
    >>> from plasmoap import score
    >>> result = score(sequence)  # signal peptide predicted with SignalP
    >>> result = score(sequence, has_signal_peptide=True, cleaved_sequence=mature)
    >>> print(result.points, result.tier.value, result.apicoplast_targeted)

Reference:
    Foth BJ et al. (2003) Science 299:705-708. PMID: 12560551

License: MIT
"""

__version__ = "0.1.0"

from .core.models import (
    InvariantViolation,
    PlasmoAPResult,
    ProteinRecord,
    RuleOutcomes,
    RuleSetOutcome,
    ScoredProtein,
    TargetingTier,
    Window,
)
from .core.sequence import SequenceError, parse_fasta
from .predictors.base import (
    EnvironmentMismatchError,
    PredictorConfig,
    PredictorError,
    SignalPeptidePrediction,
    SignalPeptidePredictor,
    get_predictor,
    list_predictors,
)
from .predictors.signalp import SignalP3Predictor
from .scoring import InputContractError, PlasmoAP, RuleEvaluator, score


__all__ = [
    # Version
    "__version__",
    # Main entry points
    "score",
    "PlasmoAP",
    "RuleEvaluator",
    # Models
    "ProteinRecord",
    "PlasmoAPResult",
    "TargetingTier",
    "RuleOutcomes",
    "RuleSetOutcome",
    "Window",
    "ScoredProtein",
    # Sequence utilities
    "parse_fasta",
    # Predictor system
    "SignalPeptidePredictor",
    "SignalPeptidePrediction",
    "SignalP3Predictor",
    "PredictorConfig",
    "get_predictor",
    "list_predictors",
    # Exceptions
    "InputContractError",
    "EnvironmentMismatchError",
    "InvariantViolation",
    "PredictorError",
    "SequenceError",
]
