"""
Core data structures and utilities for PlasmoAP.

Modules:
    models: Pydantic models for proteins, rule outcomes and scores
    sequence: Residue classes, counting, sliding windows and FASTA parsing
"""

from .models import (
    InvariantViolation,
    PlasmoAPResult,
    ProteinRecord,
    RuleOutcomes,
    RuleSetOutcome,
    ScoredProtein,
    TargetingTier,
    Window,
)
from .sequence import (
    ACIDIC_RESIDUES,
    ASPARAGINE_LYSINE,
    BASIC_RESIDUES,
    STANDARD_AA,
    SequenceError,
    SequenceValidator,
    SlidingWindows,
    acidic_count,
    asparagine_lysine_count,
    basic_count,
    count_residues,
    find_first_window,
    normalize_sequence,
    parse_fasta,
    sequence_hash,
    sliding_window,
)

__all__ = [
    # Models
    "ProteinRecord",
    "Window",
    "RuleSetOutcome",
    "RuleOutcomes",
    "PlasmoAPResult",
    "ScoredProtein",
    "TargetingTier",
    "InvariantViolation",
    # Sequence utilities
    "SequenceValidator",
    "SequenceError",
    "SlidingWindows",
    "parse_fasta",
    "sequence_hash",
    "normalize_sequence",
    "count_residues",
    "acidic_count",
    "basic_count",
    "asparagine_lysine_count",
    "sliding_window",
    "find_first_window",
    "STANDARD_AA",
    "ACIDIC_RESIDUES",
    "BASIC_RESIDUES",
    "ASPARAGINE_LYSINE",
]
