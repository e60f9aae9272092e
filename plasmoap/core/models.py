"""
Core data models for PlasmoAP.

This module defines the value objects produced while scoring a protein:
the protein record itself, the composition window selected by a rule,
the per-rule outcomes, and the final bounded score with its symbolic tier.
All models use Pydantic for validation and are frozen once built.
"""

from __future__ import annotations

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


# Bounds of the PlasmoAP score
MIN_POINTS = 0
MAX_POINTS = 5

# '+' and '++' were taken as apicoplast targeted in the paper
TARGETED_MIN_POINTS = 4


class InvariantViolation(Exception):
    """
    Raised when a score falls outside its valid range or disagrees with
    the rule outcomes it was derived from.

    Not a ValueError, so model construction raises it unwrapped.
    """
    pass


class TargetingTier(str, Enum):
    """
    Symbolic PlasmoAP prediction, as printed in the original publication.

    - NEGATIVE: 0-2 points, not targeted
    - UNCERTAIN: 3 points
    - POSITIVE: 4 points, targeted
    - STRONG: 5 points, targeted
    """
    NEGATIVE = "-"
    UNCERTAIN = "0"
    POSITIVE = "+"
    STRONG = "++"

    @classmethod
    def from_points(cls, points: int) -> TargetingTier:
        """Map a score in [0, 5] to its tier."""
        if points < MIN_POINTS or points > MAX_POINTS:
            raise InvariantViolation(f"Bad PlasmoAP score points: {points}")
        if points <= 2:
            return cls.NEGATIVE
        if points == 3:
            return cls.UNCERTAIN
        if points == 4:
            return cls.POSITIVE
        return cls.STRONG


class ProteinRecord(BaseModel):
    """
    A protein sequence to be scored.

    This is the unit handed around by FASTA parsing, batch scoring and
    the command-line interface.
    """
    model_config = ConfigDict(frozen=True)

    id: str = Field(..., description="Sequence identifier (first word of the FASTA header)")
    description: Optional[str] = Field(None, description="Full FASTA header")
    sequence: str = Field(..., min_length=1)

    @property
    def sequence_length(self) -> int:
        """Length of the protein sequence."""
        return len(self.sequence)

    @field_validator("sequence")
    @classmethod
    def validate_sequence(cls, v: str) -> str:
        """Strip whitespace and a terminal stop, and upper-case."""
        v = "".join(v.split()).upper().rstrip("*")
        if not v:
            raise ValueError("Sequence is empty")
        if not v.isalpha():
            invalid = {c for c in v if not c.isalpha()}
            raise ValueError(f"Invalid amino acid characters: {invalid}")
        return v


class Window(BaseModel):
    """
    A fixed-width stretch of the cleaved sequence selected by a rule.

    `start` is the 0-indexed offset within the cleaved sequence, not
    within the region that was scanned.
    """
    model_config = ConfigDict(frozen=True)

    start: int = Field(..., ge=0, description="0-indexed start position (inclusive)")
    sequence: str = Field(..., min_length=1)
    asparagine_lysine_count: int = Field(..., ge=0)
    basic_count: int = Field(..., ge=0)
    acidic_count: int = Field(..., ge=0)

    @property
    def end(self) -> int:
        """0-indexed end position (exclusive)."""
        return self.start + len(self.sequence)

    @property
    def length(self) -> int:
        return len(self.sequence)


class RuleSetOutcome(BaseModel):
    """
    Outcome of one of the two rule sets.

    `failed_criterion` names the first criterion that did not hold
    ("length", "leader", "enriched_window" or "window_ratio"); it is
    None when the set passed.
    """
    model_config = ConfigDict(frozen=True)

    passed: bool
    applicable: bool = True
    failed_criterion: Optional[str] = None
    window: Optional[Window] = None

    def __bool__(self) -> bool:
        return self.passed


class RuleOutcomes(BaseModel):
    """The three rule outcomes for a cleaved sequence."""
    model_config = ConfigDict(frozen=True)

    set1: RuleSetOutcome
    set2: RuleSetOutcome
    # True: first charged residue is basic, False: acidic, None: no charged residue
    additional: Optional[bool] = None

    @property
    def points(self) -> int:
        """Two points per passing rule set, one for the additional rule."""
        points = 0
        if self.set1.passed:
            points += 2
        if self.set2.passed:
            points += 2
        if self.additional is True:
            points += 1
        return points


class PlasmoAPResult(BaseModel):
    """
    PlasmoAP score for a single protein.

    Only the points are stored; the tier and the targeting call are
    derived from them on access so the three can never disagree.
    """
    model_config = ConfigDict(frozen=True)

    points: int
    has_signal_peptide: bool = False
    outcomes: Optional[RuleOutcomes] = Field(
        None, description="Rule outcomes (absent when no signal peptide was found)"
    )

    @field_validator("points")
    @classmethod
    def validate_points(cls, v: int) -> int:
        if v < MIN_POINTS or v > MAX_POINTS:
            raise InvariantViolation(f"Bad PlasmoAP score points: {v}")
        return v

    @model_validator(mode="after")
    def check_outcomes(self) -> PlasmoAPResult:
        if self.outcomes is not None and self.outcomes.points != self.points:
            raise InvariantViolation(
                f"Score of {self.points} points does not match rule outcomes "
                f"worth {self.outcomes.points}"
            )
        return self

    @property
    def tier(self) -> TargetingTier:
        return TargetingTier.from_points(self.points)

    @property
    def apicoplast_targeted(self) -> bool:
        """Whether the score reaches the '+' or '++' tier."""
        return self.points >= TARGETED_MIN_POINTS

    @property
    def predicted(self) -> bool:
        return self.apicoplast_targeted

    def __str__(self) -> str:
        return self.tier.value


class ScoredProtein(BaseModel):
    """
    Batch scoring entry: a protein with either its result or the reason
    it could not be scored.
    """
    model_config = ConfigDict(frozen=True)

    protein: ProteinRecord
    result: Optional[PlasmoAPResult] = None
    error_message: Optional[str] = None
    runtime_seconds: Optional[float] = Field(None, ge=0)

    @property
    def success(self) -> bool:
        """Whether scoring completed successfully."""
        return self.error_message is None
