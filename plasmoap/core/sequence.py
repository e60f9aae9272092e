"""
Sequence handling utilities for PlasmoAP.

This module provides the residue classes the PlasmoAP rules are built on,
residue counting, the sliding-window scanner used to locate
asparagine/lysine-enriched stretches, and FASTA parsing and validation.
"""

from __future__ import annotations

import hashlib
from io import StringIO
from pathlib import Path
from typing import Callable, Iterator, Optional, Union

from Bio import SeqIO

from .models import ProteinRecord


# Standard amino acid alphabet
STANDARD_AA = frozenset("ACDEFGHIKLMNPQRSTVWY")

# Ambiguous and non-standard one-letter codes accepted in input
AMBIGUOUS_AA = frozenset("BXZJUO")

# Residue classes at neutral pH used by the PlasmoAP rules
ACIDIC_RESIDUES = frozenset("DE")
BASIC_RESIDUES = frozenset("HKR")
ASPARAGINE_LYSINE = frozenset("NK")


class SequenceError(Exception):
    """Exception raised for sequence-related errors."""
    pass


class SequenceValidator:
    """
    Validates protein sequences before scoring.

    Scoring itself tolerates any symbol (unknown residues simply count
    as neither acidic nor basic); validation exists so that badly formed
    input files are reported rather than silently scored.
    """

    def __init__(
        self,
        allow_ambiguous: bool = True,
        min_length: int = 1,
        max_length: Optional[int] = None,
    ):
        """
        Args:
            allow_ambiguous: Accept B, X, Z, J, U and O
            min_length: Minimum acceptable sequence length
            max_length: Maximum acceptable sequence length (None = unlimited)
        """
        self.allow_ambiguous = allow_ambiguous
        self.min_length = min_length
        self.max_length = max_length
        self.valid_chars = STANDARD_AA | AMBIGUOUS_AA if allow_ambiguous else STANDARD_AA

    def validate(self, sequence: str) -> tuple[bool, list[str]]:
        """
        Validate a protein sequence.

        Args:
            sequence: Protein sequence to validate

        Returns:
            Tuple of (is_valid, list of error messages)
        """
        errors = []
        seq = self.clean(sequence, replacement=None)

        invalid = set(seq) - self.valid_chars
        if invalid:
            errors.append(f"Invalid characters: {''.join(sorted(invalid))}")

        if len(seq) < self.min_length:
            errors.append(f"Sequence too short: {len(seq)} < {self.min_length}")

        if self.max_length is not None and len(seq) > self.max_length:
            errors.append(f"Sequence too long: {len(seq)} > {self.max_length}")

        return len(errors) == 0, errors

    def clean(self, sequence: str, replacement: Optional[str] = "") -> str:
        """
        Normalise a sequence: drop whitespace and a terminal stop, upper-case.

        Args:
            sequence: Raw sequence
            replacement: Substitute for invalid characters ("" removes them,
                None leaves them in place)

        Returns:
            Cleaned sequence
        """
        seq = "".join(sequence.split()).upper().rstrip("*")
        if replacement is None:
            return seq
        return "".join(c if c in self.valid_chars else replacement for c in seq)


def normalize_sequence(sequence: str) -> str:
    """Remove whitespace and upper-case a sequence; other symbols are kept."""
    return "".join(str(sequence).split()).upper()


def parse_fasta(
    source: Union[str, Path, StringIO],
    validate: bool = True,
    validator: Optional[SequenceValidator] = None,
) -> Iterator[ProteinRecord]:
    """
    Parse protein sequences from FASTA format.

    Args:
        source: File path, FASTA string, or open handle
        validate: Whether to validate sequences
        validator: Custom validator (uses default if None)

    Yields:
        ProteinRecord objects for each sequence

    Raises:
        SequenceError: If validation fails and validate=True
    """
    if validator is None:
        validator = SequenceValidator(allow_ambiguous=True)

    if isinstance(source, str) and (source.startswith(">") or "\n>" in source):
        handle = StringIO(source)
        close = False
    elif isinstance(source, (str, Path)):
        handle = open(source, "r")
        close = True
    else:
        handle = source
        close = False

    try:
        for record in SeqIO.parse(handle, "fasta"):
            seq_str = str(record.seq)

            if validate:
                is_valid, errors = validator.validate(seq_str)
                if not is_valid:
                    raise SequenceError(
                        f"Sequence '{record.id}' failed validation: {'; '.join(errors)}"
                    )
                seq_str = validator.clean(seq_str)

            try:
                yield ProteinRecord(
                    id=record.id,
                    description=record.description,
                    sequence=seq_str,
                )
            except ValueError as e:
                raise SequenceError(f"Sequence '{record.id}' is not usable: {e}") from e
    finally:
        if close:
            handle.close()


def sequence_hash(sequence: str) -> str:
    """
    Generate a unique hash for a sequence.

    Used as the cache key for signal peptide predictions. MD5 is used for
    speed, not security.
    """
    return hashlib.md5(normalize_sequence(sequence).encode()).hexdigest()


def count_residues(sequence: str, residues: frozenset[str]) -> int:
    """
    Count residues of a sequence that belong to a residue class.

    Every occurrence is counted; symbols outside the class (including
    non-standard ones) contribute nothing.
    """
    return sum(1 for aa in sequence if aa in residues)


def acidic_count(sequence: str) -> int:
    """Number of acidic residues (D, E)."""
    return count_residues(sequence, ACIDIC_RESIDUES)


def basic_count(sequence: str) -> int:
    """Number of basic residues (H, K, R)."""
    return count_residues(sequence, BASIC_RESIDUES)


def asparagine_lysine_count(sequence: str) -> int:
    """Combined number of asparagines and lysines."""
    return count_residues(sequence, ASPARAGINE_LYSINE)


class SlidingWindows:
    """
    Fixed-width windows over a sequence, in increasing offset order.

    Iterating yields (start, window) tuples lazily. The object can be
    iterated any number of times; each pass starts again at offset 0.
    A window wider than the sequence yields nothing.
    """

    def __init__(self, sequence: str, window_size: int, step: int = 1):
        if window_size < 1:
            raise ValueError(f"window_size must be positive, got {window_size}")
        if step < 1:
            raise ValueError(f"step must be positive, got {step}")
        self.sequence = sequence
        self.window_size = window_size
        self.step = step

    def __iter__(self) -> Iterator[tuple[int, str]]:
        size = self.window_size
        for i in range(0, len(self.sequence) - size + 1, self.step):
            yield i, self.sequence[i:i + size]

    def __len__(self) -> int:
        span = len(self.sequence) - self.window_size
        return span // self.step + 1 if span >= 0 else 0

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}(length={len(self.sequence)}, "
            f"window_size={self.window_size}, step={self.step})"
        )


def sliding_window(
    sequence: str,
    window_size: int,
    step: int = 1,
) -> SlidingWindows:
    """
    Generate sliding windows over a sequence.

    Args:
        sequence: Input sequence
        window_size: Size of each window
        step: Step size between windows

    Returns:
        Restartable iterable of (start_position, window_sequence) tuples
    """
    return SlidingWindows(sequence, window_size, step)


def find_first_window(
    sequence: str,
    window_size: int,
    predicate: Callable[[str], bool],
) -> Optional[tuple[int, str]]:
    """
    Find the first window satisfying a predicate.

    Scanning stops at the first match; later windows are never examined.

    Args:
        sequence: Sequence to scan
        window_size: Window width
        predicate: Test applied to each window's residues

    Returns:
        (start_position, window_sequence) of the first match, or None
    """
    return next(
        ((start, window) for start, window in sliding_window(sequence, window_size)
         if predicate(window)),
        None,
    )
