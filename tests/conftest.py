"""
Shared fixtures.

The published test constructs are built from the ACP leader of
P. falciparum (Foth et al. 2003, supplementary material): a signal
peptide, a transit peptide and the rest of the protein. Mutants change
single transit peptide residues.
"""

from typing import Optional

import pytest

from plasmoap.predictors.base import (
    PredictorConfig,
    SignalPeptidePrediction,
    SignalPeptidePredictor,
)


SIGNAL = "MKILLLCIIFLYYVNA"
TRANSIT = "FKNTQKDGVSLQILKKKRSNQVNF"
REST = (
    "LNRKNDYNLIKNKNPSSSLKSTFDDIKKIISKQLSVEEDKIQMNSNFTKDLGADSLDLVELIMALEEK"
    "FNVTISDQDALKINTVQDAIDYIEKNNKQ"
)


def mutate(sequence: str, **substitutions: str) -> str:
    """Substitute residues by 0-indexed position, e.g. mutate(s, p1="A")."""
    residues = list(sequence)
    for key, residue in substitutions.items():
        residues[int(key[1:])] = residue
    return "".join(residues)


class FakeSignalPeptidePredictor(SignalPeptidePredictor):
    """
    Stand-in for SignalP: predicts a signal peptide cleaved after the ACP
    signal sequence whenever a sequence starts with it.
    """

    name = "FakeSignalP"
    version = "3.0"

    def __init__(self, algorithm_version: str = "3.0"):
        super().__init__(PredictorConfig(use_cache=False, max_retries=1))
        self.algorithm_version = algorithm_version
        self.calls: list[str] = []

    def _predict_impl(self, sequence: str) -> SignalPeptidePrediction:
        self.calls.append(sequence)
        has_signal = sequence.startswith(SIGNAL)
        cleavage: Optional[int] = len(SIGNAL) + 1 if has_signal else None
        return SignalPeptidePrediction(
            algorithm_version=self.algorithm_version,
            has_classical_signal_peptide=has_signal,
            cleavage_position=cleavage,
        )


@pytest.fixture
def fake_predictor():
    return FakeSignalPeptidePredictor()


@pytest.fixture
def published_constructs():
    """(name, sequence, points, tier) for the paper's constructs."""
    return [
        ("base", SIGNAL + TRANSIT + REST, 5, "++"),
        ("no signal peptide", "M" + TRANSIT + REST, 0, "-"),
        ("no transit peptide", SIGNAL + REST, 1, "-"),
        ("2 A changes", SIGNAL + mutate(TRANSIT, p1="A", p5="A") + REST, 4, "+"),
        ("1 E change", SIGNAL + mutate(TRANSIT, p5="E") + REST, 5, "++"),
        ("another 1 E change", SIGNAL + mutate(TRANSIT, p1="E") + REST, 4, "+"),
        ("2 E change", SIGNAL + mutate(TRANSIT, p1="E", p5="E") + REST, 0, "-"),
        ("2 D change", SIGNAL + mutate(TRANSIT, p1="D", p5="D") + REST, 0, "-"),
        ("3 A change", SIGNAL + mutate(TRANSIT, p10="A", p12="A", p13="A") + REST, 5, "++"),
    ]
