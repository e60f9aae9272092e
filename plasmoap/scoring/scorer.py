"""
PlasmoAP scoring entry point.

`PlasmoAP.calculate_score` resolves whether a sequence starts with a
classical signal peptide (either supplied by the caller together with the
cleaved sequence, or predicted with SignalP 3.0), short-circuits to zero
points when it does not, and otherwise evaluates the targeting rules on the
mature sequence.

Usage:
    >>> from plasmoap import PlasmoAP
    >>> scorer = PlasmoAP()
    >>> result = scorer.calculate_score(sequence)               # via SignalP
    >>> result = scorer.calculate_score(sequence, True, mature)  # explicit
    >>> print(result.points, result, result.apicoplast_targeted)
"""

from __future__ import annotations

import logging
import time
from concurrent.futures import ThreadPoolExecutor
from typing import Callable, Optional, Sequence

from ..core.models import PlasmoAPResult, ProteinRecord, ScoredProtein
from ..core.sequence import normalize_sequence
from ..predictors.base import (
    EnvironmentMismatchError,
    PredictorConfig,
    PredictorError,
    SignalPeptidePredictor,
    get_predictor,
)
from .rules import RuleEvaluator

logger = logging.getLogger(__name__)

DEFAULT_PREDICTOR = "SignalP"

# Version of the signal peptide predictor the thresholds are calibrated for
EXPECTED_SIGNALP_VERSION = "3.0"


class InputContractError(ValueError):
    """Raised when a signal peptide flag is given without a cleaved sequence."""
    pass


class PlasmoAP:
    """
    Apicoplast targeting predictor for Plasmodium falciparum proteins.

    The signal peptide predictor is created on first use, so scoring with
    an explicit signal peptide flag never needs SignalP installed.

    Attributes:
        rules: RuleEvaluator applied to mature sequences
        expected_version: Predictor algorithm version that is accepted
    """

    name = "PlasmoAP"
    citation = (
        "Foth BJ, Ralph SA, Tonkin CJ, Struck NS, Fraunholz M, Roos DS, "
        "Cowman AF, McFadden GI. (2003) Dissecting apicoplast targeting in the "
        "malaria parasite Plasmodium falciparum. Science 299:705-708."
    )

    def __init__(
        self,
        predictor: Optional[SignalPeptidePredictor] = None,
        config: Optional[PredictorConfig] = None,
        predictor_name: str = DEFAULT_PREDICTOR,
    ):
        """
        Args:
            predictor: Signal peptide predictor (default: SignalP, created lazily)
            config: Configuration used when creating the default predictor
            predictor_name: Registered predictor to create when none is given
        """
        self._predictor = predictor
        self._config = config
        self._predictor_name = predictor_name
        self.rules = RuleEvaluator()
        self.expected_version = EXPECTED_SIGNALP_VERSION

    @property
    def predictor(self) -> SignalPeptidePredictor:
        if self._predictor is None:
            self._predictor = get_predictor(self._predictor_name, self._config)
        return self._predictor

    def calculate_score(
        self,
        sequence: str,
        has_signal_peptide: Optional[bool] = None,
        cleaved_sequence: Optional[str] = None,
    ) -> PlasmoAPResult:
        """
        Calculate the PlasmoAP score for a protein sequence.

        Args:
            sequence: Amino acid sequence
            has_signal_peptide: Whether the sequence has a classical signal
                peptide. None means it is predicted with SignalP.
            cleaved_sequence: Sequence after signal peptide cleavage; required
                whenever has_signal_peptide is given

        Returns:
            PlasmoAPResult with 0-5 points

        Raises:
            InputContractError: has_signal_peptide given without cleaved_sequence
            EnvironmentMismatchError: The predictor is not SignalP 3.0
            PredictorError: The predictor failed
        """
        sequence = normalize_sequence(sequence)

        if has_signal_peptide is None:
            prediction = self.predictor.predict(sequence)
            if prediction.algorithm_version != self.expected_version:
                raise EnvironmentMismatchError(
                    f"PlasmoAP uses SignalP version {self.expected_version}, but "
                    f"version {prediction.algorithm_version} was found"
                )
            has_signal_peptide = prediction.has_classical_signal_peptide
            cleaved_sequence = self.predictor.cleave(sequence, prediction)
        elif cleaved_sequence is None:
            raise InputContractError(
                "if has_signal_peptide is given, cleaved_sequence must be given as well"
            )

        # Both rule sets require a signal peptide
        if not has_signal_peptide:
            return PlasmoAPResult(points=0, has_signal_peptide=False)

        outcomes = self.rules.evaluate(normalize_sequence(cleaved_sequence))
        return PlasmoAPResult(points=outcomes.points, has_signal_peptide=True, outcomes=outcomes)

    def score_protein(self, protein: ProteinRecord) -> ScoredProtein:
        """
        Score one protein, recording predictor failures instead of raising.

        A predictor version mismatch is not recorded: it affects every
        sequence and is raised.
        """
        start_time = time.time()
        try:
            result = self.calculate_score(protein.sequence)
        except EnvironmentMismatchError:
            raise
        except PredictorError as e:
            logger.warning(f"{protein.id}: {e}")
            return ScoredProtein(protein=protein, error_message=str(e))

        return ScoredProtein(
            protein=protein,
            result=result,
            runtime_seconds=time.time() - start_time,
        )

    def score_records(
        self,
        proteins: Sequence[ProteinRecord],
        max_workers: int = 0,
        progress_callback: Optional[Callable[[int, int], None]] = None,
    ) -> list[ScoredProtein]:
        """
        Score multiple proteins.

        Each protein is scored independently, so with max_workers > 0 the
        predictor calls run in a thread pool. Results keep input order.

        Args:
            proteins: Proteins to score
            max_workers: Thread pool size (0 = sequential)
            progress_callback: Optional callback(current, total)

        Returns:
            List of ScoredProtein, one per input protein
        """
        total = len(proteins)
        results = []

        if max_workers > 0:
            # Resolve the lazy predictor before threads race to create it
            predictor = self.predictor
            logger.debug(f"Scoring {total} proteins with {predictor!r} ({max_workers} workers)")
            with ThreadPoolExecutor(max_workers=max_workers) as executor:
                for i, scored in enumerate(executor.map(self.score_protein, proteins)):
                    results.append(scored)
                    if progress_callback:
                        progress_callback(i + 1, total)
            return results

        for i, protein in enumerate(proteins):
            results.append(self.score_protein(protein))
            if progress_callback:
                progress_callback(i + 1, total)

        return results

    def get_info(self) -> dict:
        """Rule constants and citation, for documentation and the CLI."""
        rules = self.rules
        return {
            "name": self.name,
            "citation": self.citation,
            "signalp_version": self.expected_version,
            "set1": {
                "leader_length": rules.SET1_LEADER_LENGTH,
                "max_leader_acidic": rules.SET1_MAX_LEADER_ACIDIC,
                "window_ratio": str(rules.SET1_WINDOW_RATIO),
            },
            "set2": {
                "leader_length": rules.SET2_LEADER_LENGTH,
                "leader_ratio": str(rules.SET2_LEADER_RATIO),
                "window_ratio": str(rules.SET2_WINDOW_RATIO),
            },
            "window": {
                "search_region": rules.SEARCH_REGION_LENGTH,
                "size": rules.WINDOW_SIZE,
                "min_asparagine_lysine": rules.MIN_ASPARAGINE_LYSINE,
            },
        }


def score(
    sequence: str,
    has_signal_peptide: Optional[bool] = None,
    cleaved_sequence: Optional[str] = None,
    predictor: Optional[SignalPeptidePredictor] = None,
) -> PlasmoAPResult:
    """
    Score a single sequence.

    Convenience wrapper around `PlasmoAP.calculate_score`.

    Example:
        >>> from plasmoap import score
        >>> result = score(sequence, has_signal_peptide=True, cleaved_sequence=mature)
        >>> result.points, str(result)
        (5, '++')
    """
    return PlasmoAP(predictor=predictor).calculate_score(
        sequence, has_signal_peptide, cleaved_sequence
    )
