"""
PlasmoAP targeting rules.

Apicoplast-targeted proteins of Plasmodium falciparum carry a bipartite
leader: a secretory signal peptide followed by a transit peptide that is
depleted in acidic residues and enriched in basic residues, asparagines
and lysines. PlasmoAP captures this with two rule sets evaluated on the
mature sequence downstream of the signal peptide cleavage site, plus one
additional point for the charge of the first charged residue.

Set 1 (2 points): i) starts with a signal peptide, ii) the 15 amino acids
following the cleavage site contain no more than 2 acidic residues,
iii) the 80 amino acids following the cleavage site contain a stretch of
40 amino acids with at least 9 asparagines and/or lysines, and iv) that
region has a ratio of basic to acidic residues of at least 5 to 3.

Set 2 (2 points): i) starts with a signal peptide, ii) the 22 amino acids
following the cleavage site have a basic to acidic ratio of at least
10 to 7, iii) as Set 1 iii) but starting after those 22 residues, and
iv) that region has a basic to acidic ratio of at least 10 to 9.

Additional point (1 point): the first charged residue after the cleavage
site is basic.

Reference:
    Foth BJ, Ralph SA, Tonkin CJ, Struck NS, Fraunholz M, Roos DS,
    Cowman AF, McFadden GI. (2003) Dissecting apicoplast targeting in the
    malaria parasite Plasmodium falciparum. Science 299:705-708.
    PMID: 12560551
"""

from __future__ import annotations

import logging
from fractions import Fraction
from typing import Optional

from ..core.models import RuleOutcomes, RuleSetOutcome, Window
from ..core.sequence import (
    ACIDIC_RESIDUES,
    BASIC_RESIDUES,
    acidic_count,
    asparagine_lysine_count,
    basic_count,
    find_first_window,
)

logger = logging.getLogger(__name__)


def meets_ratio(basic: int, acidic: int, ratio: Fraction) -> bool:
    """
    Whether basic / acidic >= ratio.

    With no acidic residues any basic residue satisfies the ratio; with
    neither the ratio is undefined and is not satisfied.
    """
    if acidic == 0:
        return basic > 0
    return Fraction(basic, acidic) >= ratio


class RuleEvaluator:
    """
    Evaluates the PlasmoAP rules on a cleaved (mature) sequence.

    All thresholds are the fixed constants of the published method.
    """

    # Set 1
    SET1_LEADER_LENGTH = 15
    SET1_MAX_LEADER_ACIDIC = 2
    SET1_WINDOW_RATIO = Fraction(5, 3)

    # Set 2
    SET2_LEADER_LENGTH = 22
    SET2_LEADER_RATIO = Fraction(10, 7)
    SET2_WINDOW_RATIO = Fraction(10, 9)

    # Asparagine/lysine-enriched stretch, shared by both sets
    SEARCH_REGION_LENGTH = 80
    WINDOW_SIZE = 40
    MIN_ASPARAGINE_LYSINE = 9

    def find_enriched_window(self, cleaved: str, region_start: int) -> Optional[Window]:
        """
        First 40-residue stretch with at least 9 N+K in the 80 residues
        following `region_start`.

        Args:
            cleaved: Mature sequence
            region_start: Offset at which the 80-residue search region begins

        Returns:
            The first qualifying Window (offset relative to `cleaved`), or None
        """
        region = cleaved[region_start:region_start + self.SEARCH_REGION_LENGTH]
        hit = find_first_window(
            region,
            self.WINDOW_SIZE,
            lambda window: asparagine_lysine_count(window) >= self.MIN_ASPARAGINE_LYSINE,
        )
        if hit is None:
            return None

        offset, residues = hit
        return Window(
            start=region_start + offset,
            sequence=residues,
            asparagine_lysine_count=asparagine_lysine_count(residues),
            basic_count=basic_count(residues),
            acidic_count=acidic_count(residues),
        )

    def evaluate_set1(self, cleaved: str) -> RuleSetOutcome:
        # Needs at least one residue past the leader
        if len(cleaved) <= self.SET1_LEADER_LENGTH:
            return RuleSetOutcome(passed=False, applicable=False, failed_criterion="length")

        leader = cleaved[:self.SET1_LEADER_LENGTH]
        if acidic_count(leader) > self.SET1_MAX_LEADER_ACIDIC:
            return RuleSetOutcome(passed=False, failed_criterion="leader")

        window = self.find_enriched_window(cleaved, self.SET1_LEADER_LENGTH)
        if window is None:
            return RuleSetOutcome(passed=False, failed_criterion="enriched_window")

        if not meets_ratio(window.basic_count, window.acidic_count, self.SET1_WINDOW_RATIO):
            return RuleSetOutcome(passed=False, failed_criterion="window_ratio", window=window)

        return RuleSetOutcome(passed=True, window=window)

    def evaluate_set2(self, cleaved: str) -> RuleSetOutcome:
        if len(cleaved) < self.SET2_LEADER_LENGTH:
            return RuleSetOutcome(passed=False, applicable=False, failed_criterion="length")

        leader = cleaved[:self.SET2_LEADER_LENGTH]
        if not meets_ratio(basic_count(leader), acidic_count(leader), self.SET2_LEADER_RATIO):
            return RuleSetOutcome(passed=False, failed_criterion="leader")

        window = self.find_enriched_window(cleaved, self.SET2_LEADER_LENGTH)
        if window is None:
            return RuleSetOutcome(passed=False, failed_criterion="enriched_window")

        if not meets_ratio(window.basic_count, window.acidic_count, self.SET2_WINDOW_RATIO):
            return RuleSetOutcome(passed=False, failed_criterion="window_ratio", window=window)

        return RuleSetOutcome(passed=True, window=window)

    def evaluate_additional(self, cleaved: str) -> Optional[bool]:
        """
        Charge of the first charged residue.

        Returns:
            True if it is basic, False if acidic, None if the sequence has
            no charged residue
        """
        for residue in cleaved:
            if residue in BASIC_RESIDUES:
                return True
            if residue in ACIDIC_RESIDUES:
                return False
        return None

    def evaluate(self, cleaved: str) -> RuleOutcomes:
        """Evaluate all three rules on a mature sequence."""
        outcomes = RuleOutcomes(
            set1=self.evaluate_set1(cleaved),
            set2=self.evaluate_set2(cleaved),
            additional=self.evaluate_additional(cleaved),
        )
        logger.debug(
            f"Rules: set1={outcomes.set1.passed} set2={outcomes.set2.passed} "
            f"additional={outcomes.additional} -> {outcomes.points} points"
        )
        return outcomes
