#!/usr/bin/env python3
"""
PlasmoAP Example: Dissecting the ACP leader

Scores the acyl carrier protein (ACP) of Plasmodium falciparum and the
transit peptide mutants used to establish the PlasmoAP rules. The signal
peptide is given explicitly, so SignalP does not need to be installed.

Run with: python examples/basic_usage.py
"""

from plasmoap import PlasmoAP

SIGNAL = "MKILLLCIIFLYYVNA"
TRANSIT = "FKNTQKDGVSLQILKKKRSNQVNF"
REST = (
    "LNRKNDYNLIKNKNPSSSLKSTFDDIKKIISKQLSVEEDKIQMNSNFTKDLGADSLDLVELIMALEEK"
    "FNVTISDQDALKINTVQDAIDYIEKNNKQ"
)


def mutate(sequence: str, substitutions: dict[int, str]) -> str:
    residues = list(sequence)
    for position, residue in substitutions.items():
        residues[position] = residue
    return "".join(residues)


def print_header(title: str):
    """Print a formatted section header."""
    print("\n" + "=" * 70)
    print(f"  {title}")
    print("=" * 70)


def describe(scorer: PlasmoAP, name: str, transit: str):
    result = scorer.calculate_score(SIGNAL + transit + REST, True, transit + REST)
    outcomes = result.outcomes

    print(f"\n{name}")
    print(f"  Score: {result.points} ({result})  targeted: {result.apicoplast_targeted}")
    for label, outcome in (("Set 1", outcomes.set1), ("Set 2", outcomes.set2)):
        status = "pass" if outcome.passed else f"fail ({outcome.failed_criterion})"
        print(f"  {label}: {status}")
        if outcome.window is not None:
            window = outcome.window
            print(
                f"    window {window.start}-{window.end}: "
                f"N+K={window.asparagine_lysine_count} "
                f"basic={window.basic_count} acidic={window.acidic_count}"
            )
    print(f"  First charged residue basic: {outcomes.additional}")


def main():
    scorer = PlasmoAP()

    print_header("ACP transit peptide mutants")
    describe(scorer, "Native transit peptide", TRANSIT)
    describe(scorer, "K2A, K6A", mutate(TRANSIT, {1: "A", 5: "A"}))
    describe(scorer, "K6E", mutate(TRANSIT, {5: "E"}))
    describe(scorer, "K2E, K6E", mutate(TRANSIT, {1: "E", 5: "E"}))

    print_header("Without signal peptide")
    result = scorer.calculate_score("M" + TRANSIT + REST, False, "M" + TRANSIT + REST)
    print(f"\n  Score: {result.points} ({result})  targeted: {result.apicoplast_targeted}")

    print_header("Rules")
    info = scorer.get_info()
    print(f"\n  Set 1: {info['set1']}")
    print(f"  Set 2: {info['set2']}")
    print(f"  Window: {info['window']}")
    print(f"\n  {info['citation']}")


if __name__ == "__main__":
    main()
