"""
PlasmoAP test suite.

Tests are organized by module:
- test_sequence: Residue counting, sliding windows, FASTA parsing
- test_models: Result models, tiers and score invariants
- test_rules: The targeting rules on mature sequences
- test_scorer: Signal peptide resolution and published constructs
- test_signalp: SignalP wrapper and output parsing
- test_cli: Command-line interface
"""
