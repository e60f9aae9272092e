"""
Command-line interface for PlasmoAP.

Usage patterns:
    plasmoap score proteins.fasta > scores.tsv
    plasmoap score-sequence SEQUENCE --signal-peptide true --cleaved MATURE
    plasmoap info
"""

from .main import cli, main

__all__ = ["cli", "main"]
