"""
SignalP wrapper for classical signal peptide prediction.

PlasmoAP thresholds were calibrated against SignalP 3.0, which combines a
neural network (NN) and a hidden Markov model (HMM) to recognise secretory
signal peptides and their cleavage sites. This module runs a locally
installed SignalP executable and parses its short output format.

A sequence is considered to carry a classical signal peptide when the NN
D-score prediction is positive; the mature protein starts at the NN Ymax
position.

The wrapper also understands the SignalP 4.x short format, so that an
installation of the wrong version is reported as a version mismatch by
the scorer instead of failing as unparseable output.

Reference:
    Bendtsen JD, Nielsen H, von Heijne G, Brunak S. (2004) Improved
    prediction of signal peptides: SignalP 3.0. J Mol Biol 340:783-795.

Note: SignalP is distributed under an academic licence and must be
installed separately. Point PLASMOAP_SIGNALP at the executable if it is
not on PATH.
"""

from __future__ import annotations

import logging
import os
import re
import shutil
import subprocess
from io import StringIO
from typing import Optional

from Bio import SeqIO
from Bio.Seq import Seq
from Bio.SeqRecord import SeqRecord

from .base import (
    PredictorConfig,
    PredictorError,
    PredictorOutputError,
    PredictorTimeoutError,
    PredictorUnavailableError,
    SignalPeptidePrediction,
    SignalPeptidePredictor,
    register_predictor,
)

logger = logging.getLogger(__name__)

SIGNALP_ENV_VAR = "PLASMOAP_SIGNALP"

# Name given to the submitted record; SignalP truncates names to 20 chars
QUERY_ID = "query"

_VERSION_HEADER = re.compile(r"^#\s*SignalP-(?P<tag>\S+)\s")


def find_signalp_executable(explicit: Optional[str] = None) -> Optional[str]:
    """
    Locate the SignalP executable.

    Order: explicit path, the PLASMOAP_SIGNALP environment variable,
    then `signalp` on PATH.
    """
    for candidate in (explicit, os.environ.get(SIGNALP_ENV_VAR)):
        if candidate:
            return shutil.which(candidate) or (candidate if os.path.isfile(candidate) else None)
    return shutil.which("signalp")


def detect_signalp_version(output: str) -> Optional[str]:
    """
    Read the algorithm version from a SignalP output header.

    SignalP 3.0 headers read '# SignalP-NN euk predictions'; later
    versions carry the number, e.g. '# SignalP-4.1 euk predictions'.
    """
    for line in output.splitlines():
        match = _VERSION_HEADER.match(line.strip())
        if match:
            tag = match.group("tag")
            if tag in ("NN", "HMM"):
                return "3.0"
            return tag
    return None


def _yes(flag: str) -> bool:
    return flag.upper() == "Y"


def parse_signalp3_line(line: str) -> dict:
    """
    Parse one SignalP 3.0 short-format result line.

    Columns (NN): name Cmax pos ? Ymax pos ? Smax pos ? Smean ? D ?
    followed, when the HMM was run, by: name ! Cmax pos ? Sprob ?
    """
    fields = line.split()
    if len(fields) < 14:
        raise PredictorOutputError(f"Truncated SignalP 3.0 result line: {line!r}")

    try:
        parsed = {
            "sequence_id": fields[0],
            "y_max": float(fields[4]),
            "cleavage_position": int(fields[5]),
            "d_score": float(fields[12]),
            "has_classical_signal_peptide": _yes(fields[13]),
        }
        if len(fields) >= 21:
            parsed["hmm_prediction"] = fields[15]
            parsed["s_probability"] = float(fields[19])
    except ValueError as e:
        raise PredictorOutputError(f"Malformed SignalP 3.0 result line: {line!r}") from e

    return parsed


def parse_signalp4_line(line: str) -> dict:
    """
    Parse one SignalP 4.x short-format result line.

    Columns: name Cmax pos Ymax pos Smax pos Smean D ? Dmaxcut Networks-used
    """
    fields = line.split()
    if len(fields) < 10:
        raise PredictorOutputError(f"Truncated SignalP 4 result line: {line!r}")

    try:
        return {
            "sequence_id": fields[0],
            "y_max": float(fields[3]),
            "cleavage_position": int(fields[4]),
            "d_score": float(fields[8]),
            "has_classical_signal_peptide": _yes(fields[9]),
        }
    except ValueError as e:
        raise PredictorOutputError(f"Malformed SignalP 4 result line: {line!r}") from e


def parse_signalp_output(output: str) -> SignalPeptidePrediction:
    """
    Parse SignalP short-format output for a single sequence.

    Args:
        output: Standard output of `signalp -f short`

    Returns:
        SignalPeptidePrediction for the first result line

    Raises:
        PredictorOutputError: If the version or result line is missing
    """
    version = detect_signalp_version(output)
    if version is None:
        raise PredictorOutputError("SignalP output has no recognisable version header")

    result_lines = [
        line for line in output.splitlines()
        if line.strip() and not line.lstrip().startswith("#")
    ]
    if not result_lines:
        raise PredictorOutputError("SignalP output contains no prediction")

    if version == "3.0":
        parsed = parse_signalp3_line(result_lines[0])
    elif version.startswith("4"):
        parsed = parse_signalp4_line(result_lines[0])
    else:
        # Unknown layout: keep the version so the scorer can reject it
        logger.warning(f"Unsupported SignalP output format (version {version})")
        parsed = {"sequence_id": result_lines[0].split()[0], "has_classical_signal_peptide": False}

    if not parsed["has_classical_signal_peptide"]:
        parsed["cleavage_position"] = None

    return SignalPeptidePrediction(algorithm_version=version, raw_output=output, **parsed)


def to_fasta(sequence: str, sequence_id: str = QUERY_ID) -> str:
    """Format a single sequence as FASTA text."""
    handle = StringIO()
    SeqIO.write(SeqRecord(Seq(sequence), id=sequence_id, description=""), handle, "fasta")
    return handle.getvalue()


@register_predictor
class SignalP3Predictor(SignalPeptidePredictor):
    """
    Classical signal peptide prediction with a local SignalP installation.

    Usage:
        predictor = SignalP3Predictor()
        prediction = predictor.predict("MKILLLCIIFLYYVNAFKNTQKDGVSLQ...")
        if prediction.has_classical_signal_peptide:
            mature = predictor.cleave(sequence, prediction)
    """

    name = "SignalP"
    version = "3.0"

    citation = (
        "Bendtsen JD, Nielsen H, von Heijne G, Brunak S. (2004) Improved "
        "prediction of signal peptides: SignalP 3.0. J Mol Biol 340:783-795."
    )
    url = "https://services.healthtech.dtu.dk/services/SignalP-3.0/"
    description = (
        "Neural network and hidden Markov model prediction of secretory "
        "signal peptides and their cleavage sites."
    )

    def __init__(
        self,
        config: Optional[PredictorConfig] = None,
        executable: Optional[str] = None,
    ):
        """
        Args:
            config: Predictor configuration
            executable: Path to the signalp executable (overrides config)
        """
        super().__init__(config)
        self.executable = find_signalp_executable(executable or self.config.signalp_path)
        if self.executable is None:
            logger.debug("SignalP executable not found; predictions will fail until installed")

    def is_available(self) -> bool:
        return self.executable is not None

    def cache_settings(self) -> str:
        return f"{self.config.organism_group}:{self.config.truncate}:{self.executable}"

    def build_command(self) -> list[str]:
        return [
            self.executable,
            "-t", self.config.organism_group,
            "-f", "short",
            "-trunc", str(self.config.truncate),
        ]

    def _predict_impl(self, sequence: str) -> SignalPeptidePrediction:
        if self.executable is None:
            raise PredictorUnavailableError(
                f"SignalP not found. Install SignalP 3.0 and put it on PATH "
                f"or set {SIGNALP_ENV_VAR}"
            )

        command = self.build_command()
        logger.debug(f"Running: {' '.join(command)}")

        try:
            completed = subprocess.run(
                command,
                input=to_fasta(sequence),
                capture_output=True,
                text=True,
                timeout=self.config.timeout_seconds,
            )
        except FileNotFoundError as e:
            raise PredictorUnavailableError(f"Could not start SignalP: {e}") from e
        except subprocess.TimeoutExpired as e:
            raise PredictorTimeoutError(
                f"SignalP did not finish within {self.config.timeout_seconds}s"
            ) from e

        if completed.returncode != 0:
            raise PredictorError(
                f"SignalP exited with status {completed.returncode}: "
                f"{completed.stderr.strip()}"
            )

        return parse_signalp_output(completed.stdout)
