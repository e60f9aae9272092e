"""
Signal peptide predictors.

PlasmoAP scores only sequences that start with a classical signal
peptide, and evaluates its rules on the mature sequence left after the
signal peptide is cleaved. Both facts come from an external predictor.

Submodules:
    base: Predictor interface, configuration, exceptions and registry
    signalp: Wrapper for a local SignalP 3.0 installation
"""

from .base import (
    EnvironmentMismatchError,
    PredictorConfig,
    PredictorError,
    PredictorOutputError,
    PredictorTimeoutError,
    PredictorUnavailableError,
    SignalPeptidePrediction,
    SignalPeptidePredictor,
    get_predictor,
    list_predictors,
    register_predictor,
)
from .signalp import (
    SignalP3Predictor,
    detect_signalp_version,
    find_signalp_executable,
    parse_signalp_output,
)

__all__ = [
    # Base classes
    "SignalPeptidePredictor",
    "SignalPeptidePrediction",
    "PredictorConfig",
    # Exceptions
    "PredictorError",
    "PredictorTimeoutError",
    "PredictorUnavailableError",
    "PredictorOutputError",
    "EnvironmentMismatchError",
    # Registry functions
    "register_predictor",
    "get_predictor",
    "list_predictors",
    # SignalP
    "SignalP3Predictor",
    "detect_signalp_version",
    "find_signalp_executable",
    "parse_signalp_output",
]
