"""
Abstract base classes for signal peptide predictors.

PlasmoAP does not detect signal peptides itself. It relies on an external
predictor that reports whether a classical (secretory) signal peptide is
present and where it is cleaved. This module defines that interface so the
scorer can work with SignalP or any stand-in, and handles the concerns
shared by all wrappers:

1. Caching of predictions, since external tools are slow
2. Retries with back-off for transient failures
3. A standard exception hierarchy
4. A registry so predictors can be looked up by name
"""

from __future__ import annotations

import hashlib
import logging
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional

from diskcache import Cache
from pydantic import BaseModel, ConfigDict, Field

from ..core.sequence import normalize_sequence, sequence_hash

logger = logging.getLogger(__name__)


@dataclass
class PredictorConfig:
    """
    Configuration for predictor behavior.

    Allows customization of the executable, caching and runtime
    parameters without modifying predictor code.
    """
    # Executable
    signalp_path: Optional[str] = None  # None = PLASMOAP_SIGNALP or PATH lookup
    organism_group: str = "euk"
    truncate: int = 70  # SignalP -trunc: residues submitted per sequence

    # Caching
    use_cache: bool = True
    cache_dir: Optional[Path] = None
    cache_ttl: int = 86400 * 30  # 30 days default

    # Runtime
    timeout_seconds: float = 120.0
    max_retries: int = 3
    retry_delay: float = 2.0

    def __post_init__(self):
        if self.cache_dir is None:
            self.cache_dir = Path.home() / ".cache" / "plasmoap"
        self.cache_dir = Path(self.cache_dir)
        if self.use_cache:
            self.cache_dir.mkdir(parents=True, exist_ok=True)


class PredictorError(Exception):
    """Base exception for predictor errors."""
    pass


class PredictorTimeoutError(PredictorError):
    """Raised when prediction exceeds timeout."""
    pass


class PredictorUnavailableError(PredictorError):
    """Raised when the predictor executable cannot be found or started."""
    pass


class PredictorOutputError(PredictorError):
    """Raised when predictor output cannot be parsed."""
    pass


class EnvironmentMismatchError(PredictorError):
    """
    Raised when a prediction comes from a different algorithm version
    than the one PlasmoAP thresholds were calibrated against.
    """
    pass


class SignalPeptidePrediction(BaseModel):
    """
    Signal peptide prediction for one sequence.

    `cleavage_position` is the 1-based position of the first residue of
    the mature protein (SignalP's Ymax position).
    """
    model_config = ConfigDict(frozen=True)

    sequence_id: str = "query"
    algorithm_version: str = Field(..., description="Version of the predicting algorithm")
    has_classical_signal_peptide: bool
    cleavage_position: Optional[int] = Field(None, ge=1)

    # Scores, where the predictor reports them
    d_score: Optional[float] = None
    y_max: Optional[float] = None
    hmm_prediction: Optional[str] = Field(None, description="HMM class: S, A or Q")
    s_probability: Optional[float] = None

    raw_output: Optional[str] = Field(None, description="Raw predictor output")


class SignalPeptidePredictor(ABC):
    """
    Abstract base class for signal peptide predictors.

    Subclasses implement `_predict_impl()`; this class handles caching,
    retries and input normalisation. `cleave()` removes the predicted
    signal peptide and may be overridden when a tool reports cleavage
    differently.

    Example:
        class MyPredictor(SignalPeptidePredictor):
            name = "MyPredictor"
            version = "1.0"

            def _predict_impl(self, sequence: str) -> SignalPeptidePrediction:
                ...
    """

    # Class attributes - must be set by subclasses
    name: str = "SignalPeptidePredictor"
    version: str = "0.0"

    # Documentation
    citation: Optional[str] = None
    url: Optional[str] = None
    description: str = ""

    def __init__(self, config: Optional[PredictorConfig] = None):
        """
        Args:
            config: Predictor configuration (uses defaults if None)
        """
        self.config = config or PredictorConfig()
        self._cache: Optional[Cache] = None

        if self.config.use_cache:
            cache_path = self.config.cache_dir / self.name.lower().replace(" ", "_")
            self._cache = Cache(str(cache_path))

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(name={self.name!r}, version={self.version!r})"

    def cache_settings(self) -> str:
        """Settings that change predictions; part of every cache key."""
        return ""

    def _get_cache_key(self, sequence: str) -> str:
        seq_hash = sequence_hash(sequence)
        config_hash = hashlib.md5(self.cache_settings().encode()).hexdigest()[:8]
        return f"{self.name}:{self.version}:{seq_hash}:{config_hash}"

    def _check_cache(self, sequence: str) -> Optional[SignalPeptidePrediction]:
        if self._cache is None:
            return None
        return self._cache.get(self._get_cache_key(sequence))

    def _store_cache(self, sequence: str, prediction: SignalPeptidePrediction):
        if self._cache is None:
            return
        self._cache.set(self._get_cache_key(sequence), prediction, expire=self.config.cache_ttl)

    @abstractmethod
    def _predict_impl(self, sequence: str) -> SignalPeptidePrediction:
        """
        Run the underlying tool on one sequence.

        Args:
            sequence: Protein sequence (normalised, uppercase)

        Returns:
            SignalPeptidePrediction

        Raises:
            PredictorError: On prediction failure
        """
        pass

    def predict(self, sequence: str) -> SignalPeptidePrediction:
        """
        Predict whether a sequence carries a classical signal peptide.

        Transient failures are retried up to `config.max_retries` times;
        a missing executable is reported immediately.

        Args:
            sequence: Raw protein sequence

        Returns:
            SignalPeptidePrediction

        Raises:
            PredictorError: If every attempt failed
        """
        sequence = normalize_sequence(sequence)

        cached = self._check_cache(sequence)
        if cached is not None:
            logger.debug(f"{self.name}: Using cached prediction for {sequence_hash(sequence)}")
            return cached

        attempts = max(1, self.config.max_retries)
        for attempt in range(attempts):
            try:
                prediction = self._predict_impl(sequence)
                break
            except (PredictorUnavailableError, PredictorOutputError):
                raise
            except PredictorError as e:
                logger.warning(f"{self.name}: Attempt {attempt + 1} failed: {e}")
                if attempt == attempts - 1:
                    raise
                time.sleep(self.config.retry_delay * (attempt + 1))

        self._store_cache(sequence, prediction)
        return prediction

    def cleave(self, sequence: str, prediction: SignalPeptidePrediction) -> str:
        """
        Remove the predicted signal peptide from a sequence.

        Returns the sequence unchanged when no classical signal peptide
        was predicted.
        """
        sequence = normalize_sequence(sequence)
        if not prediction.has_classical_signal_peptide or prediction.cleavage_position is None:
            return sequence
        return sequence[prediction.cleavage_position - 1:]

    def is_available(self) -> bool:
        """Whether the predictor can run in this environment."""
        return True

    def get_info(self) -> dict[str, Any]:
        """
        Get predictor information for documentation/logging.

        Returns:
            Dictionary with predictor metadata
        """
        return {
            "name": self.name,
            "version": self.version,
            "available": self.is_available(),
            "citation": self.citation,
            "url": self.url,
            "description": self.description,
        }

    def clear_cache(self):
        """Clear the prediction cache for this predictor."""
        if self._cache is not None:
            self._cache.clear()


# Registry for available predictors
_PREDICTOR_REGISTRY: dict[str, type[SignalPeptidePredictor]] = {}


def register_predictor(
    predictor_class: type[SignalPeptidePredictor],
) -> type[SignalPeptidePredictor]:
    """
    Decorator to register a predictor class.

    Usage:
        @register_predictor
        class MyPredictor(SignalPeptidePredictor):
            name = "MyPredictor"
            ...
    """
    _PREDICTOR_REGISTRY[predictor_class.name] = predictor_class
    return predictor_class


def get_predictor(
    name: str,
    config: Optional[PredictorConfig] = None,
) -> SignalPeptidePredictor:
    """
    Get a predictor instance by name.

    Raises:
        KeyError: If predictor not found
    """
    if name not in _PREDICTOR_REGISTRY:
        available = ", ".join(_PREDICTOR_REGISTRY.keys())
        raise KeyError(f"Predictor '{name}' not found. Available: {available}")

    return _PREDICTOR_REGISTRY[name](config)


def list_predictors() -> list[dict[str, Any]]:
    """List all registered predictors with their info."""
    return [
        cls(PredictorConfig(use_cache=False)).get_info()
        for cls in _PREDICTOR_REGISTRY.values()
    ]
