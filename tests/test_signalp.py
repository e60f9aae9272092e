"""
Tests for the SignalP wrapper and the predictor base class.

SignalP itself is licence-restricted, so the subprocess is mocked and the
parsers are fed recorded short-format output. The integration test at the
end runs only where a SignalP executable is installed.
"""

import shutil
import subprocess
from unittest.mock import patch

import pytest

from plasmoap.predictors.base import (
    PredictorConfig,
    PredictorError,
    PredictorOutputError,
    PredictorTimeoutError,
    PredictorUnavailableError,
    SignalPeptidePrediction,
    get_predictor,
    list_predictors,
)
from plasmoap.predictors.signalp import (
    SIGNALP_ENV_VAR,
    SignalP3Predictor,
    detect_signalp_version,
    find_signalp_executable,
    parse_signalp3_line,
    parse_signalp_output,
    to_fasta,
)
from tests.conftest import REST, SIGNAL, TRANSIT


SIGNALP3_POSITIVE = (
    "# SignalP-NN euk predictions\t# SignalP-HMM euk predictions\n"
    "# name      Cmax  pos ?  Ymax  pos ?  Smax  pos ?  Smean ?  D     ? \t"
    "# name      !  Cmax  pos ?  Sprob ?\n"
    "query      0.598  17 Y  0.689  17 Y  0.975   4 Y  0.873 Y  0.781 Y\t"
    "query         S  0.577  17 Y  0.945 Y\n"
)

SIGNALP3_NEGATIVE = (
    "# SignalP-NN euk predictions\t# SignalP-HMM euk predictions\n"
    "# name      Cmax  pos ?  Ymax  pos ?  Smax  pos ?  Smean ?  D     ? \t"
    "# name      !  Cmax  pos ?  Sprob ?\n"
    "query      0.101  25 N  0.052  25 N  0.120   3 N  0.061 N  0.057 N\t"
    "query         Q  0.000  25 N  0.001 N\n"
)

SIGNALP4_POSITIVE = (
    "# SignalP-4.1 euk predictions\n"
    "# name      Cmax  pos  Ymax  pos  Smax  pos  Smean   D     ?  Dmaxcut    Networks-used\n"
    "query      0.555  17  0.700  17  0.946   5  0.847  0.781 Y  0.450      SignalP-noTM\n"
)


def completed(stdout: str = "", returncode: int = 0, stderr: str = ""):
    return subprocess.CompletedProcess(args=["signalp"], returncode=returncode, stdout=stdout, stderr=stderr)


@pytest.fixture
def executable(tmp_path):
    path = tmp_path / "signalp"
    path.write_text("#!/bin/sh\n")
    return str(path)


@pytest.fixture
def predictor(executable):
    config = PredictorConfig(use_cache=False, max_retries=2, retry_delay=0)
    return SignalP3Predictor(config=config, executable=executable)


class TestOutputParsing:
    """Tests for SignalP short-format parsing."""

    def test_detect_version(self):
        assert detect_signalp_version(SIGNALP3_POSITIVE) == "3.0"
        assert detect_signalp_version(SIGNALP4_POSITIVE) == "4.1"
        assert detect_signalp_version("query 0.1 2 N\n") is None

    def test_signalp3_positive(self):
        prediction = parse_signalp_output(SIGNALP3_POSITIVE)
        assert prediction.algorithm_version == "3.0"
        assert prediction.has_classical_signal_peptide
        assert prediction.cleavage_position == 17
        assert prediction.d_score == pytest.approx(0.781)
        assert prediction.y_max == pytest.approx(0.689)
        assert prediction.hmm_prediction == "S"
        assert prediction.s_probability == pytest.approx(0.945)
        assert prediction.raw_output == SIGNALP3_POSITIVE

    def test_signalp3_negative(self):
        prediction = parse_signalp_output(SIGNALP3_NEGATIVE)
        assert not prediction.has_classical_signal_peptide
        assert prediction.cleavage_position is None
        assert prediction.hmm_prediction == "Q"

    def test_signalp3_without_hmm_columns(self):
        line = "query      0.598  17 Y  0.689  17 Y  0.975   4 Y  0.873 Y  0.781 Y"
        parsed = parse_signalp3_line(line)
        assert parsed["cleavage_position"] == 17
        assert "hmm_prediction" not in parsed

    def test_signalp4(self):
        prediction = parse_signalp_output(SIGNALP4_POSITIVE)
        assert prediction.algorithm_version == "4.1"
        assert prediction.has_classical_signal_peptide
        assert prediction.cleavage_position == 17

    def test_unknown_version_is_kept(self):
        output = "# SignalP-5.0\tOrganism: Eukarya\nquery\tSP(Sec/SPI)\t0.99\n"
        prediction = parse_signalp_output(output)
        assert prediction.algorithm_version == "5.0"
        assert not prediction.has_classical_signal_peptide

    def test_missing_header(self):
        with pytest.raises(PredictorOutputError):
            parse_signalp_output("query 0.598 17 Y\n")

    def test_missing_result(self):
        with pytest.raises(PredictorOutputError):
            parse_signalp_output("# SignalP-NN euk predictions\n")

    def test_truncated_line(self):
        with pytest.raises(PredictorOutputError):
            parse_signalp3_line("query 0.598 17 Y")

    def test_malformed_line(self):
        with pytest.raises(PredictorOutputError):
            parse_signalp3_line("query a 17 Y b 17 Y c 4 Y d Y e Y")


class TestExecutableLookup:

    def test_explicit_path(self, executable, monkeypatch):
        monkeypatch.delenv(SIGNALP_ENV_VAR, raising=False)
        assert find_signalp_executable(executable) == executable

    def test_environment_variable(self, executable, monkeypatch):
        monkeypatch.setenv(SIGNALP_ENV_VAR, executable)
        assert find_signalp_executable() == executable

    def test_not_found(self, monkeypatch):
        monkeypatch.delenv(SIGNALP_ENV_VAR, raising=False)
        monkeypatch.setattr(shutil, "which", lambda name: None)
        assert find_signalp_executable() is None
        assert find_signalp_executable("/no/such/signalp") is None


class TestSignalP3Predictor:
    """Tests for running SignalP through a mocked subprocess."""

    def test_command_line(self, predictor, executable):
        assert predictor.build_command() == [
            executable, "-t", "euk", "-f", "short", "-trunc", "70",
        ]

    def test_to_fasta(self):
        assert to_fasta("MKIL") == ">query\nMKIL\n"

    def test_predict(self, predictor):
        with patch("plasmoap.predictors.signalp.subprocess.run") as run:
            run.return_value = completed(SIGNALP3_POSITIVE)
            prediction = predictor.predict(SIGNAL + TRANSIT + REST)

        assert prediction.has_classical_signal_peptide
        assert prediction.cleavage_position == 17
        assert run.call_args.kwargs["input"].startswith(">query\n" + SIGNAL)
        assert run.call_args.kwargs["timeout"] == predictor.config.timeout_seconds

    def test_cleave(self, predictor):
        prediction = SignalPeptidePrediction(
            algorithm_version="3.0",
            has_classical_signal_peptide=True,
            cleavage_position=17,
        )
        assert predictor.cleave(SIGNAL + TRANSIT, prediction) == TRANSIT

    def test_cleave_without_signal_peptide(self, predictor):
        prediction = SignalPeptidePrediction(algorithm_version="3.0", has_classical_signal_peptide=False)
        assert predictor.cleave("mkil", prediction) == "MKIL"

    def test_unavailable(self, monkeypatch):
        monkeypatch.delenv(SIGNALP_ENV_VAR, raising=False)
        monkeypatch.setattr(shutil, "which", lambda name: None)
        predictor = SignalP3Predictor(config=PredictorConfig(use_cache=False))
        assert not predictor.is_available()
        with pytest.raises(PredictorUnavailableError):
            predictor.predict("MKIL")

    def test_executable_vanished(self, predictor):
        with patch("plasmoap.predictors.signalp.subprocess.run", side_effect=FileNotFoundError("signalp")) as run:
            with pytest.raises(PredictorUnavailableError):
                predictor.predict("MKIL")
        assert run.call_count == 1

    def test_timeout_is_retried(self, predictor):
        timeout = subprocess.TimeoutExpired(cmd="signalp", timeout=1)
        with patch("plasmoap.predictors.signalp.subprocess.run", side_effect=[timeout, completed(SIGNALP3_NEGATIVE)]) as run:
            prediction = predictor.predict("MKIL")
        assert run.call_count == 2
        assert not prediction.has_classical_signal_peptide

    def test_timeout_exhausts_retries(self, predictor):
        timeout = subprocess.TimeoutExpired(cmd="signalp", timeout=1)
        with patch("plasmoap.predictors.signalp.subprocess.run", side_effect=timeout) as run:
            with pytest.raises(PredictorTimeoutError):
                predictor.predict("MKIL")
        assert run.call_count == 2

    def test_nonzero_exit(self, predictor):
        with patch("plasmoap.predictors.signalp.subprocess.run") as run:
            run.return_value = completed(returncode=1, stderr="license expired")
            with pytest.raises(PredictorError, match="license expired"):
                predictor.predict("MKIL")

    def test_unparseable_output_is_not_retried(self, predictor):
        with patch("plasmoap.predictors.signalp.subprocess.run") as run:
            run.return_value = completed("garbage\n")
            with pytest.raises(PredictorOutputError):
                predictor.predict("MKIL")
        assert run.call_count == 1

    def test_cache(self, executable, tmp_path):
        config = PredictorConfig(use_cache=True, cache_dir=tmp_path / "cache")
        predictor = SignalP3Predictor(config=config, executable=executable)
        with patch("plasmoap.predictors.signalp.subprocess.run") as run:
            run.return_value = completed(SIGNALP3_POSITIVE)
            first = predictor.predict(SIGNAL + TRANSIT)
            second = predictor.predict((SIGNAL + TRANSIT).lower())
        assert run.call_count == 1
        assert first == second

        predictor.clear_cache()
        with patch("plasmoap.predictors.signalp.subprocess.run") as run:
            run.return_value = completed(SIGNALP3_POSITIVE)
            predictor.predict(SIGNAL + TRANSIT)
        assert run.call_count == 1

    def test_prediction_is_stored(self, executable, tmp_path):
        config = PredictorConfig(use_cache=True, cache_dir=tmp_path / "cache")
        predictor = SignalP3Predictor(config=config, executable=executable)
        with patch("plasmoap.predictors.signalp.subprocess.run") as run:
            run.return_value = completed(SIGNALP3_POSITIVE)
            predictor.predict(SIGNAL + TRANSIT)
        assert len(predictor._cache) == 1

    def test_cache_separates_settings(self, executable, tmp_path):
        """Different organism groups or truncation never share predictions."""
        cache_dir = tmp_path / "cache"
        euk = SignalP3Predictor(PredictorConfig(cache_dir=cache_dir), executable=executable)
        gram = SignalP3Predictor(
            PredictorConfig(cache_dir=cache_dir, organism_group="gram-"), executable=executable
        )
        short = SignalP3Predictor(PredictorConfig(cache_dir=cache_dir, truncate=50), executable=executable)
        assert len({p._get_cache_key("MKIL") for p in (euk, gram, short)}) == 3

        with patch("plasmoap.predictors.signalp.subprocess.run") as run:
            run.side_effect = [completed(SIGNALP3_POSITIVE), completed(SIGNALP3_NEGATIVE)]
            assert euk.predict(SIGNAL + TRANSIT).has_classical_signal_peptide
            assert not gram.predict(SIGNAL + TRANSIT).has_classical_signal_peptide
            assert euk.predict(SIGNAL + TRANSIT).has_classical_signal_peptide
        assert run.call_count == 2

    def test_info(self, predictor):
        info = predictor.get_info()
        assert info["name"] == "SignalP"
        assert info["version"] == "3.0"
        assert info["available"] is True
        assert "SignalP 3.0" in info["citation"]


class TestRegistry:

    def test_get_predictor(self, executable):
        config = PredictorConfig(use_cache=False, signalp_path=executable)
        predictor = get_predictor("SignalP", config)
        assert isinstance(predictor, SignalP3Predictor)
        assert predictor.executable == executable

    def test_unknown_predictor(self):
        with pytest.raises(KeyError, match="SignalP"):
            get_predictor("NoSuchPredictor")

    def test_list_predictors(self):
        assert "SignalP" in [info["name"] for info in list_predictors()]


@pytest.mark.skipif(shutil.which("signalp") is None, reason="SignalP not installed")
class TestInstalledSignalP:

    def test_acp_leader(self):
        predictor = SignalP3Predictor(config=PredictorConfig(use_cache=False))
        prediction = predictor.predict(SIGNAL + TRANSIT + REST)
        assert prediction.algorithm_version
        if prediction.algorithm_version == "3.0":
            assert prediction.has_classical_signal_peptide
