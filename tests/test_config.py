"""
Tests for configuration loading.
"""

import json
import os

import pytest

from cloneeval.config import (
    DEFAULT_MATCHER,
    ConfigurationService,
    EvaluationConfig,
)
from cloneeval.exceptions import ConfigurationError
from cloneeval.models import SimilarityType


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch):
    for key in list(os.environ):
        if key.startswith("CLONEEVAL_"):
            monkeypatch.delenv(key)


class TestEvaluationConfig:
    """Test evaluation defaults and validation."""

    def test_defaults(self):
        config = EvaluationConfig()
        assert config.matcher == DEFAULT_MATCHER
        assert config.similarity_type is SimilarityType.LINE
        assert config.min_lines == 6
        assert config.workers == 1

    def test_similarity_type_from_string(self):
        assert EvaluationConfig(similarity_type="BOTH").similarity_type is SimilarityType.BOTH

    @pytest.mark.parametrize("kwargs", [
        {"similarity_type": "chars"},
        {"min_similarity": 7},
        {"min_similarity": 100},
        {"workers": 0},
    ])
    def test_invalid_values(self, kwargs):
        with pytest.raises(ConfigurationError):
            EvaluationConfig(**kwargs)

    def test_to_filter(self):
        evaluation_filter = EvaluationConfig(max_tokens=300, include_internal=True).to_filter()
        assert evaluation_filter.min_lines == 6
        assert evaluation_filter.max_tokens == 300
        assert evaluation_filter.include_internal


class TestConfigurationService:
    """Test file and environment sources."""

    def test_defaults_without_file(self):
        config = ConfigurationService().get_config()
        assert config.database.db_path == "cloneeval.db"
        assert config.log_level == "WARNING"

    def test_load_from_file(self, tmp_path):
        path = tmp_path / "config.json"
        path.write_text(json.dumps({
            "database": {"db_path": "bench.db"},
            "evaluation": {"matcher": "CoverageMatcher 0.5", "similarity_type": "token",
                           "min_similarity": 40, "unknown_key": 1},
            "log_level": "INFO",
        }))
        config = ConfigurationService(str(path)).get_config()
        assert config.database.db_path == "bench.db"
        assert config.evaluation.matcher == "CoverageMatcher 0.5"
        assert config.evaluation.similarity_type is SimilarityType.TOKEN
        assert config.evaluation.min_similarity == 40
        assert config.log_level == "INFO"

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigurationError):
            ConfigurationService(str(tmp_path / "absent.json")).get_config()

    def test_malformed_file(self, tmp_path):
        path = tmp_path / "config.json"
        path.write_text("{not json")
        with pytest.raises(ConfigurationError):
            ConfigurationService(str(path)).get_config()

    def test_environment_overrides(self, monkeypatch):
        monkeypatch.setenv("CLONEEVAL_DB_DB_PATH", "/data/bench.db")
        monkeypatch.setenv("CLONEEVAL_EVAL_MIN_LINES", "10")
        monkeypatch.setenv("CLONEEVAL_EVAL_MAX_TOKENS", "2000")
        monkeypatch.setenv("CLONEEVAL_EVAL_INCLUDE_INTERNAL", "yes")
        monkeypatch.setenv("CLONEEVAL_EVAL_SIMILARITY_TYPE", "AVG")
        monkeypatch.setenv("CLONEEVAL_LOG_LEVEL", "DEBUG")

        config = ConfigurationService().get_config()
        assert config.database.db_path == "/data/bench.db"
        assert config.evaluation.min_lines == 10
        assert config.evaluation.max_tokens == 2000
        assert config.evaluation.include_internal is True
        assert config.evaluation.similarity_type is SimilarityType.AVG
        assert config.log_level == "DEBUG"

    def test_environment_overrides_file(self, tmp_path, monkeypatch):
        path = tmp_path / "config.json"
        path.write_text(json.dumps({"evaluation": {"workers": 2}}))
        monkeypatch.setenv("CLONEEVAL_EVAL_WORKERS", "8")
        assert ConfigurationService(str(path)).get_config().evaluation.workers == 8

    def test_invalid_environment_value(self, monkeypatch):
        monkeypatch.setenv("CLONEEVAL_EVAL_MIN_LINES", "many")
        with pytest.raises(ConfigurationError, match="CLONEEVAL_EVAL_MIN_LINES"):
            ConfigurationService().get_config()

    def test_invalid_log_level(self, monkeypatch):
        monkeypatch.setenv("CLONEEVAL_LOG_LEVEL", "LOUD")
        with pytest.raises(ConfigurationError):
            ConfigurationService().get_config()

