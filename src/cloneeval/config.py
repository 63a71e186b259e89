"""
Configuration Service - evaluation defaults from file and environment.
"""

import os
import json
import logging
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Dict, Any, Optional, Type, TypeVar

from .exceptions import ConfigurationError
from .models import EvaluationFilter, SimilarityType

T = TypeVar('T')

DEFAULT_MATCHER = "CoverageMatcher 0.7"


@dataclass
class DatabaseConfig:
    """Benchmark database location."""
    db_path: str = "cloneeval.db"


@dataclass
class EvaluationConfig:
    """Defaults for an evaluation run. Command-line flags take precedence."""
    matcher: str = DEFAULT_MATCHER
    similarity_type: SimilarityType = SimilarityType.LINE
    min_similarity: int = 0
    min_lines: int = 6
    max_lines: Optional[int] = None
    min_pretty_lines: int = 0
    max_pretty_lines: Optional[int] = None
    min_tokens: int = 0
    max_tokens: Optional[int] = None
    min_judges: int = 0
    min_confidence: int = 0
    include_internal: bool = False
    workers: int = 1

    def __post_init__(self):
        if isinstance(self.similarity_type, str):
            try:
                self.similarity_type = SimilarityType(self.similarity_type.lower())
            except ValueError:
                raise ConfigurationError(
                    f"Invalid similarity type: {self.similarity_type}"
                ) from None
        if not 0 <= self.min_similarity <= 95 or self.min_similarity % 5:
            raise ConfigurationError(
                f"min_similarity must be a multiple of 5 in [0, 95], got {self.min_similarity}"
            )
        if self.workers < 1:
            raise ConfigurationError("workers must be at least 1")

    def to_filter(self) -> EvaluationFilter:
        return EvaluationFilter(
            min_lines=self.min_lines,
            max_lines=self.max_lines,
            min_pretty_lines=self.min_pretty_lines,
            max_pretty_lines=self.max_pretty_lines,
            min_tokens=self.min_tokens,
            max_tokens=self.max_tokens,
            min_judges=self.min_judges,
            min_confidence=self.min_confidence,
            include_internal=self.include_internal,
        )


@dataclass
class UnifiedConfig:
    """Master configuration combining all settings."""
    database: DatabaseConfig
    evaluation: EvaluationConfig
    log_level: str = "WARNING"

    def __post_init__(self):
        if self.log_level.upper() not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ConfigurationError(f"Invalid log level: {self.log_level}")


class ConfigurationService:
    """
    Loads configuration from an optional JSON file, then applies
    ``CLONEEVAL_DB_*``, ``CLONEEVAL_EVAL_*`` and ``CLONEEVAL_LOG_LEVEL``
    environment overrides.
    """

    def __init__(self, config_path: Optional[str] = None):
        self.logger = logging.getLogger(__name__)
        self.config_path = Path(config_path) if config_path else None
        self._config: Optional[UnifiedConfig] = None

    def get_config(self) -> UnifiedConfig:
        """Get the current configuration, loading from file if needed."""
        if self._config is None:
            self._config = self.load_config()
        return self._config

    def load_config(self, config_path: Optional[str] = None) -> UnifiedConfig:
        """
        Load configuration from file or environment variables.

        Args:
            config_path: Optional path to configuration file

        Returns:
            UnifiedConfig instance

        Raises:
            ConfigurationError: if the file is unreadable or a value is invalid
        """
        config_file = Path(config_path) if config_path else self.config_path

        data: Dict[str, Any] = {}
        if config_file:
            if not config_file.exists():
                raise ConfigurationError(f"Configuration file not found: {config_file}")
            try:
                with open(config_file, 'r') as f:
                    data = json.load(f)
            except (OSError, json.JSONDecodeError) as e:
                raise ConfigurationError(f"Failed to load config from {config_file}: {e}") from e
            self.logger.info(f"Loaded configuration from {config_file}")

        database_config = self._dict_to_dataclass(data.get('database', {}), DatabaseConfig)
        evaluation_config = self._dict_to_dataclass(data.get('evaluation', {}), EvaluationConfig)

        database_config = self._apply_env_overrides(database_config, 'CLONEEVAL_DB_')
        evaluation_config = self._apply_env_overrides(evaluation_config, 'CLONEEVAL_EVAL_')

        log_level = os.getenv('CLONEEVAL_LOG_LEVEL', data.get('log_level', 'WARNING'))

        return UnifiedConfig(
            database=database_config,
            evaluation=evaluation_config,
            log_level=log_level,
        )

    def _dict_to_dataclass(self, data: Dict[str, Any], dataclass_type: Type[T]) -> T:
        """Convert dictionary to dataclass, ignoring unknown keys."""
        field_names = {f.name for f in fields(dataclass_type)}
        unknown = set(data) - field_names
        if unknown:
            self.logger.warning(f"Ignoring unknown configuration keys: {sorted(unknown)}")
        filtered_data = {k: v for k, v in data.items() if k in field_names}
        return dataclass_type(**filtered_data)

    def _apply_env_overrides(self, config: T, prefix: str) -> T:
        """Apply environment variable overrides to configuration."""
        config_dict = {f.name: getattr(config, f.name) for f in fields(config)}

        for field in fields(config):
            env_key = f"{prefix}{field.name.upper()}"
            env_value = os.getenv(env_key)
            if env_value is None:
                continue

            current = config_dict[field.name]
            try:
                if isinstance(current, bool):
                    config_dict[field.name] = env_value.lower() in ('true', '1', 'yes', 'on')
                elif isinstance(current, int) or field.name.startswith(('min_', 'max_')):
                    config_dict[field.name] = None if env_value == "" else int(env_value)
                elif isinstance(current, SimilarityType):
                    config_dict[field.name] = SimilarityType(env_value.lower())
                else:
                    config_dict[field.name] = env_value
            except ValueError as e:
                raise ConfigurationError(f"Invalid value for {env_key}={env_value}: {e}") from e

            self.logger.debug(f"Applied env override: {env_key}={env_value}")

        return type(config)(**config_dict)
