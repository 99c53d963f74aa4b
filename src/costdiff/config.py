"""Configuration management for costdiff."""

import os
import json
import logging
import yaml
from pathlib import Path
from typing import Dict, Any, Optional
from dataclasses import asdict, fields

from .models import Config, OutputFormat, SortKey
from .validation import METRICS
from .exceptions import ConfigurationError


logger = logging.getLogger(__name__)


class ConfigManager:
    """Manages configuration loading and validation."""

    DEFAULT_CONFIG_PATHS = [
        "~/.costdiff/config.yaml",
        "~/.costdiff/config.yml",
        "~/.costdiff/config.json",
        ".costdiff.yaml",
        ".costdiff.yml",
        ".costdiff.json",
    ]

    # Environment variable -> (config key, type)
    ENV_MAPPINGS = {
        "COSTDIFF_PROFILE": ("default_profile", str),
        "COSTDIFF_REGION": ("region", str),
        "COSTDIFF_METRIC": ("metric", str),
        "COSTDIFF_GROUP": ("group_by", str),
        "COSTDIFF_FORMAT": ("output_format", str),
        "COSTDIFF_TOP": ("top_n", int),
        "COSTDIFF_SORT": ("sort_by", str),
        "COSTDIFF_WATCH_DAYS": ("watch_days", int),
    }

    # Config field -> accepted type(s)
    FIELD_TYPES = {
        "default_profile": str,
        "region": str,
        "metric": str,
        "group_by": str,
        "output_format": str,
        "sort_by": str,
        "top_n": int,
        "watch_days": int,
        "threshold": (int, float),
        "min_cost": (int, float),
    }
    OPTIONAL_FIELDS = ("default_profile", "region")

    def __init__(self):
        self._config_path: Optional[Path] = None

    @property
    def config_path(self) -> Optional[Path]:
        return self._config_path

    def load_config(self, config_path: Optional[str] = None) -> Config:
        """Load configuration from defaults, file and environment, in that order."""
        config_data = self._load_default_config()

        if config_path:
            file_config = self._load_config_file(config_path)
            config_data.update(file_config)
            self._config_path = Path(config_path).expanduser()
        else:
            for path in self.DEFAULT_CONFIG_PATHS:
                expanded_path = Path(path).expanduser()
                if expanded_path.exists():
                    file_config = self._load_config_file(str(expanded_path))
                    config_data.update(file_config)
                    self._config_path = expanded_path
                    break

        config_data.update(self._load_env_config())

        known = {f.name for f in fields(Config)}
        unknown = set(config_data) - known
        for key in sorted(unknown, key=str):
            logger.warning(f"Ignoring unknown configuration key: {key}")
            config_data.pop(key)

        return Config(**config_data)

    def _load_default_config(self) -> Dict[str, Any]:
        """Load default configuration values."""
        return asdict(Config())

    def _load_config_file(self, config_path: str) -> Dict[str, Any]:
        """Load configuration from YAML or JSON file."""
        path = Path(config_path).expanduser()

        if not path.exists():
            raise FileNotFoundError(f"Configuration file not found: {config_path}")

        logger.debug(f"Loading configuration from {path}")

        try:
            with open(path, "r", encoding="utf-8") as f:
                if path.suffix.lower() in [".yaml", ".yml"]:
                    data = yaml.safe_load(f) or {}
                elif path.suffix.lower() == ".json":
                    data = json.load(f) or {}
                else:
                    content = f.read()
                    try:
                        data = yaml.safe_load(content) or {}
                    except yaml.YAMLError:
                        data = json.loads(content) or {}
        except (yaml.YAMLError, json.JSONDecodeError) as e:
            raise ValueError(f"Invalid configuration file format: {e}")

        if not isinstance(data, dict):
            raise ValueError(
                f"Invalid configuration file format: expected a mapping in {config_path}"
            )
        return data

    def _load_env_config(self) -> Dict[str, Any]:
        """Load configuration from environment variables."""
        env_config = {}

        for env_var, (config_key, value_type) in self.ENV_MAPPINGS.items():
            value = os.getenv(env_var)
            if value is None:
                continue

            if value_type is int:
                try:
                    env_config[config_key] = int(value)
                except ValueError:
                    logger.warning(f"Ignoring non-integer value for {env_var}: {value!r}")
            else:
                env_config[config_key] = value

        return env_config

    def validate_config(self, config: Config) -> bool:
        """Validate configuration values."""
        config_file = str(self._config_path) if self._config_path else None

        self._check_types(config, config_file)

        if config.metric not in METRICS:
            raise ConfigurationError(f"Invalid metric: {config.metric}", config_file)

        valid_formats = [member.value for member in OutputFormat]
        if config.output_format not in valid_formats:
            raise ConfigurationError(
                f"Invalid output format: {config.output_format}", config_file
            )

        valid_sorts = [member.value for member in SortKey]
        if config.sort_by not in valid_sorts:
            raise ConfigurationError(f"Invalid sort: {config.sort_by}", config_file)

        if config.top_n < 0:
            raise ConfigurationError("top_n must be non-negative", config_file)

        if config.watch_days < 1:
            raise ConfigurationError("watch_days must be at least 1", config_file)

        if config.threshold < 0 or config.min_cost < 0:
            raise ConfigurationError(
                "threshold and min_cost must be non-negative", config_file
            )

        return True

    def _check_types(self, config: Config, config_file: Optional[str]) -> None:
        """Reject values of the wrong type, e.g. `top_n: ten` in a YAML file."""
        for name, expected in self.FIELD_TYPES.items():
            value = getattr(config, name)
            if value is None and name in self.OPTIONAL_FIELDS:
                continue
            # bool is an int subclass but never a valid count or amount
            if isinstance(value, bool) or not isinstance(value, expected):
                raise ConfigurationError(
                    f"Invalid value for {name}: {value!r}", config_file
                )
