"""Configuration management for maketorrent.

Provides centralized configuration with TOML support, validation and
hierarchical loading from defaults -> config file -> environment -> CLI.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any

import toml

from maketorrent.models import Config
from maketorrent.utils.exceptions import ConfigurationError

CONFIG_FILE_NAME = "maketorrent.toml"

# Global configuration instance
_config_manager: ConfigManager | None = None

# Mapping of environment variables to config paths
ENV_MAPPINGS: dict[str, str] = {
    "MAKETORRENT_PIECE_LENGTH": "creator.piece_length_exponent",
    "MAKETORRENT_HASH_WORKERS": "creator.hash_workers",
    "MAKETORRENT_MAX_PENDING_PIECES": "creator.max_pending_pieces",
    "MAKETORRENT_CREATED_BY": "creator.created_by",
    "MAKETORRENT_LOG_LEVEL": "observability.log_level",
    "MAKETORRENT_LOG_FILE": "observability.log_file",
    "MAKETORRENT_STRUCTURED_LOGGING": "observability.structured_logging",
}


def _parse_env_value(raw: str) -> bool | int | str:
    low = raw.lower()
    if low in {"true", "yes", "on"}:
        return True
    if low in {"false", "no", "off"}:
        return False
    try:
        return int(raw)
    except ValueError:
        return raw


def _set_nested(d: dict[str, Any], path: str, value: Any) -> None:
    parts = path.split(".")
    cur = d
    for p in parts[:-1]:
        cur = cur.setdefault(p, {})
    cur[parts[-1]] = value


class ConfigManager:
    """Manages configuration loading and validation."""

    def __init__(
        self,
        config_file: str | Path | None = None,
        overrides: dict[str, Any] | None = None,
    ):
        """Initialize configuration manager.

        Args:
            config_file: Path to TOML config file. If None, searches for
                maketorrent.toml in the standard locations
            overrides: Nested values applied last (command line options)

        Raises:
            ConfigurationError: If an explicit config file is missing or
                unreadable, or the merged configuration is invalid

        """
        self.config_file = self._find_config_file(config_file)
        self.overrides = overrides or {}
        self.config = self._load_config()

    def _find_config_file(self, config_file: str | Path | None) -> Path | None:
        """Find configuration file in standard locations."""
        if config_file:
            path = Path(config_file)
            if not path.exists():
                msg = f"Config file not found: {path}"
                raise ConfigurationError(msg)
            return path

        search_paths = [
            Path.cwd() / CONFIG_FILE_NAME,
            Path.home() / ".config" / "maketorrent" / CONFIG_FILE_NAME,
        ]
        for path in search_paths:
            if path.exists():
                return path
        return None

    def _load_config(self) -> Config:
        """Load configuration from file, environment and overrides."""
        config_data: dict[str, Any] = {}

        if self.config_file is not None:
            try:
                with open(self.config_file, encoding="utf-8") as f:
                    config_data.update(toml.load(f))
            except (OSError, toml.TomlDecodeError) as e:
                msg = f"Failed to load config file {self.config_file}: {e}"
                raise ConfigurationError(msg) from e
            logging.getLogger(__name__).debug("Loaded config file %s", self.config_file)

        config_data = self._merge_config(config_data, self._get_env_config())
        config_data = self._merge_config(config_data, self.overrides)

        try:
            return Config(**config_data)
        except Exception as e:
            msg = f"Invalid configuration: {e}"
            raise ConfigurationError(msg) from e

    def _get_env_config(self) -> dict[str, Any]:
        """Get configuration from environment variables."""
        env_config: dict[str, Any] = {}
        for env_name, cfg_path in ENV_MAPPINGS.items():
            raw = os.getenv(env_name)
            if raw is None:
                continue
            _set_nested(env_config, cfg_path, _parse_env_value(raw))
        return env_config

    def _merge_config(
        self,
        base: dict[str, Any],
        override: dict[str, Any],
    ) -> dict[str, Any]:
        """Merge configuration dictionaries recursively."""
        result = base.copy()

        for key, value in override.items():
            if (
                key in result
                and isinstance(result[key], dict)
                and isinstance(value, dict)
            ):
                result[key] = self._merge_config(result[key], value)
            else:
                result[key] = value

        return result

    def export(self) -> str:
        """Export the current configuration as TOML."""
        data = self.config.model_dump(mode="json", exclude_none=True)
        return toml.dumps(data)


def get_config() -> Config:
    """Get the global configuration instance."""
    global _config_manager
    if _config_manager is None:
        _config_manager = ConfigManager()
    return _config_manager.config


def init_config(
    config_file: str | Path | None = None,
    overrides: dict[str, Any] | None = None,
) -> ConfigManager:
    """Initialize the global configuration manager."""
    global _config_manager
    _config_manager = ConfigManager(config_file, overrides)
    return _config_manager

