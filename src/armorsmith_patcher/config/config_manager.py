"""Configuration management for Armorsmith Patcher.

Settings come from a YAML file, with a small set of environment variable
overrides applied on top.
"""
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional
import yaml
import structlog

from armorsmith_patcher import ConfigurationError

VALID_LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


@dataclass
class PatchConfig:
    """Patch output and rule settings."""
    patch_file_name: str = "zPatch.esp"
    ballistic_weave_only_for_clothes: bool = True


@dataclass
class DataConfig:
    """Locations of the taxonomy, override and report files.

    Relative paths are resolved against the configuration file's directory.
    """
    overrides_directory: str = "overrides"
    slot_data_file: Optional[str] = None
    guesses_file: str = "guesses.csv"


@dataclass
class AppConfig:
    """Main application configuration."""
    log_level: str = "INFO"
    patch: PatchConfig = field(default_factory=PatchConfig)
    data: DataConfig = field(default_factory=DataConfig)


class ConfigManager:
    """Manages patcher configuration from YAML files and environment variables."""

    def __init__(self, config_path: Optional[Path] = None, logger: Optional[structlog.BoundLogger] = None):
        """Initialize configuration manager.

        Args:
            config_path: Path to configuration file
            logger: Structured logger instance

        Raises:
            ConfigurationError: If configuration is invalid
        """
        self.logger = logger or structlog.get_logger()
        self.config_path = Path(config_path) if config_path else Path("config/default.yaml")
        self._config = self._load_config()

    def _load_config(self) -> AppConfig:
        """Load configuration from file and environment variables.

        Returns:
            Loaded and validated configuration

        Raises:
            ConfigurationError: If configuration cannot be loaded or is invalid
        """
        config_data: Dict[str, Any] = {}

        if self.config_path.exists():
            self.logger.info("Loading configuration", config_path=str(self.config_path))
            try:
                with open(self.config_path, 'r', encoding='utf-8') as f:
                    config_data = yaml.safe_load(f) or {}
            except (OSError, yaml.YAMLError) as e:
                raise ConfigurationError(f"Failed to load configuration: {e}") from e
        else:
            self.logger.warning("Configuration file not found, using defaults",
                                config_path=str(self.config_path))

        if not isinstance(config_data, dict):
            raise ConfigurationError("Configuration file must contain a mapping")

        config_data = self._apply_env_overrides(config_data)

        try:
            config = AppConfig(
                log_level=str(config_data.get("log_level", "INFO")).upper(),
                patch=PatchConfig(
                    **{k: v for k, v in (config_data.get("patch") or {}).items()
                       if k in ['patch_file_name', 'ballistic_weave_only_for_clothes']}
                ),
                data=DataConfig(
                    **{k: v for k, v in (config_data.get("data") or {}).items()
                       if k in ['overrides_directory', 'slot_data_file', 'guesses_file']}
                ),
            )
        except (AttributeError, TypeError) as e:
            raise ConfigurationError(f"Invalid configuration structure: {e}") from e

        self._validate_config(config)

        self.logger.info("Configuration loaded successfully",
                         patch_file_name=config.patch.patch_file_name,
                         ballistic_weave_only_for_clothes=config.patch.ballistic_weave_only_for_clothes)

        return config

    def _apply_env_overrides(self, config_data: Dict[str, Any]) -> Dict[str, Any]:
        """Apply environment variable overrides to configuration.

        Args:
            config_data: Base configuration data

        Returns:
            Configuration with environment overrides applied
        """
        env_mappings = {
            "ARMORSMITH_PATCH_FILE": ["patch", "patch_file_name"],
            "ARMORSMITH_WEAVE_ONLY_CLOTHES": ["patch", "ballistic_weave_only_for_clothes"],
            "ARMORSMITH_OVERRIDES_DIR": ["data", "overrides_directory"],
            "ARMORSMITH_LOG_LEVEL": ["log_level"],
        }

        for env_var, config_path in env_mappings.items():
            env_value = os.getenv(env_var)
            if env_value is None:
                continue

            current = config_data
            for key in config_path[:-1]:
                current = current.setdefault(key, {})

            final_key = config_path[-1]
            if final_key == "ballistic_weave_only_for_clothes":
                current[final_key] = env_value.lower() in ("true", "1", "yes")
            else:
                current[final_key] = env_value

            self.logger.debug("Applied environment override",
                              env_var=env_var, value=env_value, config_path=config_path)

        return config_data

    def _validate_config(self, config: AppConfig) -> None:
        """Validate configuration values.

        Raises:
            ConfigurationError: If configuration is invalid
        """
        if config.log_level not in VALID_LOG_LEVELS:
            raise ConfigurationError(f"log_level must be one of {VALID_LOG_LEVELS}")

        if not config.patch.patch_file_name or not str(config.patch.patch_file_name).strip():
            raise ConfigurationError("patch_file_name must not be empty")

        if not isinstance(config.patch.ballistic_weave_only_for_clothes, bool):
            raise ConfigurationError("ballistic_weave_only_for_clothes must be true or false")

        if not config.data.guesses_file:
            raise ConfigurationError("guesses_file must not be empty")

    def _resolve(self, path: str) -> Path:
        resolved = Path(path)
        if not resolved.is_absolute():
            resolved = self.config_path.parent / resolved
        return resolved

    @property
    def config(self) -> AppConfig:
        """Get the current configuration."""
        return self._config

    def get_overrides_directory(self) -> Path:
        return self._resolve(self._config.data.overrides_directory)

    def get_slot_data_path(self) -> Optional[Path]:
        """Slot data CSV path, or ``None`` for the packaged default."""
        if not self._config.data.slot_data_file:
            return None
        return self._resolve(self._config.data.slot_data_file)

    def get_guesses_path(self) -> Path:
        return self._resolve(self._config.data.guesses_file)

    def reload(self) -> None:
        """Reload configuration from file."""
        self.logger.info("Reloading configuration")
        self._config = self._load_config()
