"""Configuration loading and validation."""

from .config_manager import AppConfig, ConfigManager, DataConfig, PatchConfig

__all__ = ["AppConfig", "ConfigManager", "DataConfig", "PatchConfig"]
