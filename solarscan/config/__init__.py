"""Configuration management package."""

from .settings import Config, load_config, save_config, validate_config
from .defaults import DEFAULT_CONFIG
from .env_config import EnvironmentConfig, EnvironmentConfigError, load_environment_config

__all__ = [
    "Config", "load_config", "save_config", "validate_config", "DEFAULT_CONFIG",
    "EnvironmentConfig", "EnvironmentConfigError", "load_environment_config",
]
