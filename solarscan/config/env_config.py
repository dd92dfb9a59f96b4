"""Environment variable configuration.

Every setting can be overridden with a ``SOLARSCAN_*`` variable, read from
the process environment or an optional ``.env`` file. Values are validated
before use; an invalid value is an error, not a silent fallback.
"""
import os
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Optional, Union

from ..core.exceptions import ConfigError

logger = logging.getLogger(__name__)

ENV_PREFIX = "SOLARSCAN_"

_TRUE_VALUES = ('true', '1', 'yes', 'on')
_FALSE_VALUES = ('false', '0', 'no', 'off')


@dataclass(frozen=True)
class EnvironmentConfig:
    """Immutable set of overrides found in the environment (None = not set)."""

    confidence_threshold: Optional[float] = None
    model_path: Optional[str] = None
    analysis_timeout_seconds: Optional[float] = None
    max_file_size: Optional[int] = None
    log_level: Optional[str] = None
    structured_logging: Optional[bool] = None

    def overrides(self) -> Dict[str, object]:
        """Only the values that were actually set."""
        return {k: v for k, v in self.__dict__.items() if v is not None}


class EnvironmentConfigError(ConfigError):
    """Raised when an environment variable holds an invalid value."""
    pass


class EnvironmentValidator:
    """Validates environment variable values."""

    VALID_LOG_LEVELS = {'DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'}

    @classmethod
    def validate_numeric_range(cls, key: str, value: str,
                               min_val: Optional[Union[int, float]] = None,
                               max_val: Optional[Union[int, float]] = None,
                               value_type: type = int) -> Union[int, float]:
        try:
            numeric_value = value_type(value)
        except (ValueError, TypeError):
            raise EnvironmentConfigError(f"{key}: invalid {value_type.__name__} value {value!r}")

        if min_val is not None and numeric_value < min_val:
            raise EnvironmentConfigError(f"{key}: value {numeric_value} below minimum {min_val}")
        if max_val is not None and numeric_value > max_val:
            raise EnvironmentConfigError(f"{key}: value {numeric_value} above maximum {max_val}")
        return numeric_value

    @classmethod
    def validate_bool(cls, key: str, value: str) -> bool:
        lowered = value.strip().lower()
        if lowered in _TRUE_VALUES:
            return True
        if lowered in _FALSE_VALUES:
            return False
        raise EnvironmentConfigError(f"{key}: expected a boolean, got {value!r}")

    @classmethod
    def validate_log_level(cls, key: str, value: str) -> str:
        level = value.strip().upper()
        if level not in cls.VALID_LOG_LEVELS:
            raise EnvironmentConfigError(f"{key}: unknown log level {value!r}")
        return level


def load_env_file(env_path: Optional[str] = None) -> Dict[str, str]:
    """Parse KEY=VALUE lines from a .env file (missing file = no values)."""
    env_file_path = Path(env_path or ".env")
    env_vars: Dict[str, str] = {}

    if not env_file_path.exists():
        logger.debug(f"Environment file {env_file_path} not found, using process environment only")
        return env_vars

    with open(env_file_path, 'r', encoding='utf-8') as f:
        for line_num, line in enumerate(f, 1):
            line = line.strip()
            if not line or line.startswith('#'):
                continue
            if '=' not in line:
                logger.warning(f"Invalid line format in {env_file_path}:{line_num}: {line}")
                continue

            key, value = line.split('=', 1)
            value = value.strip()
            if len(value) >= 2 and value[0] == value[-1] and value[0] in ('"', "'"):
                value = value[1:-1]
            env_vars[key.strip()] = value

    logger.info(f"Loaded {len(env_vars)} variables from {env_file_path}")
    return env_vars


def get_env_var(name: str, env_vars: Optional[Dict[str, str]] = None) -> Optional[str]:
    """Process environment wins over the .env file; blank counts as unset."""
    key = ENV_PREFIX + name
    value = os.getenv(key)
    if value is None and env_vars:
        value = env_vars.get(key)
    if value is None or value.strip() == "":
        return None
    return value


def load_environment_config(env_file_path: Optional[str] = None) -> EnvironmentConfig:
    """Collect and validate ``SOLARSCAN_*`` overrides.

    Raises:
        EnvironmentConfigError: If any set variable has an invalid value
    """
    env_vars = load_env_file(env_file_path)
    validator = EnvironmentValidator()
    values: Dict[str, object] = {}

    raw = get_env_var("CONFIDENCE_THRESHOLD", env_vars)
    if raw is not None:
        values["confidence_threshold"] = validator.validate_numeric_range(
            "SOLARSCAN_CONFIDENCE_THRESHOLD", raw, 0.0, 1.0, float)

    raw = get_env_var("MODEL_PATH", env_vars)
    if raw is not None:
        values["model_path"] = raw.strip()

    raw = get_env_var("ANALYSIS_TIMEOUT", env_vars)
    if raw is not None:
        values["analysis_timeout_seconds"] = validator.validate_numeric_range(
            "SOLARSCAN_ANALYSIS_TIMEOUT", raw, 0.1, 600.0, float)

    raw = get_env_var("MAX_FILE_SIZE", env_vars)
    if raw is not None:
        values["max_file_size"] = validator.validate_numeric_range(
            "SOLARSCAN_MAX_FILE_SIZE", raw, 1, None, int)

    raw = get_env_var("LOG_LEVEL", env_vars)
    if raw is not None:
        values["log_level"] = validator.validate_log_level("SOLARSCAN_LOG_LEVEL", raw)

    raw = get_env_var("STRUCTURED_LOGGING", env_vars)
    if raw is not None:
        values["structured_logging"] = validator.validate_bool("SOLARSCAN_STRUCTURED_LOGGING", raw)

    if values:
        logger.info(f"Environment overrides: {sorted(values)}")
    return EnvironmentConfig(**values)
