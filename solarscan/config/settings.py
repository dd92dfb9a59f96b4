"""Configuration dataclass and loading utilities.

Provides a strongly-typed configuration object that is injected into the
analysis service instead of module-level state. Precedence, lowest to
highest: ``DEFAULT_CONFIG``, the JSON file, ``SOLARSCAN_*`` environment
variables.
"""
from __future__ import annotations
from dataclasses import dataclass, field, asdict, fields
from typing import Any, Dict, List, Optional
import copy, json, os, logging

from ..core.constants import DETAIL_LEVELS, SUPPORTED_IMAGE_FORMATS
from ..core.entities import AnalysisOptions
from ..core.exceptions import ConfigError
from .defaults import DEFAULT_CONFIG
from .env_config import load_environment_config

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class Config:
    # Analysis Settings
    confidence_threshold: float = DEFAULT_CONFIG["confidence_threshold"]
    detail_level: str = DEFAULT_CONFIG["detail_level"]
    model_input_width: int = DEFAULT_CONFIG["model_input_width"]
    model_input_height: int = DEFAULT_CONFIG["model_input_height"]
    enhance_before_inference: bool = DEFAULT_CONFIG["enhance_before_inference"]
    contrast_factor: float = DEFAULT_CONFIG["contrast_factor"]

    # Upload Limits
    max_file_size: int = DEFAULT_CONFIG["max_file_size"]
    supported_mime_types: List[str] = field(
        default_factory=lambda: list(DEFAULT_CONFIG["supported_mime_types"]))

    # Batch Settings
    max_batch_size: int = DEFAULT_CONFIG["max_batch_size"]
    batch_workers: int = DEFAULT_CONFIG["batch_workers"]
    analysis_timeout_seconds: float = DEFAULT_CONFIG["analysis_timeout_seconds"]

    # Thumbnails
    thumbnail_width: int = DEFAULT_CONFIG["thumbnail_width"]
    thumbnail_height: int = DEFAULT_CONFIG["thumbnail_height"]

    # Classifier Backend
    model_path: str = DEFAULT_CONFIG["model_path"]

    # Debug and Logging Settings
    log_level: str = DEFAULT_CONFIG["log_level"]
    log_dir: str = DEFAULT_CONFIG["log_dir"]
    enable_file_logging: bool = DEFAULT_CONFIG["enable_file_logging"]
    structured_logging: bool = DEFAULT_CONFIG["structured_logging"]

    # Arbitrary extra values retained for forward compatibility
    extra: Dict[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        validate_config(self)

    def to_dict(self) -> Dict[str, Any]:
        d = asdict(self)
        # merge extra keys at top-level for saving
        extra = d.pop("extra", {})
        d.update(extra)
        return d

    def get(self, key: str, default: Any = None) -> Any:
        if key in _FIELD_NAMES:
            return getattr(self, key)
        return self.extra.get(key, default)

    def analysis_options(self, **overrides: Any) -> AnalysisOptions:
        """Per-call analysis options, defaulting to this configuration."""
        return AnalysisOptions(
            confidence_threshold=overrides.get("confidence_threshold", self.confidence_threshold),
            detail_level=overrides.get("detail_level", self.detail_level),
        )


_FIELD_NAMES = frozenset(f.name for f in fields(Config)) - {"extra"}


def validate_config(cfg: Config) -> None:
    """Raise ConfigError on the first invalid setting."""
    if not 0.0 <= cfg.confidence_threshold <= 1.0:
        raise ConfigError(f"confidence_threshold must lie in [0, 1], got {cfg.confidence_threshold}")
    if cfg.detail_level not in DETAIL_LEVELS:
        raise ConfigError(f"detail_level must be one of {DETAIL_LEVELS}, got {cfg.detail_level!r}")
    for key in ("model_input_width", "model_input_height", "max_file_size", "max_batch_size",
                "batch_workers", "thumbnail_width", "thumbnail_height"):
        value = getattr(cfg, key)
        if not isinstance(value, int) or isinstance(value, bool) or value <= 0:
            raise ConfigError(f"{key} must be a positive integer, got {value!r}")
    if cfg.analysis_timeout_seconds <= 0:
        raise ConfigError(f"analysis_timeout_seconds must be positive, got {cfg.analysis_timeout_seconds}")
    if cfg.contrast_factor <= 0:
        raise ConfigError(f"contrast_factor must be positive, got {cfg.contrast_factor}")
    unknown = [m for m in cfg.supported_mime_types if m not in SUPPORTED_IMAGE_FORMATS]
    if unknown:
        raise ConfigError(f"Unsupported MIME types in configuration: {unknown}")


def load_config(path: str = "config.json", env_file: Optional[str] = None) -> Config:
    """Load configuration from a JSON file with environment overrides.

    Args:
        path: Path to config.json file; a missing file means defaults
        env_file: Path to .env file (optional)

    Returns:
        Config: Loaded and validated configuration

    Raises:
        ConfigError: A value (from file or environment) is invalid
    """
    data: Dict[str, Any] = {}

    if os.path.isfile(path):
        try:
            with open(path, "r", encoding="utf-8") as f:
                loaded_data = json.load(f)
            if loaded_data is None:
                logger.warning(f"Configuration file '{path}' is empty, using defaults")
            elif not isinstance(loaded_data, dict):
                logger.error(f"Configuration file '{path}' does not contain a JSON object, using defaults")
            else:
                data = loaded_data
                logger.info(f"Loaded configuration from '{path}'")
        except json.JSONDecodeError as e:
            logger.error(f"Failed to parse JSON configuration file '{path}': {e}. Using defaults.")
        except PermissionError:
            logger.error(f"Permission denied reading configuration file '{path}'. Using defaults.")
    else:
        logger.info(f"Configuration file '{path}' does not exist. Using defaults.")

    merged = {**copy.deepcopy(DEFAULT_CONFIG), **data}
    merged.update(load_environment_config(env_file).overrides())

    extra = {k: v for k, v in merged.items() if k not in _FIELD_NAMES}
    if extra:
        logger.info(f"Found extra configuration keys: {list(extra.keys())}")

    try:
        return Config(**{k: merged[k] for k in _FIELD_NAMES}, extra=extra)
    except TypeError as e:
        raise ConfigError(f"Invalid configuration value: {e}") from e


def save_config(cfg: Config, path: str = "config.json") -> None:
    """Save configuration to a JSON file."""
    try:
        with open(path, "w", encoding="utf-8") as f:
            json.dump(cfg.to_dict(), f, indent=2, ensure_ascii=False)
    except OSError as e:
        raise ConfigError(f"Could not write configuration file '{path}': {e}") from e
    logger.info(f"Configuration saved to '{path}'")
