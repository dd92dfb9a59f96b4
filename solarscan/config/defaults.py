"""Default configuration values."""

from typing import Any, Dict

DEFAULT_CONFIG: Dict[str, Any] = {
    # Analysis Settings
    "confidence_threshold": 0.5,  # 0.0 to 1.0
    "detail_level": "detailed",  # basic | detailed
    "model_input_width": 224,
    "model_input_height": 224,
    "enhance_before_inference": True,
    "contrast_factor": 1.2,

    # Upload Limits
    "max_file_size": 10 * 1024 * 1024,  # 10MB
    "supported_mime_types": ["image/jpeg", "image/png", "image/webp"],

    # Batch Settings
    "max_batch_size": 10,
    "batch_workers": 4,
    "analysis_timeout_seconds": 30.0,

    # Thumbnails
    "thumbnail_width": 200,
    "thumbnail_height": 200,

    # Classifier Backend
    "model_path": "",  # Empty uses the backend's default model

    # Debug and Logging Settings
    "log_level": "INFO",
    "log_dir": "logs",
    "enable_file_logging": False,
    "structured_logging": False,
}
