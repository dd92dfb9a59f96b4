"""Custom exceptions for the analysis pipeline."""

from typing import Any, Dict, Optional


class ApplicationError(Exception):
    """Base application error."""
    pass


class ConfigError(ApplicationError):
    """Configuration-related errors."""
    pass


class ModelError(ApplicationError):
    """Model loading/unloading errors."""
    pass


class PipelineError(ApplicationError):
    """Base exception for errors raised by an analysis run.

    Every pipeline error is terminal for the call that raised it. Only
    errors marked ``retryable`` may succeed when the same input is
    submitted again.
    """

    error_type = "PIPELINE_ERROR"
    retryable = False

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None,
                 retryable: Optional[bool] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}
        if retryable is not None:
            self.retryable = retryable

    def to_dict(self) -> Dict[str, Any]:
        data = {
            "type": self.error_type,
            "message": self.message,
            "retryable": self.retryable,
        }
        if self.details:
            data["details"] = self.details
        return data


class InvalidDimension(PipelineError, ValueError):
    """Target extent or kernel shape is not usable."""
    error_type = "INVALID_DIMENSION"


class OutOfBounds(PipelineError, ValueError):
    """Requested region exceeds the buffer extent."""
    error_type = "OUT_OF_BOUNDS"


class UnsupportedChannelCount(PipelineError, ValueError):
    """Buffer has a channel count the operation cannot handle."""
    error_type = "UNSUPPORTED_CHANNEL_COUNT"


class UnsupportedFormat(PipelineError, ValueError):
    """Declared MIME type is not one the decoder accepts."""
    error_type = "UNSUPPORTED_FORMAT"


class DecodeFailure(PipelineError):
    """Image bytes could not be decoded."""
    error_type = "DECODE_FAILURE"


class ClassifierFailure(PipelineError):
    """Classifier raised, timed out or returned malformed output."""
    error_type = "AI_PROCESSING_ERROR"
    retryable = True


class InvalidOptions(PipelineError, ValueError):
    """Analysis options are out of range."""
    error_type = "VALIDATION_ERROR"
