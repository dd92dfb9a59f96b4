"""Classifier backend implementations."""

from .base_backend import BaseClassifier
from .stub_backend import StubClassifier
from .yolo_backend import YoloClassifierBackend

__all__ = ["BaseClassifier", "StubClassifier", "YoloClassifierBackend"]
