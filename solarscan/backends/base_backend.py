"""Base classifier interface for model backends.

A classifier takes the fixed-size float tensor produced by
``services.tensor_codec.encode`` and returns an ordered list of
``(category index, confidence)`` pairs, each confidence in [0, 1]. The
analysis pipeline depends only on this interface, so any backend (CPU,
accelerated, remote, or a deterministic stub) can be swapped in.
"""
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

import numpy as np

from ..core.entities import ClassScore


class BaseClassifier(ABC):
    """Abstract base class for classifier backends.

    Backends are used as context managers so that a loaded model is always
    released::

        with YoloClassifierBackend(config) as classifier:
            service = AnalysisService(classifier)
            ...
    """

    def __init__(self, config: Optional[Dict[str, Any]] = None):
        self.config = config or {}
        self.is_loaded = False
        self.model_info: Dict[str, Any] = {}

    @abstractmethod
    def load_model(self, model_path_or_name: Optional[str] = None) -> bool:
        """Load a model from path or model name."""
        pass

    @abstractmethod
    def classify(self, tensor: np.ndarray) -> List[ClassScore]:
        """Score one (H, W, 3) float32 tensor with values in [0, 1]."""
        pass

    @abstractmethod
    def get_model_info(self) -> Dict[str, Any]:
        """Get information about the loaded model."""
        pass

    def is_model_loaded(self) -> bool:
        return self.is_loaded

    def unload_model(self) -> None:
        """Unload the current model to free memory."""
        self.is_loaded = False
        self.model_info = {}

    def __enter__(self) -> "BaseClassifier":
        if not self.is_loaded:
            self.load_model(self.config.get('model_path') or None)
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.unload_model()
