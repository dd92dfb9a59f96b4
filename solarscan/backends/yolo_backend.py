"""YOLO classification backend using Ultralytics."""
import logging
from typing import Any, Dict, List, Optional

import numpy as np

from ..core.entities import Category, ClassScore
from ..core.exceptions import ModelError
from .base_backend import BaseClassifier

logger = logging.getLogger(__name__)

# Try to import ultralytics
HAS_ULTRALYTICS = False
try:
    import torch
    from ultralytics import YOLO
    HAS_ULTRALYTICS = True
except ImportError:
    HAS_ULTRALYTICS = False


class YoloClassifierBackend(BaseClassifier):
    """Whole-image classifier backed by an Ultralytics ``-cls`` model.

    The model's class names are mapped onto ``Category`` values by name
    (``normal``, ``leaves``, ``dust``, ``shadow``, ``other``). Names that match
    no category are scored as ``other``; the finding synthesizer keeps the
    highest of any duplicates.
    """

    DEFAULT_MODEL = "yolo11n-cls.pt"

    def __init__(self, config: Optional[Dict[str, Any]] = None):
        super().__init__(config)
        self.model = None
        self.model_path: Optional[str] = None
        self._index_map: Dict[int, int] = {}

    def load_model(self, model_path_or_name: Optional[str] = None) -> bool:
        """Load a YOLO classification model from path or model name."""
        if not HAS_ULTRALYTICS:
            raise ModelError("Ultralytics not installed. Cannot use YOLO backend.")

        model_path_or_name = model_path_or_name or self.config.get('model_path') or self.DEFAULT_MODEL
        try:
            self.model = YOLO(model_path_or_name)
        except Exception as e:
            self.is_loaded = False
            raise ModelError(f"Failed to load YOLO model {model_path_or_name}: {e}") from e

        names = getattr(self.model, 'names', {}) or {}
        self._index_map = {int(idx): self._category_for(name).index for idx, name in names.items()}
        self.model_path = model_path_or_name
        self.is_loaded = True
        self.model_info = {
            'backend': 'ultralytics',
            'model_type': 'YOLO-cls',
            'model_path': model_path_or_name,
            'device': str(getattr(self.model, 'device', 'unknown')),
        }
        logger.info(f"Loaded classifier model: {model_path_or_name} ({len(names)} classes)")
        return True

    @staticmethod
    def _category_for(name: str) -> Category:
        try:
            return Category(str(name).strip().lower())
        except ValueError:
            return Category.OTHER

    def classify(self, tensor: np.ndarray) -> List[ClassScore]:
        """Run classification on an (H, W, 3) float tensor in [0, 1]."""
        if not self.is_loaded or self.model is None:
            raise ModelError("No model loaded")

        # Ultralytics accepts BCHW float tensors already scaled to [0, 1]
        batch = torch.from_numpy(np.ascontiguousarray(tensor.transpose(2, 0, 1)))[None]
        results = self.model(batch, verbose=False)
        probs = results[0].probs
        if probs is None:
            raise ModelError("Model did not return class probabilities; is it a -cls model?")

        scores = probs.data.cpu().numpy()
        return [
            (self._index_map.get(i, Category.OTHER.index), float(np.clip(score, 0.0, 1.0)))
            for i, score in enumerate(scores)
        ]

    def get_model_info(self) -> Dict[str, Any]:
        if not self.is_loaded:
            return {'status': 'not_loaded'}
        info = self.model_info.copy()
        if self.model is not None and hasattr(self.model, 'names'):
            info['num_classes'] = len(self.model.names)
            info['class_names'] = self.model.names
        return info

    def unload_model(self) -> None:
        if self.model is not None:
            del self.model
            self.model = None
        super().unload_model()
        self.model_path = None
        self._index_map = {}
