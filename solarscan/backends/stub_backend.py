"""Deterministic classifier returning fixed scores."""
import logging
from typing import Any, Dict, List, Optional, Sequence

import numpy as np

from ..core.entities import Category, ClassScore
from ..core.exceptions import ModelError
from .base_backend import BaseClassifier

logger = logging.getLogger(__name__)


class StubClassifier(BaseClassifier):
    """Backend that ignores its input and returns preset scores.

    Useful for tests, demos and for exercising the pipeline without a model.
    Scores may be given by category or by raw index::

        StubClassifier([(Category.NORMAL, 0.95), (Category.LEAVES, 0.82)])
    """

    def __init__(self, scores: Sequence = (), config: Optional[Dict[str, Any]] = None):
        super().__init__(config)
        self.scores: List[ClassScore] = [
            (key.index if isinstance(key, Category) else int(key), float(conf))
            for key, conf in scores
        ]
        self.calls = 0

    def load_model(self, model_path_or_name: Optional[str] = None) -> bool:
        self.is_loaded = True
        self.model_info = {'backend': 'stub', 'num_classes': len(Category)}
        return True

    def classify(self, tensor: np.ndarray) -> List[ClassScore]:
        if not self.is_loaded:
            raise ModelError("No model loaded")
        self.calls += 1
        return list(self.scores)

    def get_model_info(self) -> Dict[str, Any]:
        if not self.is_loaded:
            return {'status': 'not_loaded'}
        return dict(self.model_info, scores=list(self.scores))
