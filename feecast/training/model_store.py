# feecast/training/model_store.py
from __future__ import annotations

import threading
from typing import Optional

from feecast.training.train_result import FittedModel


class ModelStore:
    """
    Single-slot holder of the current FittedModel.

    - starts empty
    - set() swaps the whole (immutable) model; last writer wins
    - get() returns the old or the new model, never a partial one
    """

    def __init__(self, model: Optional[FittedModel] = None):
        self._lock = threading.Lock()
        self._model = model

    def get(self) -> Optional[FittedModel]:
        with self._lock:
            return self._model

    def set(self, model: Optional[FittedModel]) -> None:
        with self._lock:
            self._model = model

    @property
    def ready(self) -> bool:
        return self.get() is not None
