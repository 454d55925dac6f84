# feecast/training/predictor.py
from __future__ import annotations

import math
from typing import Optional, Sequence

from feecast.training.train_result import FittedModel


def predict(model: Optional[FittedModel], features: Sequence[float]) -> Optional[float]:
    """
    Apply a fitted model to one feature vector.

    Returns None when there is no model, the shape does not match the
    trained dimension, or any input / the result is non-finite. A fee cannot
    be negative, so the result is floored at 0.
    """
    if model is None:
        return None

    weights = model.weights
    if len(features) != len(weights):
        return None

    value = model.bias
    for w, x in zip(weights, features):
        try:
            if not (math.isfinite(w) and math.isfinite(x)):
                return None
        except TypeError:
            return None
        value += w * x

    if not math.isfinite(value):
        return None
    return max(0.0, value)
