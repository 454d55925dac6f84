# feecast/training/engines/ols_train_engine.py
from __future__ import annotations

import math
from typing import Optional, Sequence, Tuple

import numpy as np

from feecast import logs
from feecast.training.engines.dataset_build_engine import Sample
from feecast.training.train_result import FitStatus, FittedModel, TrainResult

# bias + 2 features = 3 unknowns; fewer rows than this is noise-dominated
MIN_SAMPLES = 6
PIVOT_EPS = 1e-15


class OlsTrainEngine:
    """
    OLS Train Engine（Day-scoped batch / FINAL）

    Semantics:
    - normal equations XᵗX·θ = Xᵗy, design row = [1, x1 .. xd]
    - Gaussian elimination with partial pivoting
    - dimension-generic (any d >= 1)
    - deterministic: same samples → same θ / mse

    Failure is a status, never an exception:
    - INSUFFICIENT_DATA : < MIN_SAMPLES usable samples
    - SINGULAR_SYSTEM   : pivot below PIVOT_EPS or any non-finite step
    """

    def fit(
        self,
        samples: Sequence[Sample],
        dimension: Optional[int] = None,
    ) -> TrainResult:
        total = len(samples)
        if total < MIN_SAMPLES:
            return self._failed(FitStatus.INSUFFICIENT_DATA, total=total, used=0)

        d = dimension if dimension is not None else len(samples[0].features)
        if d < 1:
            return self._failed(FitStatus.INSUFFICIENT_DATA, total=total, used=0)

        usable = [s for s in samples if is_usable(s, d)]
        if len(usable) < MIN_SAMPLES:
            return self._failed(FitStatus.INSUFFICIENT_DATA, total=total, used=len(usable))

        xtx, xty = normal_equations(usable, d)

        theta = solve_linear_system(xtx, xty)
        if theta is None:
            return self._failed(FitStatus.SINGULAR_SYSTEM, total=total, used=len(usable))

        mse = training_mse(theta, usable)
        if mse is None:
            return self._failed(FitStatus.SINGULAR_SYSTEM, total=total, used=len(usable))

        model = FittedModel(
            bias=float(theta[0]),
            weights=tuple(float(w) for w in theta[1:]),
            train_mse=mse,
        )
        return TrainResult(
            status=FitStatus.OK,
            model=model,
            metrics={"samples": total, "used": len(usable), "train_mse": mse},
        )

    @staticmethod
    def _failed(status: FitStatus, *, total: int, used: int) -> TrainResult:
        logs.warning(f"[OlsTrainEngine] no model: {status.value} samples={total} used={used}")
        return TrainResult(status=status, metrics={"samples": total, "used": used})


# ======================================================================
# Numeric building blocks
# ======================================================================
def _finite(value) -> bool:
    try:
        return math.isfinite(value)
    except TypeError:
        return False


def is_usable(sample: Sample, d: int) -> bool:
    features = sample.features
    if features is None or len(features) != d:
        return False
    if not _finite(sample.label):
        return False
    return all(_finite(x) for x in features)


def normal_equations(usable: Sequence[Sample], d: int) -> Tuple[np.ndarray, np.ndarray]:
    """
    Accumulate XᵗX (upper triangle only) and Xᵗy, then mirror XᵗX.
    """
    p = d + 1
    xtx = np.zeros((p, p), dtype=float)
    xty = np.zeros(p, dtype=float)
    upper = np.triu_indices(p)

    with np.errstate(over="ignore", invalid="ignore"):
        for s in usable:
            row = np.empty(p, dtype=float)
            row[0] = 1.0
            row[1:] = s.features

            xty += row * s.label
            xtx[upper] += np.outer(row, row)[upper]

    # symmetry of XᵗX: lower = upper transposed
    lower = np.tril_indices(p, -1)
    xtx[lower] = xtx.T[lower]
    return xtx, xty


def _square_size(a: np.ndarray, b: np.ndarray) -> Optional[int]:
    """n for a finite n×n system with a length-n rhs, else None."""
    if a.ndim != 2 or b.ndim != 1:
        return None
    n = a.shape[0]
    if n == 0 or a.shape[1] != n or b.shape[0] != n:
        return None
    if not (np.all(np.isfinite(a)) and np.all(np.isfinite(b))):
        return None
    return n


def solve_linear_system(a_in: np.ndarray, b_in: np.ndarray) -> Optional[np.ndarray]:
    """
    Solve A·x = b (Gaussian elimination + partial pivoting).

    Returns None if the system is singular to PIVOT_EPS or any step is
    non-finite. Inputs are not modified.
    """
    a = np.array(a_in, dtype=float, copy=True)
    b = np.array(b_in, dtype=float, copy=True)

    n = _square_size(a, b)
    if n is None:
        return None

    with np.errstate(all="ignore"):
        for i in range(n):
            # pivot search: largest |a[r, i]| among remaining rows
            pivot = i + int(np.argmax(np.abs(a[i:, i])))
            max_abs = abs(a[pivot, i])
            if not (max_abs > PIVOT_EPS) or not math.isfinite(max_abs):
                return None

            if pivot != i:
                a[[i, pivot]] = a[[pivot, i]]
                b[[i, pivot]] = b[[pivot, i]]

            factors = a[i + 1:, i] / a[i, i]
            if not np.all(np.isfinite(factors)):
                return None

            a[i + 1:, i:] -= np.outer(factors, a[i, i:])
            a[i + 1:, i] = 0.0
            b[i + 1:] -= factors * b[i]

        # back substitution
        x = np.zeros(n, dtype=float)
        for i in range(n - 1, -1, -1):
            diag = a[i, i]
            if not (abs(diag) > PIVOT_EPS) or not math.isfinite(diag):
                return None
            x[i] = (b[i] - a[i, i + 1:] @ x[i + 1:]) / diag
            if not math.isfinite(x[i]):
                return None

    return x


def training_mse(theta: np.ndarray, usable: Sequence[Sample]) -> Optional[float]:
    """Mean squared residual; non-finite predictions are left out."""
    if not usable:
        return None

    X = np.array([s.features for s in usable], dtype=float)
    y = np.array([s.label for s in usable], dtype=float)

    with np.errstate(all="ignore"):
        preds = theta[0] + X @ theta[1:]
        mask = np.isfinite(preds)
        if not mask.any():
            return None
        return float(np.mean((preds[mask] - y[mask]) ** 2))
