"""
Numeric primitives used by the scoring engines
"""
from typing import Sequence, Union

import numpy as np
from sklearn.metrics.pairwise import cosine_similarity as _pairwise_cosine

ArrayLike = Union[Sequence[float], np.ndarray]


def _as_pair(a: ArrayLike, b: ArrayLike):
    x = np.asarray(a, dtype=float)
    y = np.asarray(b, dtype=float)
    if x.ndim != 1 or y.ndim != 1:
        raise ValueError("Expected one-dimensional vectors")
    if x.shape != y.shape:
        raise ValueError(f"Vector length mismatch: {x.shape[0]} != {y.shape[0]}")
    return x, y


def cosine_similarity(a: ArrayLike, b: ArrayLike) -> float:
    """
    Cosine of the angle between two equal-length vectors

    Returns 0.0 if either vector has zero magnitude.
    Raises ValueError on mismatched lengths.
    """
    x, y = _as_pair(a, b)
    if x.size == 0 or not np.any(x) or not np.any(y):
        return 0.0
    value = _pairwise_cosine(x.reshape(1, -1), y.reshape(1, -1))[0, 0]
    return float(np.clip(value, -1.0, 1.0))


def pearson_correlation(x: ArrayLike, y: ArrayLike) -> float:
    """
    Pearson correlation coefficient

    Returns 0.0 when either series has no variance.
    """
    a, b = _as_pair(x, y)
    if a.size == 0 or np.ptp(a) == 0 or np.ptp(b) == 0:
        return 0.0

    da = a - a.mean()
    db = b - b.mean()
    denominator = np.sqrt(np.dot(da, da) * np.dot(db, db))
    if denominator == 0:
        return 0.0
    return float(np.clip(np.dot(da, db) / denominator, -1.0, 1.0))


def normalize(values: ArrayLike) -> np.ndarray:
    """
    Min-max scale values to [0, 1]

    Values are returned unchanged when they are all equal.
    """
    arr = np.asarray(values, dtype=float)
    if arr.size == 0:
        return arr
    value_range = arr.max() - arr.min()
    if value_range == 0:
        return arr
    return (arr - arr.min()) / value_range
