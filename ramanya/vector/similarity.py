"""
Vector math for similarity ranking.
"""

from typing import Sequence, Union
import numpy as np

Vector = Union[Sequence[float], np.ndarray]


def dot(a: Vector, b: Vector) -> float:
    """Dot product over the shared prefix of a and b.

    Vectors of different length are compared on their first min(len(a), len(b))
    components instead of raising.
    """
    n = min(len(a), len(b))
    if n == 0:
        return 0.0
    return float(np.dot(np.asarray(a[:n], dtype=float), np.asarray(b[:n], dtype=float)))


def magnitude(v: Vector) -> float:
    """Euclidean norm."""
    if len(v) == 0:
        return 0.0
    return float(np.linalg.norm(np.asarray(v, dtype=float)))


def cosine_similarity(a: Vector, b: Vector) -> float:
    """Cosine similarity in [-1, 1]; 0.0 when either vector has zero magnitude."""
    mag_a = magnitude(a)
    mag_b = magnitude(b)
    if mag_a == 0 or mag_b == 0:
        return 0.0
    return dot(a, b) / (mag_a * mag_b)
