#!/usr/bin/env python3
"""
2D vector helpers.

Vectors are plain (x, y) float tuples so they can be shared between the
simulation and the renderer thread without copying concerns.
"""
import math
from typing import Tuple

Vector2 = Tuple[float, float]

ZERO: Vector2 = (0.0, 0.0)


def clamp(x: float, a: float, b: float) -> float:
    """Clamp x to the inclusive range [a, b]."""
    return max(a, min(b, x))


def vec_add(a: Vector2, b: Vector2) -> Vector2:
    return (a[0] + b[0], a[1] + b[1])


def vec_sub(a: Vector2, b: Vector2) -> Vector2:
    return (a[0] - b[0], a[1] - b[1])


def vec_scale(a: Vector2, s: float) -> Vector2:
    return (a[0] * s, a[1] * s)


def vec_len(a: Vector2) -> float:
    return math.hypot(a[0], a[1])


def vec_dist(a: Vector2, b: Vector2) -> float:
    """Euclidean distance between two points."""
    return math.hypot(b[0] - a[0], b[1] - a[1])


def vec_norm(a: Vector2) -> Vector2:
    """Unit vector along a; the zero vector maps to itself."""
    length = vec_len(a)
    if length == 0:
        return ZERO
    return (a[0] / length, a[1] / length)


def vec_dot(a: Vector2, b: Vector2) -> float:
    return a[0] * b[0] + a[1] * b[1]


def as_vector(value) -> Vector2:
    """Coerce any two-element sequence into a float tuple."""
    return (float(value[0]), float(value[1]))


def is_finite(value: float) -> bool:
    return not (math.isnan(value) or math.isinf(value))
