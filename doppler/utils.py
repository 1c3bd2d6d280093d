#!/usr/bin/env python3
"""
Input parsing helpers shared by the front end.
"""
from typing import Optional

from .vector_utils import Vector2, is_finite


def try_float(val) -> Optional[float]:
    """Parse a finite float, or return None."""
    try:
        number = float(val)
    except (TypeError, ValueError):
        return None
    return number if is_finite(number) else None


def try_vector(x, y) -> Optional[Vector2]:
    fx, fy = try_float(x), try_float(y)
    if fx is None or fy is None:
        return None
    return (fx, fy)


def positive_float(value, label: str) -> float:
    """Parse a finite, strictly positive float; raises ValueError otherwise."""
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise ValueError(f"{label} must be a number, got {value!r}") from None
    if not is_finite(number) or number <= 0:
        raise ValueError(f"{label} must be positive and finite, got {value!r}")
    return number
