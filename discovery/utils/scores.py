"""Numeric helpers shared by scoring stages: clamping and NaN/Infinity guards."""

import math


def finite_or(value, default: float) -> float:
    """Return value as float if finite, else default."""
    try:
        v = float(value)
    except (TypeError, ValueError):
        return default
    if math.isnan(v) or math.isinf(v):
        return default
    return v


def clamp(value: float, low: float = 0.0, high: float = 1.0) -> float:
    return min(high, max(low, value))


def clamp_finite(value, low: float, high: float, default: float) -> float:
    """finite_or then clamp: the standard treatment for every component score."""
    return clamp(finite_or(value, default), low, high)
