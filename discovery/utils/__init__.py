"""Shared helpers for discovery stages."""

from .scores import clamp, clamp_finite, finite_or
from .time import age_days, age_hours, parse_timestamp, utc_now

__all__ = [
    "age_days",
    "age_hours",
    "clamp",
    "clamp_finite",
    "finite_or",
    "parse_timestamp",
    "utc_now",
]
