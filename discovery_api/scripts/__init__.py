"""Operational entrypoints: trending recalculation and corpus upload."""
