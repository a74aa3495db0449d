"""Trending read/recalculate models."""

from typing import List, Optional

from pydantic import BaseModel

from .common import ContentCard


class TrendingItemOut(BaseModel):
    content: ContentCard
    trending_score: float
    rank: int
    interaction_count: int
    view_count: int


class TrendingResponse(BaseModel):
    window: str
    items: List[TrendingItemOut]
    from_cache: bool
    computed_at: Optional[str] = None


class RecalculateResponse(BaseModel):
    started: bool
    message: str
    last_success_at: Optional[str] = None
