"""
Batched scoring signals fetched once per request and joined in memory:
domain reputation, engagement (time on page) stats, and trending cache entries.
"""

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from discovery.utils.time import parse_timestamp, utc_now


class DomainReputation(BaseModel):
    model_config = ConfigDict(extra="allow")

    domain: str
    trust_score: float = 0.5
    approved_count: int = 0
    rejected_count: int = 0
    blacklisted: bool = False

    @field_validator("trust_score", mode="before")
    @classmethod
    def clamp_trust(cls, v):
        try:
            v = float(v)
        except (TypeError, ValueError):
            return 0.5
        if v != v:
            return 0.5
        return min(1.0, max(0.0, v))


class EngagementStats(BaseModel):
    """Historical time on page for one content item across all users."""

    content_id: str
    avg_duration_seconds: Optional[float] = None
    sample_count: int = 0


class TimeWindow(str, Enum):
    HOUR = "hour"
    DAY = "day"
    WEEK = "week"

    @property
    def hours(self) -> int:
        return {"hour": 1, "day": 24, "week": 168}[self.value]


class TrendingEntry(BaseModel):
    """One row of the trending cache (a materialized view, never hand-edited)."""

    content_id: str
    window: TimeWindow
    trending_score: float
    interaction_count: int = 0
    view_count: int = 0
    rank: int = 0
    computed_at: datetime = Field(default_factory=utc_now)

    @field_validator("computed_at", mode="before")
    @classmethod
    def parse_time(cls, v):
        return parse_timestamp(v) or utc_now()
