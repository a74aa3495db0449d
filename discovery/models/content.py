"""
Content model: a crawled or submitted item ("discovery") read from the content store.

Built from store/API dicts via Content.model_validate(d). The engine never mutates content.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

from discovery.utils.time import parse_timestamp


class ContentMetrics(BaseModel):
    """Popularity counters maintained by the content store."""

    model_config = ConfigDict(extra="allow")

    views: int = 0
    likes: int = 0
    saves: int = 0
    shares: int = 0
    skips: int = 0

    @field_validator("views", "likes", "saves", "shares", "skips", mode="before")
    @classmethod
    def non_negative(cls, v):
        if v is None:
            return 0
        return max(0, int(v))

    @property
    def interaction_count(self) -> int:
        """Positive interactions (likes + saves + shares)."""
        return self.likes + self.saves + self.shares


class Content(BaseModel):
    """
    Content item used across the discovery stages.

    Only id and domain are required; quality and timestamps fall back to neutral
    values in scoring when missing.
    """

    model_config = ConfigDict(extra="allow")

    id: str
    url: str = ""
    domain: str = ""
    title: str = ""
    description: Optional[str] = None
    topics: List[str] = Field(default_factory=list)
    quality: Optional[float] = None
    created_at: Optional[datetime] = None
    published_at: Optional[datetime] = None
    metrics: ContentMetrics = Field(default_factory=ContentMetrics)
    image_url: Optional[str] = None
    favicon_url: Optional[str] = None
    reading_time_minutes: Optional[int] = None
    is_active: bool = True

    @field_validator("created_at", "published_at", mode="before")
    @classmethod
    def parse_times(cls, v):
        return parse_timestamp(v)

    @field_validator("topics", mode="before")
    @classmethod
    def normalize_topics(cls, v):
        if not v:
            return []
        seen = []
        for t in v:
            t = str(t).strip().lower()
            if t and t not in seen:
                seen.append(t)
        return seen

    @field_validator("domain", mode="before")
    @classmethod
    def normalize_domain(cls, v):
        return (v or "").strip().lower()

    @property
    def freshness_timestamp(self) -> Optional[datetime]:
        """Publish time when known, else crawl/submit time."""
        return self.published_at or self.created_at

    @property
    def interaction_count(self) -> int:
        return self.metrics.interaction_count


def ensure_contents(items: List[Union[Dict[str, Any], "Content"]]) -> List["Content"]:
    """Convert list of dicts or Content to list of Content models for the pipeline."""
    return [
        Content.model_validate(c) if isinstance(c, dict) else c
        for c in items
    ]
