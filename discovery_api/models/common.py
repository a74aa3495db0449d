"""Common Pydantic models shared across routes."""

from typing import List, Optional

from pydantic import BaseModel

from discovery.models import Content


class ContentCard(BaseModel):
    id: str
    url: str
    domain: str
    title: str
    description: Optional[str] = None
    topics: List[str] = []
    quality: Optional[float] = None
    image_url: Optional[str] = None
    favicon_url: Optional[str] = None
    reading_time_minutes: Optional[int] = None
    published_at: Optional[str] = None
    created_at: Optional[str] = None

    @classmethod
    def from_content(cls, content: Content) -> "ContentCard":
        return cls(
            id=content.id,
            url=content.url,
            domain=content.domain,
            title=content.title,
            description=content.description,
            topics=content.topics,
            quality=content.quality,
            image_url=content.image_url,
            favicon_url=content.favicon_url,
            reading_time_minutes=content.reading_time_minutes,
            published_at=content.published_at.isoformat() if content.published_at else None,
            created_at=content.created_at.isoformat() if content.created_at else None,
        )


class PoolWarningInfo(BaseModel):
    code: str
    message: str
    pool_size: int
    exclusion_count: int
