"""Discovery request/response models (next and similar)."""

from typing import List, Optional

from pydantic import BaseModel, Field

from .common import ContentCard, PoolWarningInfo


class NextRequest(BaseModel):
    user_id: str
    session_seen_ids: List[str] = []
    # Overrides the stored preference; clamped to [0, 100].
    wildness: Optional[float] = None


class DiscoveryDebugInfo(BaseModel):
    score: float
    rank: int
    explored: bool
    band: str
    pool_size: int


class NextResponse(BaseModel):
    content: ContentCard
    rationale: str
    wildness: int
    warnings: List[PoolWarningInfo] = []
    debug: Optional[DiscoveryDebugInfo] = None


class SimilarItem(BaseModel):
    content: ContentCard
    similarity: float
    overall_score: float
    shared_topics: List[str] = []
    trending_window: Optional[str] = None


class SimilarResponse(BaseModel):
    content_id: str
    items: List[SimilarItem]
    count: int = Field(0, ge=0)
