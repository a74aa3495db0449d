"""Candidate pool result: the unscored working set plus pool diagnostics."""

from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field

from .content import Content


class SortStrategy(str, Enum):
    """Orderings the pool query rotates through. Order here defines rotation order."""

    RECENCY = "recency"
    QUALITY = "quality"
    POPULARITY = "popularity"
    FRESHNESS = "freshness"


class PoolWarning(BaseModel):
    """Structured content-exhaustion event. A warning, never an error."""

    code: str = "CONTENT_EXHAUSTION"
    user_id: Optional[str] = None
    pool_size: int
    pool_floor: int
    exclusion_count: int
    message: str = ""


class CandidatePool(BaseModel):
    candidates: List[Content] = Field(default_factory=list)
    requested_size: int
    sort_strategy: SortStrategy
    exclusion_count: int
    # Ids actually pushed into the store-side filter (bounded, most recent first).
    store_filter_count: int
    fetch_attempts: int = 1
    warnings: List[PoolWarning] = Field(default_factory=list)

    @property
    def size(self) -> int:
        return len(self.candidates)
