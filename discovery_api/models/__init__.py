"""Pydantic request/response models for the API."""

from .common import ContentCard, PoolWarningInfo
from .discovery import (
    DiscoveryDebugInfo,
    NextRequest,
    NextResponse,
    SimilarItem,
    SimilarResponse,
)
from .interactions import InteractionRequest, InteractionResponse
from .trending import RecalculateResponse, TrendingItemOut, TrendingResponse

__all__ = [
    "ContentCard",
    "DiscoveryDebugInfo",
    "InteractionRequest",
    "InteractionResponse",
    "NextRequest",
    "NextResponse",
    "PoolWarningInfo",
    "RecalculateResponse",
    "SimilarItem",
    "SimilarResponse",
    "TrendingItemOut",
    "TrendingResponse",
]
