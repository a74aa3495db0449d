"""Discovery endpoints: next item and more-like-this."""

import logging

from fastapi import APIRouter, HTTPException, Query

from discovery.errors import ContentNotFoundError, EmptyPoolError, UpstreamUnavailableError

from ..models import (
    ContentCard,
    DiscoveryDebugInfo,
    NextRequest,
    NextResponse,
    PoolWarningInfo,
    SimilarItem,
    SimilarResponse,
)
from ..state import get_state

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/next", response_model=NextResponse)
async def request_next(request: NextRequest, debug: bool = False):
    """Return exactly one discovery the user has never seen, plus why it was chosen."""
    state = get_state()
    try:
        result = await state.discovery.request_next(
            request.user_id.strip(),
            request.session_seen_ids,
            request.wildness,
        )
    except EmptyPoolError as e:
        raise HTTPException(
            status_code=404,
            detail={
                "error": "no_content_available",
                "message": str(e),
                "hint": "Broaden your topics or raise wildness.",
            },
        )
    except UpstreamUnavailableError as e:
        raise HTTPException(status_code=503, detail=str(e))

    return NextResponse(
        content=ContentCard.from_content(result.content),
        rationale=result.rationale,
        wildness=result.wildness,
        warnings=[
            PoolWarningInfo(
                code=w.code,
                message=w.message,
                pool_size=w.pool_size,
                exclusion_count=w.exclusion_count,
            )
            for w in result.warnings
        ],
        debug=DiscoveryDebugInfo(
            score=result.score,
            rank=result.rank,
            explored=result.explored,
            band=result.band,
            pool_size=result.pool_size,
        ) if debug else None,
    )


@router.get("/similar/{content_id}", response_model=SimilarResponse)
async def request_similar(
    content_id: str,
    limit: int = Query(10, ge=1, le=50),
    min_similarity: float = Query(0.0, ge=0.0, le=1.0),
):
    """Content sharing topics with content_id."""
    state = get_state()
    try:
        similar = await state.discovery.request_similar(content_id, limit, min_similarity)
    except ContentNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except UpstreamUnavailableError as e:
        raise HTTPException(status_code=503, detail=str(e))

    items = [
        SimilarItem(
            content=ContentCard.from_content(s.content),
            similarity=round(s.similarity, 4),
            overall_score=round(s.overall_score, 4),
            shared_topics=s.shared_topics,
            trending_window=s.trending_window.value if s.trending_window else None,
        )
        for s in similar
    ]
    return SimilarResponse(content_id=content_id, items=items, count=len(items))
