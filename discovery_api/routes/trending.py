"""Trending endpoints: read a window, trigger a recalculation."""

from fastapi import APIRouter, HTTPException, Query

from discovery.errors import UpstreamUnavailableError
from discovery.models import TimeWindow

from ..models import ContentCard, RecalculateResponse, TrendingItemOut, TrendingResponse
from ..state import get_state

router = APIRouter()


@router.get("", response_model=TrendingResponse)
async def get_trending(
    window: TimeWindow = Query(TimeWindow.DAY, alias="timeWindow"),
    limit: int = Query(20, ge=1, le=50),
):
    """Top trending content. Computed on demand (not persisted) while the cache is empty."""
    state = get_state()
    try:
        items, from_cache = await state.discovery.get_trending(window, limit)
    except UpstreamUnavailableError as e:
        raise HTTPException(status_code=503, detail=str(e))
    computed_at = items[0].entry.computed_at.isoformat() if items else None
    return TrendingResponse(
        window=window.value,
        items=[
            TrendingItemOut(
                content=ContentCard.from_content(item.content),
                trending_score=round(item.entry.trending_score, 6),
                rank=item.entry.rank,
                interaction_count=item.entry.interaction_count,
                view_count=item.entry.view_count,
            )
            for item in items
        ],
        from_cache=from_cache,
        computed_at=computed_at,
    )


@router.post("/recalculate", response_model=RecalculateResponse)
async def recalculate_trending():
    """Run one trending calculation now. Skipped when one is already in flight."""
    worker = get_state().trending_worker
    if worker.is_running:
        return RecalculateResponse(started=False, message="Trending calculation already running")
    ok = await worker.run_once()
    last = worker.last_success_at.isoformat() if worker.last_success_at else None
    if ok:
        return RecalculateResponse(started=True, message="Trending recalculated", last_success_at=last)
    return RecalculateResponse(
        started=False,
        message=f"Trending calculation failed: {worker.last_error}" if worker.last_error else "Skipped",
        last_success_at=last,
    )
