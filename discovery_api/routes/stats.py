"""Stats endpoint."""

from fastapi import APIRouter

from ..state import get_state

router = APIRouter()


@router.get("/stats")
async def get_stats():
    """Trending cache and worker counters, plus pool tunables in effect."""
    state = get_state()
    snapshot = await state.trending_cache.get_snapshot()
    computed_at = await state.trending_cache.last_computed_at()
    worker = state.trending_worker
    cfg = state.discovery_config
    return {
        "trending": {
            "computed_at": computed_at.isoformat() if computed_at else None,
            "entries": {w.value: len(entries) for w, entries in snapshot.items()},
        },
        "trending_worker": {
            "runs_completed": worker.runs_completed,
            "runs_failed": worker.runs_failed,
            "runs_skipped": worker.runs_skipped,
        },
        "candidate_pool": {
            "base_pool_size": cfg.base_pool_size,
            "max_pool_size": cfg.max_pool_size,
            "pool_growth_factor": cfg.pool_growth_factor,
            "max_exclusion_filter": cfg.max_exclusion_filter,
        },
    }
