"""Root and health endpoints."""

from fastapi import APIRouter

from ..state import get_state

router = APIRouter()


@router.get("/")
def root():
    state = get_state()
    return {
        "name": "Stumble Discovery API",
        "version": "1.0.0",
        "data_source": state.config.data_source,
        "endpoints": {
            "discovery": ["/api/discovery/next", "/api/discovery/similar/{content_id}"],
            "trending": ["/api/trending", "/api/trending/recalculate"],
            "interactions": ["/api/interactions"],
            "stats": ["/api/stats"],
        },
    }


@router.get("/api/health")
def health():
    state = get_state()
    worker = state.trending_worker
    return {
        "status": "healthy",
        "data_source": state.config.data_source,
        "trending_worker": {
            "enabled": state.config.trending_worker_enabled,
            "scheduled": worker.is_scheduled,
            "last_success_at": worker.last_success_at.isoformat() if worker.last_success_at else None,
            "last_error": worker.last_error,
        },
    }
