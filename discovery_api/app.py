"""
Stumble Discovery API: FastAPI app factory.

Use: uvicorn discovery_api.app:app
Or:  from discovery_api import app
"""

import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .config import get_config
from .routes import register_routes
from .state import get_state

logger = logging.getLogger(__name__)


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def create_app() -> FastAPI:
    """Build FastAPI app with CORS, routes, and the trending worker lifecycle."""
    configure_logging(get_config().log_level)
    app = FastAPI(
        title="Stumble Discovery API",
        description="One-at-a-time content discovery with wildness-controlled exploration",
        version="1.0.0",
    )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    register_routes(app)

    @app.on_event("startup")
    async def start_trending_worker():
        state = get_state()
        ok, errors = state.config.validate()
        for err in errors:
            logger.warning("[startup] CONFIG %s", err)
        if not state.config.trending_worker_enabled:
            logger.info("[startup] Trending worker disabled (TRENDING_WORKER_ENABLED=false)")
            return
        state.trending_worker.start()
        logger.info(
            "[startup] Trending worker started, interval=%ss",
            state.trending_worker.interval_seconds,
        )

    @app.on_event("shutdown")
    async def stop_trending_worker():
        await get_state().trending_worker.stop()

    return app


app = create_app()
