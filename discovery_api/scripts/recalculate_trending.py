#!/usr/bin/env python3
"""
Recalculate the trending cache once and exit.

For multi-replica deployments: set TRENDING_WORKER_ENABLED=false on every
replica and run this from an external scheduler (cron, Cloud Scheduler) on
the trending interval. Exit code 0 on success, 1 on failure.

Usage:
    python -m discovery_api.scripts.recalculate_trending
    python -m discovery_api.scripts.recalculate_trending --log-level DEBUG
"""

import argparse
import asyncio
import logging
import sys

from discovery_api.config import get_config
from discovery_api.state import AppState

logger = logging.getLogger(__name__)


async def _run(state: AppState) -> bool:
    return await state.trending_worker.run_once()


def main() -> int:
    parser = argparse.ArgumentParser(description="Recalculate trending windows once")
    parser.add_argument("--log-level", default=None, help="Override LOG_LEVEL")
    args = parser.parse_args()

    config = get_config()
    logging.basicConfig(
        level=getattr(logging, (args.log_level or config.log_level).upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    ok, errors = config.validate()
    if not ok:
        for err in errors:
            logger.error("[trending] CONFIG %s", err)
        return 1
    if config.data_source != "firestore":
        logger.warning(
            "[trending] DATA_SOURCE=%s: the in-memory cache is discarded when this process exits",
            config.data_source,
        )

    state = AppState(config)
    return 0 if asyncio.run(_run(state)) else 1


if __name__ == "__main__":
    sys.exit(main())
