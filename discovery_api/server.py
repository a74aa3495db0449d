#!/usr/bin/env python3
"""
Stumble Discovery API server: entrypoint for `python -m discovery_api.server`.

For uvicorn use discovery_api.app:app.
"""

import uvicorn

from .app import app
from .config import get_config

if __name__ == "__main__":
    config = get_config()
    uvicorn.run(app, host=config.host, port=config.port, log_level=config.log_level.lower())
