#!/usr/bin/env python
"""
Run the Aethea API server.

Usage:
    uv run python run_api.py
    uv run python run_api.py --reload  # Development mode

The app is built once before uvicorn starts, so a production environment
without Supabase credentials exits with status 1 and a FATAL log line
instead of a traceback from inside the server.
"""

import argparse
import logging
import sys
from typing import Optional, Sequence

import uvicorn

from api.app import create_app
from shared.config import get_settings
from shared.exceptions import ConfigurationError
from shared.logging_config import setup_logging

logger = logging.getLogger("run_api")

APP_FACTORY = "api.app:create_app"


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Run Aethea API server")
    parser.add_argument("--reload", action="store_true", help="Enable auto-reload")
    parser.add_argument("--host", type=str, help="Host to bind to")
    parser.add_argument("--port", type=int, help="Port to bind to")
    return parser.parse_args(argv)


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = parse_args(argv)
    settings = get_settings()
    setup_logging(settings.log_level, settings.log_json)

    try:
        app = create_app(settings)
    except ConfigurationError as e:
        logger.critical("%s", e.message)
        return 1

    reload = args.reload or settings.reload
    uvicorn.run(
        # Reload workers re-import the app, so they need the factory path
        APP_FACTORY if reload else app,
        factory=reload,
        host=args.host or settings.host,
        port=args.port or settings.port,
        reload=reload,
        log_level=settings.log_level.lower(),
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())
