"""Command-line entry point that bootstraps the database and serves the API."""

from __future__ import annotations

import argparse
import logging
import sys

import uvicorn
from sqlalchemy.exc import SQLAlchemyError

from top20.api import create_app
from top20.config import load_settings
from top20.persistence import DatabaseUnavailableError, connect


logger = logging.getLogger("uvicorn.error")


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Serve the top 20 rankings API")
    parser.add_argument("--host", default=None, help="Interface to bind (default: API_HOST or 0.0.0.0)")
    parser.add_argument(
        "--port",
        type=int,
        default=None,
        help="Port to listen on (default: API_PORT, else 8080 with DATABASE_URL or 3000)",
    )
    parser.add_argument("--log-level", default="info", help="uvicorn log level")
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> None:
    args = _parse_args(argv)
    logging.basicConfig(level=args.log_level.upper(), format="%(levelname)s:     %(message)s")

    settings = load_settings()
    try:
        store = connect(settings)
    except DatabaseUnavailableError as exc:
        logger.error("Database not available: %s", exc)
        sys.exit(1)
    except SQLAlchemyError as exc:
        logger.error("Error creating table: %s", exc)
        sys.exit(1)

    host = args.host or settings.api_host
    port = args.port or settings.api_port
    logger.info("Server running on http://%s:%s", host, port)
    logger.info("API Docs available at http://%s:%s/api/docs", host, port)
    try:
        uvicorn.run(create_app(store=store), host=host, port=port, log_level=args.log_level)
    finally:
        store.engine.dispose()


if __name__ == "__main__":
    main()
