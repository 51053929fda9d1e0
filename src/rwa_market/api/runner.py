#!/usr/bin/env python3
"""FastAPI server runner."""

import os

import structlog
import uvicorn

from rwa_market.api.app import app
from rwa_market.config import load_config
from rwa_market.logging import setup_logging

logger = structlog.get_logger()


def main():
    """Run the FastAPI server."""
    config = load_config(os.environ.get("MARKET_CONFIG_PATH", "config.yaml"))
    setup_logging(level=config.logging.level, log_format=config.logging.format)

    logger.info("server_starting", port=8000)

    try:
        uvicorn.run(
            app,
            host="0.0.0.0",
            port=8000,
            log_config=None,  # structlog owns the handlers
        )
    except Exception as e:
        logger.error("server_failed", error=str(e))
        raise


if __name__ == "__main__":
    main()
