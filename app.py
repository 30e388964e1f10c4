#!/usr/bin/env python3
"""
Content Risk Assessment - Main Application Entry Point.

============================================================
SINGLE ENTRYPOINT
============================================================
This is the ONE executable entry point for the service.

- Compatible with PM2 process management
- Configured entirely from CONTENT_RISK_* environment variables
  (a .env file is read first when present)
- Serves the HTTP API or assesses a single draft

============================================================
USAGE
============================================================
Direct execution:
    python app.py serve --port 8000
    python app.py analyze --text "Draft post" --platform twitter

Under uvicorn:
    uvicorn app:create_application --factory --port 8000

With PM2:
    pm2 start app.py --interpreter python --name content-risk -- serve

============================================================
ENVIRONMENT
============================================================
CONTENT_RISK_SENTIMENT_URL     sentiment model endpoint
CONTENT_RISK_CONTROVERSY_URL   controversy model endpoint
CONTENT_RISK_AUDIENCE_URL      audience reaction model endpoint
CONTENT_RISK_TREND_URL         trend matching model endpoint
CONTENT_RISK_TREND_FEED_URL    trending topics snapshot
CONTENT_RISK_API_KEY           bearer token for all of the above
CONTENT_RISK_WEIGHT_*          signal weights (must sum to 1.0)
LOG_LEVEL                      logging level for the factory entry

============================================================
"""

import os
import sys

from fastapi import FastAPI

from api.server import create_app
from orchestrator.cli import main
from orchestrator.core import build_http_service, setup_logging
from risk_scoring.config import PipelineConfig


def create_application() -> FastAPI:
    """App factory for running under an external ASGI server."""
    setup_logging(
        level=os.getenv("LOG_LEVEL", "INFO"),
        log_format=os.getenv("LOG_FORMAT", "text"),
    )
    config = PipelineConfig.from_env()
    return create_app(build_http_service(config))


if __name__ == "__main__":
    sys.exit(main())
