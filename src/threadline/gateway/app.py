"""FastAPI application factory for the gateway."""
from __future__ import annotations

import logging

from fastapi import FastAPI

from threadline.adapters.bsky.client import AppViewClient
from threadline.config import AppConfig, load_config
from threadline.gateway import __version__
from threadline.gateway.endpoints import health, thread

log = logging.getLogger(__name__)


def create_app(config: AppConfig | None = None, client: AppViewClient | None = None) -> FastAPI:
    config = config or load_config()
    app = FastAPI(title="threadline gateway", version=__version__)
    app.state.config = config
    app.state.client = client or AppViewClient(config.service_url, timeout=config.timeout_seconds)

    app.include_router(health.router)
    app.include_router(thread.router)

    health.set_gateway_state(service_url=config.service_url)
    log.info(f"Gateway ready, upstream {config.service_url}")
    return app
