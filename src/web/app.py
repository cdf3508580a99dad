"""
FastAPI application factory for the proctoring session store.

Routes:
- /api/session/* -> session store and report downloads
- /api/v1/healthz -> health summary
- /health -> liveness probe
"""

from __future__ import annotations

from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from models.config import Config

from .routes import api
from .state import state


def create_app(config: Optional[Config] = None) -> FastAPI:
    """Create the FastAPI app and wire routes."""
    if config is not None:
        state.set_config(config)
    cfg = state.get_config()

    app = FastAPI(
        title="Proctor Monitor",
        version="0.1.0",
        description="Session store and reports for remote assessment proctoring",
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=cfg.server.cors_origins,
        allow_credentials="*" not in cfg.server.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(api.router, prefix="/api")
    app.include_router(api.router_v1)

    @app.get("/health")
    def health():
        return {"ok": True}

    return app
