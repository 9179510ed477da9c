"""Application factory and CLI entry point.

``create_app()`` builds the FastAPI application with:
  - Lifespan handler that loads the form definitions once
  - CORS middleware
  - Global exception handlers (SDK errors → 404/409/422/400)
  - All API routes mounted under ``/api/v1``
  - A ``/health`` endpoint for readiness probes

The ``cli()`` function is the ``questionnaire-server`` console-script entry point.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from questionnaire_rules.errors import FormStructureError, SubmissionRejected
from questionnaire_rules.store import FormStore

from questionnaire_server.config import ServerSettings, load_settings
from questionnaire_server.errors import (
    form_structure_error_handler,
    generic_error_handler,
    key_error_handler,
    submission_rejected_handler,
    value_error_handler,
)
from questionnaire_server.routes import register_routes

logger = logging.getLogger(__name__)


# ------------------------------------------------------------------
# Lifespan — runs once at startup/shutdown
# ------------------------------------------------------------------

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Load every form definition into a ``FormStore`` at startup.

    Structural defects in any form file abort startup; a server that
    cannot evaluate one of its forms should not come up at all.
    """
    settings: ServerSettings = app.state.settings

    store = FormStore(form_dir=settings.forms_dir)
    store.load()
    app.state.store = store
    logger.info("FormStore loaded successfully")

    yield


# ------------------------------------------------------------------
# Factory
# ------------------------------------------------------------------

def create_app(settings: ServerSettings | None = None) -> FastAPI:
    """Build and return the configured FastAPI application."""
    if settings is None:
        settings = load_settings()

    # --- Configure logging ---
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )

    app = FastAPI(
        title="Questionnaire API Server",
        description="REST API for conditional form visibility and validation",
        version="0.1.0",
        lifespan=lifespan,
    )

    # Store settings so the lifespan handler can read them
    app.state.settings = settings

    # --- CORS ---
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # --- Exception handlers ---
    app.add_exception_handler(SubmissionRejected, submission_rejected_handler)
    app.add_exception_handler(FormStructureError, form_structure_error_handler)
    app.add_exception_handler(ValueError, value_error_handler)
    app.add_exception_handler(KeyError, key_error_handler)
    app.add_exception_handler(Exception, generic_error_handler)

    # --- Health check (outside /api/v1 prefix) ---
    @app.get("/health")
    def health(request: Request) -> dict:
        """Readiness probe — reports how many forms are loaded."""
        store: FormStore = request.app.state.store
        return {"status": "ok", "forms": len(store.forms)}

    # --- Mount all API routes ---
    register_routes(app)

    return app


# ------------------------------------------------------------------
# Module-level ASGI export (for uvicorn questionnaire_server.app:app)
# ------------------------------------------------------------------
app = create_app()


# ------------------------------------------------------------------
# CLI entry point
# ------------------------------------------------------------------

def cli() -> None:
    """Console-script entry point: ``questionnaire-server``."""
    import uvicorn

    settings = load_settings()
    uvicorn.run(
        "questionnaire_server.app:app",
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
        reload=False,
    )
