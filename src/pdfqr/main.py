"""Main application entrypoint for the PDF QR service."""

import logging
import time
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from pdfqr.api.middleware import HTTPErrorLoggingMiddleware
from pdfqr.api.v1 import routes_auth, routes_files, routes_health, routes_upload
from pdfqr.core.config import Settings, settings
from pdfqr.core.exceptions import PdfQrError
from pdfqr.core.logging import setup_logging
from pdfqr.services.orchestrator import UploadOrchestrator
from pdfqr.storage.artifact_store import ArtifactStore
from pdfqr.storage.factory import get_artifact_sink
from pdfqr.storage.session_store import ChunkSessionStore

logger = logging.getLogger(__name__)


def create_app(config: Optional[Settings] = None) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        config: Settings to build the stores from, defaults to the env-loaded singleton

    Returns:
        FastAPI: Configured FastAPI application instance
    """
    config = config or settings

    # Initialize logging first
    setup_logging()

    app = FastAPI(
        title=config.SERVICE_NAME,
        version=config.SERVICE_VERSION,
    )

    # Process-lifetime stores, one set per application instance
    artifact_store = (
        ArtifactStore(retention_limit=config.ARTIFACT_RETENTION_LIMIT)
        if config.ARTIFACT_SINK.lower() == "local"
        else None
    )
    session_store = ChunkSessionStore(
        max_chunk_bytes=config.max_chunk_bytes,
        session_ttl_seconds=config.SESSION_TTL_SECONDS,
        max_upload_bytes=config.max_upload_bytes,
    )
    sink = get_artifact_sink(config, artifact_store)

    app.state.settings = config
    app.state.artifact_store = artifact_store
    app.state.session_store = session_store
    app.state.orchestrator = UploadOrchestrator(
        sessions=session_store,
        sink=sink,
        max_upload_bytes=config.max_upload_bytes,
        allowed_mime_types=config.allowed_mime_types,
    )
    app.state.started_at = time.monotonic()

    app.add_middleware(HTTPErrorLoggingMiddleware)

    @app.exception_handler(PdfQrError)
    async def pdfqr_error_handler(request: Request, exc: PdfQrError) -> JSONResponse:
        return JSONResponse(status_code=exc.status_code, content=exc.to_dict())

    # Register routers
    app.include_router(routes_health.router, tags=["health"])
    app.include_router(routes_auth.router)
    app.include_router(routes_upload.router)
    app.include_router(routes_files.router)

    logger.info(
        f"{config.SERVICE_NAME} started",
        extra={"sink": sink.get_backend_name(), "retention_limit": config.ARTIFACT_RETENTION_LIMIT},
    )
    return app


# Export app instance for ASGI servers
app = create_app()
