"""Health and status endpoints."""

import time
from datetime import datetime, timezone

import psutil
from fastapi import APIRouter, Request

from pdfqr.models.upload import StatusResponse

router = APIRouter()


@router.get("/health")
async def health_check(request: Request) -> dict:
    """Health check endpoint.

    Returns:
        dict: Health status response with status, service, and version fields
    """
    config = request.app.state.settings
    return {
        "status": "ok",
        "service": config.SERVICE_NAME,
        "version": config.SERVICE_VERSION,
    }


@router.get("/api/status", response_model=StatusResponse)
async def status(request: Request) -> StatusResponse:
    """Retained files, open upload sessions, memory and uptime. Read-only."""
    state = request.app.state
    artifact_store = state.artifact_store

    rss_bytes = psutil.Process().memory_info().rss
    uptime_seconds = time.monotonic() - state.started_at

    return StatusResponse(
        files_stored=artifact_store.count() if artifact_store is not None else 0,
        active_sessions=state.session_store.count(),
        stored_bytes=artifact_store.total_bytes() if artifact_store is not None else 0,
        memory_usage=round(rss_bytes / 1024 / 1024),
        uptime=f"{round(uptime_seconds)}s",
        timestamp=datetime.now(timezone.utc),
        sink=state.orchestrator.sink.get_backend_name(),
    )
