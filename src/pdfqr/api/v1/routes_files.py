"""Retrieval and QR routes. Public, so a scanned code opens without login."""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query
from fastapi.responses import Response

from pdfqr.api.deps import get_artifact_store, get_base_url
from pdfqr.core.exceptions import ArtifactNotFound, MalformedRequest
from pdfqr.models.upload import ErrorResponse
from pdfqr.services.qr import render_qr_png
from pdfqr.storage.artifact_store import Artifact, ArtifactStore
from pdfqr.storage.base import sanitize_filename
from pdfqr.storage.local import build_file_url

router = APIRouter(
    prefix="/api",
    tags=["files"],
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
logger = logging.getLogger(__name__)


def _lookup(artifact_store: Optional[ArtifactStore], artifact_id: str) -> Artifact:
    artifact = artifact_store.get(artifact_id) if artifact_store is not None else None
    if artifact is None:
        raise ArtifactNotFound(artifact_id)
    return artifact


def _file_response(artifact: Artifact) -> Response:
    logger.info(f"Serving file: {artifact.file_name}", extra={"file_id": artifact.artifact_id})
    return Response(
        content=artifact.content,
        media_type=artifact.mime_type,
        headers={
            "Content-Disposition": f'inline; filename="{sanitize_filename(artifact.file_name)}"',
            "Cache-Control": "public, max-age=3600",
            "Access-Control-Allow-Origin": "*",
        },
    )


@router.get("/file/{artifact_id}")
async def get_file(
    artifact_id: str,
    artifact_store: Optional[ArtifactStore] = Depends(get_artifact_store),
) -> Response:
    """Return the stored bytes inline."""
    return _file_response(_lookup(artifact_store, artifact_id))


@router.get("/view/{artifact_id}")
async def view_file(
    artifact_id: str,
    artifact_store: Optional[ArtifactStore] = Depends(get_artifact_store),
) -> Response:
    """Alias of /api/file kept for links already printed as QR codes."""
    return _file_response(_lookup(artifact_store, artifact_id))


@router.get("/file/{artifact_id}/qr")
async def get_file_qr(
    artifact_id: str,
    artifact_store: Optional[ArtifactStore] = Depends(get_artifact_store),
    base_url: str = Depends(get_base_url),
) -> Response:
    """QR code PNG pointing at a stored file."""
    artifact = _lookup(artifact_store, artifact_id)
    png = render_qr_png(build_file_url(base_url, artifact.artifact_id))
    return Response(content=png, media_type="image/png")


@router.get("/qr")
async def get_qr(data: str = Query("")) -> Response:
    """QR code PNG for an arbitrary link, e.g. a Google Drive URL."""
    if not data.strip():
        raise MalformedRequest("data")
    return Response(content=render_qr_png(data.strip()), media_type="image/png")
