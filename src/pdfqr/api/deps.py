"""FastAPI dependencies resolving the per-app stores and services."""

import secrets
from typing import Optional

from fastapi import Request

from pdfqr.core.config import Settings
from pdfqr.core.exceptions import AccessDenied
from pdfqr.services.orchestrator import UploadOrchestrator
from pdfqr.storage.artifact_store import ArtifactStore

ACCESS_TOKEN_HEADER = "X-Access-Token"


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_orchestrator(request: Request) -> UploadOrchestrator:
    return request.app.state.orchestrator


def get_artifact_store(request: Request) -> Optional[ArtifactStore]:
    """Local artifact store, None when uploads go to a remote sink."""
    return request.app.state.artifact_store


def get_base_url(request: Request) -> str:
    """Origin used in retrieval links."""
    config: Settings = request.app.state.settings
    return config.PUBLIC_BASE_URL or str(request.base_url)


def password_matches(config: Settings, candidate: Optional[str]) -> bool:
    if not candidate:
        return False
    return secrets.compare_digest(candidate.encode(), config.ACCESS_PASSWORD.encode())


def require_access(request: Request) -> None:
    """Reject requests without the shared password when the gate is enabled."""
    config: Settings = request.app.state.settings
    if not config.access_gate_enabled:
        return

    token = request.cookies.get(config.ACCESS_COOKIE_NAME) or request.headers.get(ACCESS_TOKEN_HEADER)
    if not password_matches(config, token):
        raise AccessDenied("Password required")
