"""Shared-password login."""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Form, Response

from pdfqr.api.deps import get_settings, password_matches
from pdfqr.core.config import Settings
from pdfqr.core.exceptions import AccessDenied

router = APIRouter(prefix="/api", tags=["auth"])
logger = logging.getLogger(__name__)


@router.post("/login", status_code=204)
async def login(
    password: Optional[str] = Form(None),
    config: Settings = Depends(get_settings),
) -> Response:
    """Exchange the shared password for an access cookie."""
    if config.access_gate_enabled and not password_matches(config, password):
        logger.warning("Rejected login attempt")
        raise AccessDenied()

    response = Response(status_code=204)
    response.set_cookie(
        key=config.ACCESS_COOKIE_NAME,
        value=config.ACCESS_PASSWORD,
        max_age=config.ACCESS_COOKIE_MAX_AGE_SECONDS,
        httponly=True,
        samesite="lax",
        path="/",
    )
    return response
