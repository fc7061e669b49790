from __future__ import annotations

import logging
import secrets

from fastapi import Depends, HTTPException, Request, status

from .config import Settings, get_settings

logger = logging.getLogger("security")

BEARER_PREFIX = "Bearer "


def verify_service_token(
    request: Request,
    settings: Settings = Depends(get_settings),
) -> None:
    expected = settings.service_token
    if not expected:
        # local dev: no shared secret configured
        if not getattr(request.app.state, "service_token_warning", False):
            logger.warning("service token not configured; accepting unauthenticated traffic")
            request.app.state.service_token_warning = True
        return

    provided = request.headers.get("X-Service-Token", "")
    if not provided or not secrets.compare_digest(provided, expected):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="invalid service token")


def extract_catalog_access_token(request: Request) -> str:
    """Pull the user's catalog bearer token forwarded by the browser."""
    auth = request.headers.get("Authorization", "")
    if auth.startswith(BEARER_PREFIX):
        token = auth[len(BEARER_PREFIX):].strip()
        if token:
            return token
    raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="No token available")
