"""Bearer authentication dependency for protected API routes."""

from __future__ import annotations

import secrets
from typing import Annotated, cast

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from rbc.auth import compute_token_sha256_digest
from rbc.config.settings import SweepSettings

_bearer_scheme = HTTPBearer(auto_error=False)


async def require_bearer_auth(
    request: Request,
    credentials: Annotated[
        HTTPAuthorizationCredentials | None,
        Depends(_bearer_scheme),
    ],
) -> None:
    """Require the configured service token for protected routes."""
    if credentials is None or not credentials.credentials:
        raise _unauthorized_error()

    expected_token = resolve_app_settings(request=request).service_token
    if expected_token is None:
        raise _unauthorized_error()

    expected_digest = compute_token_sha256_digest(token=expected_token)
    presented_digest = compute_token_sha256_digest(token=credentials.credentials)
    if not secrets.compare_digest(expected_digest, presented_digest):
        raise _unauthorized_error()


def resolve_app_settings(*, request: Request) -> SweepSettings:
    """Load app settings for the app serving `request`."""
    request_obj = cast("object", request)
    return settings_from_app(cast("object", getattr(request_obj, "app", None)))


def settings_from_app(app: object) -> SweepSettings:
    """Load app settings from FastAPI state with explicit failure mode."""
    state_obj = cast("object", getattr(app, "state", None))
    settings_obj = getattr(state_obj, "settings", None)
    if not isinstance(settings_obj, SweepSettings):
        message = "Missing app settings: app.state.settings."
        raise TypeError(message)
    return settings_obj


def _unauthorized_error() -> HTTPException:
    """Build deterministic unauthorized error for bearer auth failures."""
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Unauthorized.",
        headers={"WWW-Authenticate": "Bearer"},
    )
