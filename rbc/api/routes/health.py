"""Unauthenticated liveness endpoint."""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Literal

from fastapi import APIRouter, Request
from pydantic import BaseModel

from rbc.api.bearer_auth import resolve_app_settings

router = APIRouter()


class HealthResponse(BaseModel):
    """Liveness payload naming the default namespace this service sweeps."""

    status: Literal["ok"]
    namespace: str
    timestamp: datetime


@router.get("/health", tags=["monitoring"], response_model=HealthResponse)
async def get_health(request: Request) -> HealthResponse:
    settings = resolve_app_settings(request=request)
    return HealthResponse(
        status="ok",
        namespace=settings.namespace,
        timestamp=datetime.now(tz=UTC),
    )
