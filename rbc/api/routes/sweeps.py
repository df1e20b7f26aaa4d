"""Webhook route that runs one build cancellation sweep."""

from __future__ import annotations

import dataclasses
from collections.abc import Callable
from typing import cast

from fastapi import APIRouter, Request
from pydantic import BaseModel, Field
from starlette.concurrency import run_in_threadpool

from rbc.api.bearer_auth import resolve_app_settings
from rbc.config.settings import SweepSettings
from rbc.sweep import BuildSweeper, SweepOutcome, UpstreamResult

SweeperFactory = Callable[[SweepSettings], BuildSweeper]

router = APIRouter()


class SweepRequest(BaseModel):
    """Optional per-call overrides of the service's static sweep settings."""

    namespace: str | None = Field(default=None, min_length=1)
    build_config_name: str | None = Field(default=None, min_length=1)
    scope_to_build_config: bool | None = None
    verbose: bool | None = None
    upstream_result: UpstreamResult | None = None


class SweepResponse(BaseModel):
    """Outcome of one sweep as reported to the calling pipeline."""

    succeeded: bool
    namespace: str
    failed_in: str | None
    error: str | None
    cancelled_builds: list[str]
    trace: list[str]


@router.post("/sweeps", tags=["sweeps"], response_model=SweepResponse)
async def run_sweep(
    request: Request,
    body: SweepRequest | None = None,
) -> SweepResponse:
    """Cancel active builds in the namespace and report the aggregated outcome."""
    body = SweepRequest() if body is None else body
    settings = _apply_overrides(resolve_app_settings(request=request), body)
    sweeper = _resolve_sweeper_factory(request)(settings)
    outcome = await run_in_threadpool(
        sweeper.run_once,
        upstream_result=body.upstream_result,
    )
    return _to_response(outcome, namespace=settings.namespace)


def _apply_overrides(settings: SweepSettings, body: SweepRequest) -> SweepSettings:
    overrides: dict[str, object] = {
        key: value
        for key, value in body.model_dump(exclude={"upstream_result"}).items()
        if value is not None
    }
    if not overrides:
        return settings
    return dataclasses.replace(settings, **overrides)


def _resolve_sweeper_factory(request: Request) -> SweeperFactory:
    """Load sweeper factory from app state, defaulting to the real sweeper."""
    state_obj = cast("object", request.app.state)
    factory_obj = getattr(state_obj, "sweeper_factory", BuildSweeper)
    if not callable(factory_obj):
        message = "Invalid sweeper factory: expected callable on app.state."
        raise TypeError(message)
    return cast("SweeperFactory", factory_obj)


def _to_response(outcome: SweepOutcome, *, namespace: str) -> SweepResponse:
    return SweepResponse(
        succeeded=outcome.succeeded,
        namespace=namespace,
        failed_in=None if outcome.failed_in is None else outcome.failed_in.value,
        error=None if outcome.error is None else str(outcome.error),
        cancelled_builds=list(outcome.cancelled_builds),
        trace=list(outcome.trace),
    )
