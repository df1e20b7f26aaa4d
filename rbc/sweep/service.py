"""Sweep orchestration: list namespace builds and cancel the active ones."""

from __future__ import annotations

import json
import logging
from collections.abc import Callable
from contextlib import closing
from dataclasses import dataclass, field
from enum import StrEnum
from typing import TYPE_CHECKING, Protocol
from uuid import uuid4

from rbc.auth import resolve_auth_token
from rbc.client import (
    ApiTransport,
    BuildsClient,
    InsecureTrustPolicy,
    StrictTrustPolicy,
    SweepError,
    TransportLike,
    owning_build_config,
)
from rbc.config.logging import sweep_id
from rbc.config.settings import TLS_MODE_INSECURE
from rbc.sweep.classifier import PhaseClass, classify_phase

if TYPE_CHECKING:
    from rbc.client import Build, CancellationResult, TrustPolicy
    from rbc.config.settings import SweepSettings

SweepIdFactory = Callable[[], str]

logger = logging.getLogger(__name__)


class SweepState(StrEnum):
    """Lifecycle states of one sweep invocation."""

    INIT = "init"
    LISTING = "listing"
    CANCELLING = "cancelling"
    DONE = "done"


class UpstreamResult(StrEnum):
    """Result of the pipeline stage that triggered the sweep."""

    SUCCESS = "SUCCESS"
    UNSTABLE = "UNSTABLE"
    FAILURE = "FAILURE"
    NOT_BUILT = "NOT_BUILT"
    ABORTED = "ABORTED"

    @property
    def succeeded(self) -> bool:
        """Return True only for a fully successful upstream stage."""
        return self is UpstreamResult.SUCCESS


class SweepTransport(TransportLike, Protocol):
    """Transport surface used by a sweep, including release of resources."""

    def close(self) -> None:
        """Release transport resources."""
        ...


class TransportFactory(Protocol):
    """Construct the transport for one sweep from its credential and policy."""

    def __call__(self, *, token: str, trust_policy: TrustPolicy) -> SweepTransport:
        """Create an open transport."""
        ...


def _default_transport_factory(
    *,
    token: str,
    trust_policy: TrustPolicy,
) -> SweepTransport:
    return ApiTransport(token=token, trust_policy=trust_policy)


def _default_sweep_id() -> str:
    return str(uuid4())


@dataclass(frozen=True, slots=True)
class SweepOutcome:
    """Aggregated result of one sweep, built once when the sweep is done."""

    succeeded: bool
    error: SweepError | None = None
    failed_in: SweepState | None = None
    cancelled_builds: tuple[str, ...] = ()
    trace: tuple[str, ...] = ()
    state: SweepState = SweepState.DONE


def trust_policy_for(settings: SweepSettings) -> TrustPolicy:
    """Return the TLS trust policy selected by settings."""
    if settings.tls_mode == TLS_MODE_INSECURE:
        return InsecureTrustPolicy()
    return StrictTrustPolicy(ca_bundle=settings.ca_bundle)


@dataclass(slots=True)
class _SweepTrace:
    """Collect verbose trace lines and mirror them to the log."""

    verbose: bool
    lines: list[str] = field(default_factory=list)

    def add(self, line: str) -> None:
        if not self.verbose:
            return
        self.lines.append(line)
        logger.info(line)


@dataclass(slots=True)
class BuildSweeper:
    """Cancel every non-terminal build in one namespace, one build at a time."""

    settings: SweepSettings
    transport_factory: TransportFactory = _default_transport_factory
    sweep_id_factory: SweepIdFactory = _default_sweep_id

    def run_once(
        self,
        *,
        upstream_result: UpstreamResult | None = None,
    ) -> SweepOutcome:
        """Run one bounded sweep and return its aggregated outcome."""
        context_token = sweep_id.set(self.sweep_id_factory())
        try:
            return self._run(upstream_result=upstream_result)
        finally:
            sweep_id.reset(context_token)

    def _run(self, *, upstream_result: UpstreamResult | None) -> SweepOutcome:
        settings = self.settings
        trace = _SweepTrace(verbose=settings.verbose)
        cancelled: list[str] = []
        state = SweepState.INIT

        if upstream_result is not None:
            verdict = "succeeded" if upstream_result.succeeded else "did not succeed"
            trace.add(
                f"Upstream stage {verdict} ({upstream_result.value}); "
                "sweeping builds either way",
            )

        try:
            token = resolve_auth_token(
                configured_token=settings.auth_token,
                token_path=settings.token_file,
                verbose=settings.verbose,
            )
            transport = self.transport_factory(
                token=token,
                trust_policy=trust_policy_for(settings),
            )
            with closing(transport):
                client = BuildsClient(
                    transport=transport,
                    api_url=settings.api_url,
                    namespace=settings.namespace,
                )

                state = SweepState.LISTING
                builds = client.list_builds()
                trace.add(
                    f"Listed {len(builds)} build(s) in namespace "
                    f"{settings.namespace}",
                )

                state = SweepState.CANCELLING
                for build in builds:
                    result = self._sweep_build(client=client, build=build, trace=trace)
                    if result is not None:
                        cancelled.append(result.name)
        except SweepError as exc:
            logger.exception(
                "Build sweep failed while %s namespace %s",
                state.value,
                settings.namespace,
            )
            return SweepOutcome(
                succeeded=False,
                error=exc,
                failed_in=state,
                cancelled_builds=tuple(cancelled),
                trace=tuple(trace.lines),
            )

        logger.info(
            "Build sweep finished for namespace %s (cancelled=%d)",
            settings.namespace,
            len(cancelled),
        )
        return SweepOutcome(
            succeeded=True,
            cancelled_builds=tuple(cancelled),
            trace=tuple(trace.lines),
        )

    def _sweep_build(
        self,
        *,
        client: BuildsClient,
        build: Build,
        trace: _SweepTrace,
    ) -> CancellationResult | None:
        trace.add(f"Build {build.name} is in phase {build.phase!r}")
        if not self._in_scope(build):
            trace.add(
                f"Skipping build {build.name}: not owned by build config "
                f"{self.settings.build_config_name}",
            )
            return None
        if classify_phase(build.phase) is PhaseClass.TERMINAL:
            return None

        trace.add(f"Found active build {build.name}; cancelling")
        result = client.cancel_build(build.name)
        trace.add(f"Build {build.name} state: {_render(result.document_before)}")
        trace.add(f"Build {build.name} status before: {_render(result.status_before)}")
        trace.add(f"Build {build.name} status after: {_render(result.status_after)}")
        trace.add(f"Build {build.name} update response: {result.response_body}")
        return result

    def _in_scope(self, build: Build) -> bool:
        if not self.settings.scope_to_build_config:
            return True
        return owning_build_config(build.document) == self.settings.build_config_name


def _render(value: object) -> str:
    return json.dumps(value, sort_keys=True, default=str)
