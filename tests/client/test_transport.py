"""Tests for the authenticated platform transport and TLS trust policies."""

from __future__ import annotations

import json
import ssl
from http import HTTPStatus
from typing import TYPE_CHECKING, cast

import httpx
import pytest

from rbc.client import (
    REQUEST_TIMEOUT_SECONDS,
    ApiTransport,
    ConfigError,
    InsecureTrustPolicy,
    StrictTrustPolicy,
    TransportError,
    TrustPolicy,
)
from tests.mocks.local_http_server import serve_locally

if TYPE_CHECKING:
    from collections.abc import Iterator
    from pathlib import Path

    from tests.mocks.local_http_server import LocalHttpServer

URL = "https://api.cluster.test/oapi/v1/namespaces/demo/builds"

_PROXY_ENV_VARS = ("HTTP_PROXY", "HTTPS_PROXY", "ALL_PROXY")


@pytest.fixture
def local_server(monkeypatch: pytest.MonkeyPatch) -> Iterator[LocalHttpServer]:
    """Provide a loopback server reached directly, bypassing any proxy."""
    for name in _PROXY_ENV_VARS:
        monkeypatch.delenv(name, raising=False)
        monkeypatch.delenv(name.lower(), raising=False)
    yield from serve_locally()


def _recording_transport(
    seen: list[httpx.Request],
    response: httpx.Response | None = None,
) -> httpx.MockTransport:
    def _handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return response if response is not None else httpx.Response(200, text="{}")

    return httpx.MockTransport(_handler)


def _raising_transport(error: type[httpx.RequestError]) -> httpx.MockTransport:
    def _handler(request: httpx.Request) -> httpx.Response:
        raise error("scripted", request=request)

    return httpx.MockTransport(_handler)


def test_get_sends_bearer_token_and_fixed_timeout() -> None:
    """Ensure GET carries the bearer header and the fixed 120s timeout."""
    seen: list[httpx.Request] = []
    with ApiTransport(
        token="secret",  # noqa: S106
        http_transport=_recording_transport(seen),
    ) as transport:
        body = transport.get(URL)

    if body != "{}":
        raise AssertionError
    request = seen[0]
    if request.method != "GET":
        raise AssertionError
    if request.headers.get("Authorization") != "Bearer secret":
        raise AssertionError
    timeout = cast("dict[str, float]", request.extensions["timeout"])
    if set(timeout.values()) != {REQUEST_TIMEOUT_SECONDS}:
        raise AssertionError
    if REQUEST_TIMEOUT_SECONDS != 120.0:  # noqa: PLR2004
        raise AssertionError


def test_put_sends_whole_document_as_json() -> None:
    """Ensure PUT serializes the document and keeps the bearer header."""
    seen: list[httpx.Request] = []
    document: dict[str, object] = {
        "metadata": {"name": "b1"},
        "status": {"phase": "Running", "cancelled": True},
        "unknown": {"kept": [1, 2]},
    }
    with ApiTransport(
        token="secret",  # noqa: S106
        http_transport=_recording_transport(seen),
    ) as transport:
        _ = transport.put(f"{URL}/b1", document)

    request = seen[0]
    if request.method != "PUT":
        raise AssertionError
    if request.headers.get("Content-Type") != "application/json":
        raise AssertionError
    if request.headers.get("Authorization") != "Bearer secret":
        raise AssertionError
    if json.loads(request.content) != document:
        raise AssertionError


def test_empty_token_sends_bare_bearer_scheme() -> None:
    """Ensure an empty credential is sent as `Bearer` with no trailing space."""
    seen: list[httpx.Request] = []
    with ApiTransport(token="", http_transport=_recording_transport(seen)) as transport:
        _ = transport.get(URL)

    if seen[0].headers.get("Authorization") != "Bearer":
        raise AssertionError


@pytest.mark.parametrize(
    ("token", "expected"),
    [("", "Bearer"), ("   ", "Bearer"), ("abc", "Bearer abc")],
)
def test_credential_reaches_real_server_for_it_to_decide(
    local_server: LocalHttpServer,
    token: str,
    expected: str,
) -> None:
    """Ensure empty and blank credentials cross a real socket unchanged in meaning."""
    url = f"{local_server.base_url}/oapi/v1/namespaces/demo/builds"
    with ApiTransport(token=token) as transport:
        with pytest.raises(TransportError) as exc_info:
            _ = transport.get(url)

    if exc_info.value.status_code != HTTPStatus.UNAUTHORIZED:
        raise AssertionError
    if [request.authorization for request in local_server.seen] != [expected]:
        raise AssertionError


def test_timeout_is_reported_as_transport_error() -> None:
    """Ensure request timeouts surface as TransportError with no retry."""
    attempts: list[httpx.Request] = []

    def _handler(request: httpx.Request) -> httpx.Response:
        attempts.append(request)
        message = "scripted timeout"
        raise httpx.ReadTimeout(message, request=request)

    with (
        ApiTransport(
            token="t",  # noqa: S106
            http_transport=httpx.MockTransport(_handler),
        ) as transport,
        pytest.raises(TransportError, match="timed out after 120s"),
    ):
        _ = transport.get(URL)

    if len(attempts) != 1:
        raise AssertionError


@pytest.mark.parametrize(
    "error",
    [httpx.ConnectError, httpx.RemoteProtocolError, httpx.ReadError],
)
def test_connection_faults_are_reported_as_transport_error(
    error: type[httpx.RequestError],
) -> None:
    """Ensure lower-level faults are wrapped with their cause attached."""
    with ApiTransport(
        token="t",  # noqa: S106
        http_transport=_raising_transport(error),
    ) as transport:
        with pytest.raises(TransportError) as exc_info:
            _ = transport.put(URL, {"status": {}})

    if not isinstance(exc_info.value.__cause__, error):
        raise AssertionError
    if exc_info.value.method != "PUT":
        raise AssertionError


@pytest.mark.parametrize("status_code", [401, 403, 404, 409, 500, 503])
def test_non_success_status_is_reported_as_transport_error(status_code: int) -> None:
    """Ensure non-2xx responses fail the call with the status preserved."""
    seen: list[httpx.Request] = []
    response = httpx.Response(status_code, text="denied")
    with ApiTransport(
        token="t",  # noqa: S106
        http_transport=_recording_transport(seen, response),
    ) as transport:
        with pytest.raises(TransportError) as exc_info:
            _ = transport.get(URL)

    if exc_info.value.status_code != status_code:
        raise AssertionError


def test_insecure_policy_disables_verification() -> None:
    """Ensure the opt-in insecure policy accepts any chain and hostname."""
    policy: TrustPolicy = InsecureTrustPolicy()
    if policy.verify_setting() is not False:
        raise AssertionError


def test_strict_policy_verifies_chain_and_hostname() -> None:
    """Ensure the default policy returns a verifying SSL context."""
    setting = StrictTrustPolicy().verify_setting()
    if not isinstance(setting, ssl.SSLContext):
        raise AssertionError
    if setting.verify_mode != ssl.CERT_REQUIRED:
        raise AssertionError
    if not setting.check_hostname:
        raise AssertionError


def test_strict_policy_rejects_missing_ca_bundle(tmp_path: Path) -> None:
    """Ensure an unreadable CA bundle is a configuration error."""
    policy = StrictTrustPolicy(ca_bundle=tmp_path / "missing-ca.pem")
    with pytest.raises(ConfigError, match="Invalid CA bundle"):
        _ = policy.verify_setting()


def test_policies_satisfy_trust_policy_protocol() -> None:
    """Ensure both built-in policies are interchangeable at construction time."""
    for policy in (StrictTrustPolicy(), InsecureTrustPolicy()):
        if not isinstance(policy, TrustPolicy):
            raise AssertionError
