"""Authenticated HTTP transport with a swappable TLS trust policy."""

from __future__ import annotations

import logging
import ssl
from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol, Self, runtime_checkable

import httpx

from rbc.client.errors import ConfigError, TransportError

if TYPE_CHECKING:
    from pathlib import Path
    from types import TracebackType

REQUEST_TIMEOUT_SECONDS = 120.0
JSON_CONTENT_TYPE = "application/json"

logger = logging.getLogger(__name__)


@runtime_checkable
class TrustPolicy(Protocol):
    """Decide how server certificates and hostnames are verified."""

    def verify_setting(self) -> ssl.SSLContext | bool:
        """Return the value handed to the HTTP client as its `verify` option."""
        ...


@dataclass(frozen=True, slots=True)
class StrictTrustPolicy:
    """Verify certificate chain and hostname, optionally against a CA bundle."""

    ca_bundle: Path | None = None

    def verify_setting(self) -> ssl.SSLContext | bool:
        """Return a default-verifying SSL context."""
        if self.ca_bundle is None:
            return ssl.create_default_context()
        cafile = str(self.ca_bundle)
        try:
            return ssl.create_default_context(cafile=cafile)
        except (OSError, ssl.SSLError) as exc:
            raise ConfigError.for_ca_bundle(path=cafile, cause=exc) from exc


@dataclass(frozen=True, slots=True)
class InsecureTrustPolicy:
    """Accept any certificate chain and any hostname."""

    def verify_setting(self) -> ssl.SSLContext | bool:
        """Disable certificate and hostname verification."""
        return False


def bearer_header_value(token: str) -> str:
    """Return the Authorization value for `token`; an empty token sends `Bearer`."""
    # Field values cannot end in whitespace on the wire.
    return f"Bearer {token}".rstrip()


class ApiTransport:
    """Issue bearer-authenticated GET/PUT calls against the platform API."""

    _client: httpx.Client

    def __init__(
        self,
        *,
        token: str,
        trust_policy: TrustPolicy | None = None,
        http_transport: httpx.BaseTransport | None = None,
    ) -> None:
        """Create transport; an explicit HTTP transport replaces the network."""
        policy = StrictTrustPolicy() if trust_policy is None else trust_policy
        if isinstance(policy, InsecureTrustPolicy):
            logger.warning("TLS verification disabled for platform API calls")
        self._client = httpx.Client(
            headers={
                "Authorization": bearer_header_value(token),
                "Accept": JSON_CONTENT_TYPE,
            },
            verify=policy.verify_setting(),
            transport=http_transport,
            timeout=REQUEST_TIMEOUT_SECONDS,
        )

    def __enter__(self) -> Self:
        """Return the open transport."""
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        """Close the underlying HTTP client."""
        self.close()

    def close(self) -> None:
        """Release pooled connections."""
        self._client.close()

    def get(self, url: str, *, timeout: float = REQUEST_TIMEOUT_SECONDS) -> str:
        """Fetch `url` and return the response body text."""
        return self._send("GET", url, timeout=timeout)

    def put(
        self,
        url: str,
        document: dict[str, object],
        *,
        timeout: float = REQUEST_TIMEOUT_SECONDS,
    ) -> str:
        """Replace the resource at `url` with `document` and return the body."""
        return self._send("PUT", url, timeout=timeout, document=document)

    def _send(
        self,
        method: str,
        url: str,
        *,
        timeout: float,
        document: dict[str, object] | None = None,
    ) -> str:
        headers = None if document is None else {"Content-Type": JSON_CONTENT_TYPE}
        try:
            response = self._client.request(
                method,
                url,
                json=document,
                headers=headers,
                timeout=timeout,
            )
        except httpx.InvalidURL as exc:
            raise ConfigError.for_request_url(url=url, cause=exc) from exc
        except httpx.TimeoutException as exc:
            raise TransportError.for_timeout(
                method=method,
                url=url,
                timeout=timeout,
            ) from exc
        except httpx.HTTPError as exc:
            raise TransportError.for_fault(method=method, url=url, cause=exc) from exc

        if not response.is_success:
            raise TransportError.for_status(
                method=method,
                url=url,
                status_code=response.status_code,
                body=response.text,
            )
        return response.text
