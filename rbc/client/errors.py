"""Error taxonomy for platform API access during a sweep."""

from __future__ import annotations


class SweepError(RuntimeError):
    """Base exception for failures that abort a build cancellation sweep."""


class ConfigError(SweepError):
    """Raised when the API base URL or a resource path segment is malformed."""

    @classmethod
    def for_base_url(cls, *, api_url: str, reason: str) -> ConfigError:
        """Build deterministic error for unusable API base URLs."""
        message = f"Invalid API URL {api_url!r}: {reason}."
        return cls(message)

    @classmethod
    def for_path_segment(cls, *, field: str, value: str) -> ConfigError:
        """Build deterministic error for unusable resource path segments."""
        message = f"Invalid {field} {value!r}: must be a non-empty path segment."
        return cls(message)

    @classmethod
    def for_request_url(cls, *, url: str, cause: Exception) -> ConfigError:
        """Build deterministic error for URLs the HTTP client refuses."""
        message = f"Invalid request URL {url!r}: {cause}."
        return cls(message)

    @classmethod
    def for_ca_bundle(cls, *, path: str, cause: Exception) -> ConfigError:
        """Build deterministic error for unreadable CA bundle files."""
        message = f"Invalid CA bundle {path!r}: {cause}."
        return cls(message)


class TransportError(SweepError):
    """Raised when a GET/PUT does not complete with a successful response."""

    method: str
    url: str
    status_code: int | None

    def __init__(
        self,
        message: str,
        *,
        method: str,
        url: str,
        status_code: int | None = None,
    ) -> None:
        """Create error with request context for diagnostics."""
        super().__init__(message)
        self.method = method
        self.url = url
        self.status_code = status_code

    @classmethod
    def for_timeout(
        cls,
        *,
        method: str,
        url: str,
        timeout: float,
    ) -> TransportError:
        """Build deterministic error for requests exceeding the timeout."""
        message = f"{method} {url} timed out after {timeout:g}s."
        return cls(message, method=method, url=url)

    @classmethod
    def for_fault(cls, *, method: str, url: str, cause: Exception) -> TransportError:
        """Build deterministic error for connection, TLS and protocol faults."""
        message = f"{method} {url} failed: {type(cause).__name__}: {cause}"
        return cls(message, method=method, url=url)

    @classmethod
    def for_status(
        cls,
        *,
        method: str,
        url: str,
        status_code: int,
        body: str,
    ) -> TransportError:
        """Build deterministic error for non-success HTTP responses."""
        message = f"{method} {url} returned HTTP {status_code}: {body[:200]}"
        return cls(message, method=method, url=url, status_code=status_code)


class ParseError(SweepError):
    """Raised when a response body is not the expected JSON document."""

    @classmethod
    def for_body(cls, *, url: str, reason: str) -> ParseError:
        """Build deterministic error for undecodable response bodies."""
        message = f"Could not decode response from {url}: {reason}."
        return cls(message)

    @classmethod
    def for_field(cls, *, url: str, field: str, expected: str) -> ParseError:
        """Build deterministic error for documents with unexpected field shapes."""
        message = f"Unexpected document from {url}: `{field}` must be {expected}."
        return cls(message)
