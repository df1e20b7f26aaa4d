"""Bearer token resolution for platform API calls."""

from __future__ import annotations

import hashlib
import logging
from enum import StrEnum
from pathlib import Path

from rbc.config.settings import DEFAULT_TOKEN_FILE

logger = logging.getLogger(__name__)


class TokenSource(StrEnum):
    """Where the resolved bearer token came from."""

    CONFIGURED = "configured"
    SERVICE_ACCOUNT = "service-account"
    NONE = "none"


def resolve_auth_token(
    *,
    configured_token: str,
    token_path: Path = DEFAULT_TOKEN_FILE,
    verbose: bool = False,
) -> str:
    """Return the configured token, else the mounted service-account token.

    An explicitly configured token always wins and is returned verbatim. The
    ambient token file is read at most once; a missing, unreadable or empty
    file resolves to an empty token and the server decides the outcome.
    """
    if configured_token:
        _log_source(TokenSource.CONFIGURED, token_path=None, verbose=verbose)
        return configured_token

    token = _read_token_file(token_path)
    source = TokenSource.SERVICE_ACCOUNT if token else TokenSource.NONE
    _log_source(source, token_path=token_path, verbose=verbose)
    return token


def compute_token_sha256_digest(*, token: str) -> str:
    """Compute hex SHA-256 digest for constant-time token comparison."""
    return hashlib.sha256(token.encode("utf-8")).hexdigest()


def _read_token_file(token_path: Path) -> str:
    try:
        raw = token_path.read_text(encoding="utf-8")
    except OSError:
        return ""
    return raw.strip()


def _log_source(
    source: TokenSource,
    *,
    token_path: Path | None,
    verbose: bool,
) -> None:
    if not verbose:
        return
    if token_path is None:
        logger.info(
            "Using %s auth token",
            source.value,
            extra={"token_source": source.value},
        )
        return
    logger.info(
        "Using %s auth token (token_file=%s)",
        source.value,
        token_path,
        extra={"token_source": source.value},
    )
