"""Authentication module for RBC."""

from .token_resolver import (
    TokenSource,
    compute_token_sha256_digest,
    resolve_auth_token,
)

__all__ = [
    "TokenSource",
    "compute_token_sha256_digest",
    "resolve_auth_token",
]
