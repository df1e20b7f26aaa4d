"""Platform API client module for RBC."""

from .builds import (
    BUILDS_PATH_TEMPLATE,
    Build,
    BuildsClient,
    CancellationResult,
    Document,
    TransportLike,
    decode_document,
    owning_build_config,
)
from .errors import ConfigError, ParseError, SweepError, TransportError
from .transport import (
    REQUEST_TIMEOUT_SECONDS,
    ApiTransport,
    InsecureTrustPolicy,
    StrictTrustPolicy,
    TrustPolicy,
    bearer_header_value,
)

__all__ = [
    "BUILDS_PATH_TEMPLATE",
    "REQUEST_TIMEOUT_SECONDS",
    "ApiTransport",
    "Build",
    "BuildsClient",
    "CancellationResult",
    "ConfigError",
    "Document",
    "InsecureTrustPolicy",
    "ParseError",
    "StrictTrustPolicy",
    "SweepError",
    "TransportError",
    "TransportLike",
    "TrustPolicy",
    "bearer_header_value",
    "decode_document",
    "owning_build_config",
]
