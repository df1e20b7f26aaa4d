"""Typed sweep settings loaded from static environment variables."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Mapping

TlsMode = str
LogLevel = str

ENV_API_URL = "RBC_API_URL"
ENV_NAMESPACE = "RBC_NAMESPACE"
ENV_AUTH_TOKEN = "RBC_AUTH_TOKEN"  # noqa: S105
ENV_VERBOSE = "RBC_VERBOSE"
ENV_BUILD_CONFIG = "RBC_BUILD_CONFIG"
ENV_SCOPE_TO_BUILD_CONFIG = "RBC_SCOPE_TO_BUILD_CONFIG"
ENV_TLS_MODE = "RBC_TLS_MODE"
ENV_CA_BUNDLE = "RBC_CA_BUNDLE"
ENV_TOKEN_FILE = "RBC_TOKEN_FILE"  # noqa: S105
ENV_LOG_LEVEL = "RBC_LOG_LEVEL"
ENV_SERVICE_TOKEN = "RBC_SERVICE_TOKEN"  # noqa: S105

DEFAULT_API_URL = "https://openshift.default.svc.cluster.local"
DEFAULT_NAMESPACE = "test"
DEFAULT_BUILD_CONFIG = "frontend"
DEFAULT_TLS_MODE: TlsMode = "strict"
DEFAULT_TOKEN_FILE = Path("/var/run/secrets/kubernetes.io/serviceaccount/token")
DEFAULT_LOG_LEVEL: LogLevel = "INFO"

TLS_MODE_STRICT: TlsMode = "strict"
TLS_MODE_INSECURE: TlsMode = "insecure"
VALID_TLS_MODES: frozenset[TlsMode] = frozenset({TLS_MODE_STRICT, TLS_MODE_INSECURE})
VALID_LOG_LEVELS: frozenset[LogLevel] = frozenset(
    {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"},
)

_TRUE_VALUES = frozenset({"1", "true", "yes", "on"})
_FALSE_VALUES = frozenset({"0", "false", "no", "off"})


class SettingsValidationError(ValueError):
    """Raised when static settings env vars contain invalid values."""

    @classmethod
    def for_empty_value(cls, env_var: str) -> SettingsValidationError:
        """Build error for empty non-optional env var values."""
        message = f"Invalid {env_var}: value cannot be empty."
        return cls(message)

    @classmethod
    def for_invalid_choice(
        cls,
        env_var: str,
        value: str,
        allowed_values: str,
    ) -> SettingsValidationError:
        """Build error for enum-like env vars with fixed allowlists."""
        message = f"Invalid {env_var}: {value!r}. Allowed values: {allowed_values}."
        return cls(message)


@dataclass(frozen=True, slots=True)
class SweepSettings:
    """Resolved configuration for one build cancellation sweep."""

    api_url: str
    namespace: str
    auth_token: str
    verbose: bool
    build_config_name: str
    scope_to_build_config: bool
    tls_mode: TlsMode
    ca_bundle: Path | None
    token_file: Path
    log_level: LogLevel
    service_token: str | None


def load_settings(environ: Mapping[str, str] | None = None) -> SweepSettings:
    """Load and validate static settings from process environment."""
    env = os.environ if environ is None else environ

    return SweepSettings(
        api_url=_read_required(env, ENV_API_URL, DEFAULT_API_URL).rstrip("/"),
        namespace=_read_required(env, ENV_NAMESPACE, DEFAULT_NAMESPACE),
        auth_token=env.get(ENV_AUTH_TOKEN, ""),
        verbose=_read_flag(env, ENV_VERBOSE),
        build_config_name=_read_required(env, ENV_BUILD_CONFIG, DEFAULT_BUILD_CONFIG),
        scope_to_build_config=_read_flag(env, ENV_SCOPE_TO_BUILD_CONFIG),
        tls_mode=_read_tls_mode(env),
        ca_bundle=_read_optional_path(env, ENV_CA_BUNDLE),
        token_file=_read_optional_path(env, ENV_TOKEN_FILE) or DEFAULT_TOKEN_FILE,
        log_level=_read_log_level(env),
        service_token=_read_service_token(env),
    )


def _read_required(environ: Mapping[str, str], env_var: str, default: str) -> str:
    raw = environ.get(env_var)
    if raw is None:
        return default
    value = raw.strip()
    if not value:
        raise SettingsValidationError.for_empty_value(env_var)
    return value


def _read_flag(environ: Mapping[str, str], env_var: str) -> bool:
    raw = environ.get(env_var)
    if raw is None:
        return False
    value = raw.strip().lower()
    if value in _TRUE_VALUES:
        return True
    if value in _FALSE_VALUES or not value:
        return False
    allowed = ", ".join(sorted(_TRUE_VALUES | _FALSE_VALUES))
    raise SettingsValidationError.for_invalid_choice(env_var, raw, allowed)


def _read_tls_mode(environ: Mapping[str, str]) -> TlsMode:
    raw = environ.get(ENV_TLS_MODE)
    if raw is None:
        return DEFAULT_TLS_MODE
    value = raw.strip().lower()
    if value in VALID_TLS_MODES:
        return value
    allowed = ", ".join(sorted(VALID_TLS_MODES))
    raise SettingsValidationError.for_invalid_choice(ENV_TLS_MODE, raw, allowed)


def _read_optional_path(environ: Mapping[str, str], env_var: str) -> Path | None:
    raw = environ.get(env_var)
    if raw is None:
        return None
    value = raw.strip()
    if not value:
        return None
    return Path(value).expanduser()


def _read_log_level(environ: Mapping[str, str]) -> LogLevel:
    raw = environ.get(ENV_LOG_LEVEL)
    if raw is None:
        return DEFAULT_LOG_LEVEL
    value = raw.strip().upper()
    if value in VALID_LOG_LEVELS:
        return value
    allowed = ", ".join(sorted(VALID_LOG_LEVELS))
    raise SettingsValidationError.for_invalid_choice(ENV_LOG_LEVEL, raw, allowed)


def _read_service_token(environ: Mapping[str, str]) -> str | None:
    raw = environ.get(ENV_SERVICE_TOKEN)
    if raw is None:
        return None
    value = raw.strip()
    return value or None
