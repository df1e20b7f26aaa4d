"""Command line entry point for running one sweep as a pipeline post-step."""

from __future__ import annotations

import argparse
import dataclasses
import sys
from pathlib import Path
from typing import TYPE_CHECKING

from rbc.config.logging import init_logging
from rbc.config.settings import (
    TLS_MODE_INSECURE,
    SettingsValidationError,
    SweepSettings,
    load_settings,
)
from rbc.sweep import BuildSweeper, UpstreamResult

if TYPE_CHECKING:
    from collections.abc import Mapping, Sequence

EXIT_OK = 0
EXIT_SWEEP_FAILED = 1
EXIT_BAD_SETTINGS = 2


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser; flags override RBC_* environment settings."""
    parser = argparse.ArgumentParser(
        prog="rbc",
        description="Cancel builds still running in a namespace.",
    )
    parser.add_argument("--api-url", help="Base URL of the platform API.")
    parser.add_argument("--namespace", help="Namespace to sweep.")
    parser.add_argument(
        "--auth-token",
        help="Bearer token; defaults to the mounted service-account token.",
    )
    parser.add_argument("--build-config", help="Build config name.")
    parser.add_argument(
        "--scope-to-build-config",
        action="store_true",
        default=None,
        help="Only cancel builds owned by --build-config.",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        default=None,
        help="Print a trace line for every decision.",
    )
    parser.add_argument(
        "--insecure-skip-tls-verify",
        action="store_true",
        help="Accept any server certificate and hostname.",
    )
    parser.add_argument("--ca-bundle", type=Path, help="CA bundle for TLS checks.")
    parser.add_argument(
        "--upstream-result",
        type=UpstreamResult,
        choices=list(UpstreamResult),
        help="Result of the pipeline stage that triggered this sweep.",
    )
    return parser


def resolve_cli_settings(
    args: argparse.Namespace,
    environ: Mapping[str, str] | None = None,
) -> SweepSettings:
    """Merge parsed flags over environment-derived settings."""
    settings = load_settings(environ)
    overrides: dict[str, object] = {}
    for flag, field_name in (
        ("api_url", "api_url"),
        ("namespace", "namespace"),
        ("build_config", "build_config_name"),
    ):
        value: str | None = getattr(args, flag)
        if value is None:
            continue
        if not value.strip():
            option = "--" + flag.replace("_", "-")
            raise SettingsValidationError.for_empty_value(option)
        overrides[field_name] = value.strip()
    if "api_url" in overrides:
        overrides["api_url"] = str(overrides["api_url"]).rstrip("/")
    if args.auth_token is not None:
        overrides["auth_token"] = args.auth_token
    if args.scope_to_build_config is not None:
        overrides["scope_to_build_config"] = True
    if args.verbose is not None:
        overrides["verbose"] = True
    if args.insecure_skip_tls_verify:
        overrides["tls_mode"] = TLS_MODE_INSECURE
    if args.ca_bundle is not None:
        overrides["ca_bundle"] = args.ca_bundle
    return dataclasses.replace(settings, **overrides)


def main(argv: Sequence[str] | None = None) -> int:
    """Run one sweep and map its outcome to a process exit code."""
    args = build_parser().parse_args(argv)
    try:
        settings = resolve_cli_settings(args)
    except SettingsValidationError as exc:
        print(f"rbc: {exc}", file=sys.stderr)  # noqa: T201
        return EXIT_BAD_SETTINGS

    init_logging(settings.log_level, stream=sys.stderr)
    outcome = BuildSweeper(settings=settings).run_once(
        upstream_result=args.upstream_result,
    )
    for line in outcome.trace:
        print(line)  # noqa: T201
    if not outcome.succeeded:
        print(f"rbc: sweep failed: {outcome.error}", file=sys.stderr)  # noqa: T201
        return EXIT_SWEEP_FAILED
    return EXIT_OK
