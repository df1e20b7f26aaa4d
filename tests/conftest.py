"""Shared pytest fixtures for sweep, client and API tests."""

from __future__ import annotations

import dataclasses
from typing import TYPE_CHECKING, Protocol

import pytest

from rbc.config import SweepSettings, load_settings
from tests.mocks.fake_build_api import (
    TEST_API_URL,
    TEST_NAMESPACE,
    TEST_TOKEN,
    FakeBuildApi,
)

if TYPE_CHECKING:
    from pathlib import Path


class SettingsFactory(Protocol):
    """Build sweep settings with per-test overrides."""

    def __call__(self, **overrides: object) -> SweepSettings:
        """Return settings with `overrides` applied."""
        ...


@pytest.fixture
def fake_api() -> FakeBuildApi:
    """Provide an empty in-memory build API for the test namespace."""
    return FakeBuildApi(namespace=TEST_NAMESPACE)


@pytest.fixture
def settings_factory(tmp_path: Path) -> SettingsFactory:
    """Provide settings pointing at the fake API with no ambient token file."""
    base = dataclasses.replace(
        load_settings({}),
        api_url=TEST_API_URL,
        namespace=TEST_NAMESPACE,
        auth_token=TEST_TOKEN,
        token_file=tmp_path / "no-such-token",
    )

    def _build(**overrides: object) -> SweepSettings:
        return dataclasses.replace(base, **overrides)

    return _build
