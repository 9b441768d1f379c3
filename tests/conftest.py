"""Test configuration and fixtures for the deploy-velocity test suite."""

from pathlib import Path

import pytest

from tests.helpers import FakeFetcher, RecordingStore, make_settings


def pytest_configure(config):
    config.addinivalue_line("markers", "integration: mark test as integration test")


@pytest.fixture
def fake_fetcher():
    return FakeFetcher()


@pytest.fixture
def store():
    return RecordingStore()


@pytest.fixture
def settings():
    return make_settings()


@pytest.fixture
def debug_settings():
    return make_settings(debug=True)


@pytest.fixture
def config_file(tmp_path: Path) -> Path:
    path = tmp_path / "config.yaml"
    path.write_text(
        "urls:\n"
        "  - https://a.example.com/\n"
        "  - https://b.example.com/app\n"
        "parse_headers: true\n",
        encoding="utf-8",
    )
    return path
