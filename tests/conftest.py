"""Pytest configuration and shared fixtures for all tests."""

from pathlib import Path

import pytest

TEST_DATA_DIR = Path(__file__).parent / "test-data"

CONFIG_ENV_VARS = (
    "SOURCE_PATH",
    "PRODUCTION_ONLY",
    "OUTPUT_FILE",
    "UPLOAD",
    "TOKEN",
    "API_BASE_URL",
    "PARALLELISM",
    "GRADLE_EXCLUDED_CONFIGURATIONS",
    "DETECTORS",
    "LOG_LEVEL",
    "STRUCTURED_LOGS",
)


@pytest.fixture(autouse=True)
def isolate_config_environment(monkeypatch):
    """Clear configuration environment variables for all tests.

    The CLI falls back to these variables when an option is not given, so a
    value exported in the developer's shell would otherwise leak into tests.
    Tests that exercise the fallback set the variables they need themselves.
    """
    for name in CONFIG_ENV_VARS:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def test_data_dir() -> Path:
    return TEST_DATA_DIR
