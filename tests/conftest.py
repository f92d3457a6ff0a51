"""Shared pytest configuration and fixtures."""

import pytest
from pathlib import Path

from build_reporter.build.metadata import BuildRun
from build_reporter.config.loader import ConfigLoader
from build_reporter.config.models import DatadogConfig, ReporterConfig
from build_reporter.utils.logger import setup_logger


# Path to config file
CONFIG_PATH = Path(__file__).parent.parent / "config" / "config.yaml"


@pytest.fixture
def config(monkeypatch):
    """Load the shipped config.yaml with a test API key."""
    if not CONFIG_PATH.exists():
        pytest.skip(f"Config file not found: {CONFIG_PATH}")

    monkeypatch.setenv("DATADOG_API_KEY", "test-api-key")
    return ConfigLoader.load_from_file(str(CONFIG_PATH))


@pytest.fixture
def datadog_config():
    """API configuration pointing at a test base URL."""
    return DatadogConfig(
        api_key="test-api-key",
        base_url="https://api.example.test/api/",
        timeout_s=2.0
    )


@pytest.fixture
def reporter_config(datadog_config):
    """Root configuration with default reporting settings."""
    return ReporterConfig(datadog=datadog_config)


@pytest.fixture
def logger():
    """Create logger for tests."""
    return setup_logger("test")


@pytest.fixture
def successful_build():
    """Build from the reference scenario: 42nd run of build-x, 2.5s, SUCCESS."""
    return BuildRun(
        start_time_millis=1000000,
        duration_millis=2500,
        result="SUCCESS",
        number=42,
        job_display_name="build-x"
    )


@pytest.fixture
def failed_build():
    """Same build as successful_build but FAILURE."""
    return BuildRun(
        start_time_millis=1000000,
        duration_millis=2500,
        result="FAILURE",
        number=42,
        job_display_name="build-x"
    )


@pytest.fixture
def environment():
    """Build environment without branch variables."""
    return {"HOSTNAME": "h1", "NODE_NAME": "agent-1"}
