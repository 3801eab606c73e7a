"""
KJV OSIS Importer - Test Configuration

Pytest fixtures and configuration for all tests.
"""
import pytest
from pathlib import Path
from typing import Dict, Iterator

from observability.logging import setup_logging, shutdown_logging

from tests.samples import GENESIS_BOOK, ROMANS_BOOK, osis_document


@pytest.fixture
def genesis_osis() -> str:
    """Two milestone verses of Genesis 1."""
    return osis_document(GENESIS_BOOK)


@pytest.fixture
def romans_osis() -> str:
    """Romans 16:27 with the Romans colophon."""
    return osis_document(ROMANS_BOOK)


@pytest.fixture
def kjv_sample_osis() -> str:
    """Genesis and Romans samples in one document."""
    return osis_document(GENESIS_BOOK, ROMANS_BOOK)


@pytest.fixture
def kjv_sample_file(tmp_path, kjv_sample_osis) -> Path:
    """Sample document written to disk."""
    path = tmp_path / "source" / "kjvfull.xml"
    path.parent.mkdir()
    path.write_text(kjv_sample_osis, encoding="utf-8")
    return path


@pytest.fixture
def tmp_data_dir(tmp_path) -> Path:
    """Temporary data directory for tests."""
    data_dir = tmp_path / "data"
    data_dir.mkdir()
    return data_dir


@pytest.fixture
def clean_env(monkeypatch) -> Iterator[Dict[str, str]]:
    """Remove importer settings from the environment."""
    keys = [
        "KJV_OSIS_URL", "SOURCE_DIR", "SOURCE_FILENAME", "FETCH_TIMEOUT",
        "FETCH_MAX_ATTEMPTS", "FETCH_BASE_DELAY", "FETCH_USER_AGENT",
        "STRONGS_DEFAULT_PREFIX", "PARSER_CHUNK_SIZE", "DATA_DIR", "EDITION",
        "LOG_LEVEL", "LOG_FORMAT", "LOG_TO_FILE", "LOG_FILE", "DEBUG",
    ]
    for key in keys:
        monkeypatch.delenv(key, raising=False)
    yield {}


@pytest.fixture
def reset_logging() -> Iterator[None]:
    """Reattach logging to the current stderr after a test swaps streams."""
    yield
    shutdown_logging()
    setup_logging()


# Property test fixtures
@pytest.fixture
def hypothesis_settings_profile():
    """Get current Hypothesis settings profile."""
    from hypothesis import settings
    return settings.default


# Markers
def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line("markers", "slow: marks tests as slow")
    config.addinivalue_line("markers", "integration: marks tests touching the filesystem or network mocks")
    config.addinivalue_line("markers", "property: marks property-based tests using Hypothesis")
