"""Shared fixtures."""

from pathlib import Path

import pytest

from credstore.audit import reset_logger, setup_logging


@pytest.fixture(autouse=True)
def log_dir(tmp_path: Path):
    """Send logs to a temporary directory for every test."""
    directory = tmp_path / "logs"
    setup_logging(base_dir=directory)
    yield directory
    reset_logger()
