"""Shared pytest fixtures."""

import os
import tempfile
from pathlib import Path

import pytest

from core.observability.metrics import MetricsCollector
from records.db import init_records_db, seed_sample_records


@pytest.fixture
def temp_db():
    """Path to an empty temporary database file."""
    with tempfile.NamedTemporaryFile(suffix='.db', delete=False) as f:
        db_path = Path(f.name)

    yield db_path

    # Cleanup - try to delete, ignore errors on Windows
    try:
        os.unlink(db_path)
    except PermissionError:
        pass


@pytest.fixture
def records_db(temp_db):
    """Temporary record store holding the fixed sample records."""
    init_records_db(temp_db)
    seed_sample_records(temp_db)
    return temp_db


@pytest.fixture
def metrics():
    """A fresh metrics collector, separate from the global singleton."""
    collector = MetricsCollector()
    yield collector
    collector.reset()
