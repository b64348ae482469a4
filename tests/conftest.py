"""
Pytest fixtures for the prospect directory test suite.

Provides:
- Structured logging setup and log capture
- In-memory SQLite engine and sessions (fresh database per test)
- Record stores, the default import config and a deterministic clock
"""

import json
import logging
from io import StringIO
from typing import Generator
from uuid import UUID, uuid4

import pytest
from sqlalchemy.orm import Session

from prospect_config import clear_config_cache, get_import_config
from prospect_kernel.db.base import Base
from prospect_kernel.db.engine import get_session, init_engine_from_url, reset_engine
from prospect_kernel.domain.clock import DeterministicClock
from prospect_kernel.logging_config import (
    LogContext,
    StructuredFormatter,
    configure_logging,
    reset_logging,
)

import prospect_kernel.models  # noqa: F401  (registers tables on Base.metadata)

from prospect_ingestion.services import ImportService
from prospect_ingestion.store import InMemoryRecordStore, SqlAlchemyRecordStore


# Test actor ID for all test operations
TEST_ACTOR_ID = uuid4()


# =============================================================================
# Logging fixtures
# =============================================================================


@pytest.fixture(autouse=True, scope="session")
def _configure_test_logging():
    """Configure structured logging for the test suite."""
    reset_logging()
    configure_logging(level=logging.DEBUG, stream=StringIO())
    yield
    reset_logging()


@pytest.fixture(autouse=True)
def _clear_log_context():
    """Clear LogContext between tests to prevent cross-test contamination."""
    LogContext.clear()
    yield
    LogContext.clear()


@pytest.fixture
def captured_logs():
    """
    Capture prospect_kernel logs as parsed JSON dicts.

    Usage::

        def test_something(captured_logs, service):
            service.submit(text, "company")
            logs = captured_logs()
            assert any(r["message"] == "import_run_completed" for r in logs)
    """
    stream = StringIO()
    handler = logging.StreamHandler(stream)
    handler.setFormatter(StructuredFormatter())
    root = logging.getLogger("prospect_kernel")
    previous_level = root.level
    root.setLevel(logging.DEBUG)
    root.addHandler(handler)

    def _get_records() -> list[dict]:
        lines = stream.getvalue().strip().split("\n")
        return [json.loads(line) for line in lines if line]

    yield _get_records

    root.removeHandler(handler)
    root.setLevel(previous_level)


# =============================================================================
# Database fixtures (SQLite in memory, one database per test)
# =============================================================================


@pytest.fixture
def engine():
    eng = init_engine_from_url("sqlite://")
    Base.metadata.create_all(eng)
    yield eng
    Base.metadata.drop_all(eng)
    reset_engine()


@pytest.fixture
def session(engine) -> Generator[Session, None, None]:
    sess = get_session()
    yield sess
    sess.close()


# =============================================================================
# Common fixtures
# =============================================================================


@pytest.fixture
def test_actor_id() -> UUID:
    """Provide a consistent test actor ID."""
    return TEST_ACTOR_ID


@pytest.fixture
def deterministic_clock():
    """Provide a deterministic clock for testing."""
    return DeterministicClock()


@pytest.fixture
def import_config():
    """The default import configuration, loaded fresh."""
    clear_config_cache()
    return get_import_config()


@pytest.fixture
def memory_store() -> InMemoryRecordStore:
    return InMemoryRecordStore()


@pytest.fixture
def sql_store(session) -> SqlAlchemyRecordStore:
    return SqlAlchemyRecordStore(session)


@pytest.fixture
def service(memory_store, import_config, deterministic_clock) -> ImportService:
    """ImportService over the in-memory store."""
    return ImportService(memory_store, import_config, deterministic_clock)


@pytest.fixture
def sql_service(sql_store, import_config, deterministic_clock) -> ImportService:
    """ImportService over the SQLite store."""
    return ImportService(sql_store, import_config, deterministic_clock)
