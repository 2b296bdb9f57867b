"""
Pytest configuration and shared fixtures.
"""

import os

import pytest

from todo_api.repositories.memory_store import MemoryEntityStore
from todo_api.services.todo_service import TodoService


OWNER_ID = 1001
OTHER_OWNER_ID = 2002


def pytest_configure(config):
    config.addinivalue_line("markers", "unit: fast tests, no external deps")
    config.addinivalue_line("markers", "db: requires database")
    config.addinivalue_line("markers", "server: requires running HTTP server")


def pytest_collection_modifyitems(config, items):
    run_db = os.environ.get("RUN_DB_TESTS") == "1"
    run_server = os.environ.get("RUN_SERVER_TESTS") == "1"

    skip_db = pytest.mark.skip(reason="db tests skipped by default; set RUN_DB_TESTS=1 to enable")
    skip_server = pytest.mark.skip(reason="server tests skipped by default; set RUN_SERVER_TESTS=1 to enable")

    for item in items:
        if "db" in item.keywords and not run_db:
            item.add_marker(skip_db)
        if "server" in item.keywords and not run_server:
            item.add_marker(skip_server)


@pytest.fixture
def owner_id():
    return OWNER_ID


@pytest.fixture
def other_owner_id():
    return OTHER_OWNER_ID


@pytest.fixture
def store():
    """Fresh in-memory store per test."""
    return MemoryEntityStore()


@pytest.fixture
def service(store):
    return TodoService(store)
