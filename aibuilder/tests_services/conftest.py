# tests_services/conftest.py
import pytest

from aibuilder.db.engine import make_engine, make_session_factory, init_db
from aibuilder.db.sql_store import SqlStore


@pytest.fixture
def engine():
    """Fresh in-memory SQLite database per test."""
    engine = make_engine("sqlite://")
    init_db(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def store(engine):
    s = SqlStore(make_session_factory(engine)())
    yield s
    s.close()


def _make_user(store, email, name="Test User"):
    with store.atomic():
        return store.insert_user(email, "not-a-real-hash", name)


@pytest.fixture
def user(store):
    return _make_user(store, "owner@example.com", "Owner")


@pytest.fixture
def other_user(store):
    return _make_user(store, "intruder@example.com", "Intruder")


@pytest.fixture
def project(store, user):
    """A bare project (no seeded directories)."""
    with store.atomic():
        return store.insert_project("Test Project", "A project for testing", user["id"],
                                    {"framework": "React", "language": "TypeScript"})


@pytest.fixture
def other_project(store, other_user):
    with store.atomic():
        return store.insert_project("Someone Else's", None, other_user["id"], None)
