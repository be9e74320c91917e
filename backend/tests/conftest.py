# ruff: noqa

import pytest
from fastapi.testclient import TestClient
from sqlmodel import Session

from taskflow.api.deps import get_store
from taskflow.db.repositories import InMemoryRepository
from taskflow.db.session import build_engine, get_session, init_db
from taskflow.main import app
from taskflow.services.entity_store import EntityStore


@pytest.fixture
def engine():
    engine = build_engine("sqlite://")
    init_db(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session(engine):
    with Session(engine) as session:
        yield session


@pytest.fixture
def store():
    return EntityStore(InMemoryRepository(), seed=True)


@pytest.fixture
def client(engine, store):
    def _session():
        with Session(engine) as session:
            yield session

    app.dependency_overrides[get_session] = _session
    app.dependency_overrides[get_store] = lambda: store
    yield TestClient(app)
    app.dependency_overrides.clear()
