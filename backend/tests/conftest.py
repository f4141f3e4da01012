from __future__ import annotations

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from lastinn.api.deps import get_engine
from lastinn.api.main import app
from lastinn.db.base import Base
from lastinn.db.models import ProgressRecord
import lastinn.db.session as db_session


@pytest.fixture(scope="session")
def engine():
    # SQLite in-memory, one connection for the whole session
    eng = create_engine(
        "sqlite+pysqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        future=True,
    )
    return eng


@pytest.fixture(scope="session")
def TestingSessionLocal(engine):
    return sessionmaker(bind=engine, autoflush=False, autocommit=False, future=True)


@pytest.fixture(scope="session", autouse=True)
def _patch_db(engine, TestingSessionLocal):
    # swap the real engine/SessionLocal for the test ones
    db_session.engine = engine
    db_session.SessionLocal = TestingSessionLocal

    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture(autouse=True)
def _clean_progress(TestingSessionLocal):
    yield
    with TestingSessionLocal() as db:
        db.query(ProgressRecord).delete()
        db.commit()


@pytest.fixture()
def client():
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture()
def use_engine():
    """Pin the API to a given GameEngine (e.g. one with a scripted rng)."""

    def _use(game_engine):
        app.dependency_overrides[get_engine] = lambda: game_engine
        return game_engine

    yield _use
    app.dependency_overrides.clear()
