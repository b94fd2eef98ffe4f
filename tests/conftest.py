"""Shared fixtures: an in-memory database wired into the app."""

from __future__ import annotations

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import func
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel, Session, create_engine, select

from finance_tracker.config import Settings, get_settings
from finance_tracker.database import get_session
from finance_tracker.main import app
from finance_tracker.models import Transaction


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session(engine):
    with Session(engine) as session:
        yield session


@pytest.fixture
def settings() -> Settings:
    return Settings(_env_file=None, STRICT_MUTATIONS=False)


@pytest.fixture
def client(engine, settings):
    def _get_session():
        with Session(engine) as session:
            yield session

    app.dependency_overrides[get_session] = _get_session
    app.dependency_overrides[get_settings] = lambda: settings
    yield TestClient(app)
    app.dependency_overrides.clear()


def count_rows(engine) -> int:
    with Session(engine) as session:
        return session.exec(select(func.count()).select_from(Transaction)).one()
