from collections.abc import Generator
from pathlib import Path
import os
import sys

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker

sys.path.append(str(Path(__file__).resolve().parents[1]))

os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")
os.environ.setdefault("ADMIN_IDENTITIES", "admin")

from app.api.deps import get_db_session, get_now
from app.core.database import Base
from app.main import app
from app.services.events import LedgerEvent
from app.services.ledger import VestingLedger


class FakeClock:
    def __init__(self, value: int = 0):
        self.value = value

    def now(self) -> int:
        return self.value


@pytest.fixture()
def session_factory(tmp_path) -> Generator[sessionmaker, None, None]:
    test_db_path = tmp_path / "test.db"
    engine = create_engine(f"sqlite:///{test_db_path}", connect_args={"check_same_thread": False})
    Base.metadata.create_all(bind=engine)

    yield sessionmaker(bind=engine, autocommit=False, autoflush=False, class_=Session)

    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture()
def recorded_events() -> list[LedgerEvent]:
    return []


@pytest.fixture()
def ledger(session_factory, recorded_events) -> Generator[VestingLedger, None, None]:
    db = session_factory()
    try:
        yield VestingLedger(db, sinks=[recorded_events.append])
    finally:
        db.close()


@pytest.fixture()
def fake_clock() -> FakeClock:
    return FakeClock()


@pytest.fixture()
def anyio_backend() -> str:
    return "asyncio"


@pytest.fixture()
def api_app(session_factory, fake_clock) -> Generator[FastAPI, None, None]:
    def override_get_db() -> Generator[Session, None, None]:
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db_session] = override_get_db
    app.dependency_overrides[get_now] = fake_clock.now

    yield app

    app.dependency_overrides.clear()


@pytest.fixture()
def client(api_app) -> Generator[TestClient, None, None]:
    with TestClient(api_app) as test_client:
        yield test_client
