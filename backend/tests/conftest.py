from __future__ import annotations

import json
import os
import sys
from collections.abc import Callable, Generator

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

# Make `backend/` importable regardless of pytest import mode.
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from tradefin.core.config import settings
from tradefin.core.db.base import Base
from tradefin.core.db.session import get_db, import_model_modules
from tradefin.main import create_app
from tradefin.shared.enums import Env

# Ensure model modules are imported so Base.metadata is complete.
import_model_modules()


@pytest.fixture(autouse=True)
def local_storage(tmp_path, monkeypatch) -> str:
    upload_dir = tmp_path / "uploads"
    monkeypatch.setattr(settings, "upload_dir", str(upload_dir))
    monkeypatch.setattr(settings, "STORAGE_ACCOUNT_URL", None)
    monkeypatch.setattr(settings, "AZURE_STORAGE_ACCOUNT", None)
    return str(upload_dir)


@pytest.fixture()
def db_engine():
    engine = create_engine(
        "sqlite+pysqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    return engine


@pytest.fixture()
def db_session(db_engine) -> Generator[Session, None, None]:
    TestingSessionLocal = sessionmaker(bind=db_engine, autoflush=False, autocommit=False, class_=Session)
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture()
def db(db_session: Session) -> Session:
    return db_session


@pytest.fixture()
def client(db_session: Session, monkeypatch) -> TestClient:
    monkeypatch.setattr(settings, "env", Env.dev)
    app = create_app()

    def _override_get_db() -> Generator[Session, None, None]:
        yield db_session

    app.dependency_overrides[get_db] = _override_get_db
    return TestClient(app)


@pytest.fixture()
def actor_header() -> Callable[..., dict[str, str]]:
    def _make(username: str, role: str, *, full_name: str | None = None, email: str | None = None) -> dict[str, str]:
        payload = {"username": username, "role": role, "full_name": full_name, "email": email}
        return {settings.dev_actor_header: json.dumps(payload)}

    return _make


@pytest.fixture()
def officer(actor_header) -> dict[str, str]:
    return actor_header("officer1", "OFFICER", full_name="Olivia Officer", email="officer1@bank.test")


@pytest.fixture()
def risk_analyst(actor_header) -> dict[str, str]:
    return actor_header("risk1", "RISK", full_name="Rick Risk", email="risk1@bank.test")


@pytest.fixture()
def customer(actor_header) -> dict[str, str]:
    return actor_header("acme", "CUSTOMER", full_name="Acme Imports", email="ops@acme.test")


@pytest.fixture()
def beneficiary(actor_header) -> dict[str, str]:
    return actor_header("globex", "CUSTOMER", full_name="Globex Exports", email="sales@globex.test")


@pytest.fixture()
def stranger(actor_header) -> dict[str, str]:
    return actor_header("initech", "CUSTOMER", full_name="Initech", email="it@initech.test")
