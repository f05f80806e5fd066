from decimal import Decimal

import pytest
from fastapi.testclient import TestClient
from sqlmodel import Session, SQLModel

from ..core.config import Settings
from ..core.db import create_engine_for_url, get_engine, get_session, init_db, set_engine
from ..main import app


@pytest.fixture
def engine(tmp_path):
    test_db = tmp_path / "test.db"
    test_engine = create_engine_for_url(f"sqlite:///{test_db}")
    SQLModel.metadata.drop_all(test_engine)
    SQLModel.metadata.create_all(test_engine)
    yield test_engine
    test_engine.dispose()


@pytest.fixture
def session(engine):
    with Session(engine) as db_session:
        yield db_session


@pytest.fixture
def settings() -> Settings:
    return Settings(interest_rate=Decimal("1.5"), recent_activity_days=7)


@pytest.fixture
def client(engine) -> TestClient:
    original_engine = get_engine()
    set_engine(engine)

    def _get_session_override():
        with Session(engine) as db_session:
            yield db_session

    app.dependency_overrides[get_session] = _get_session_override
    init_db()

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()
    set_engine(original_engine)
