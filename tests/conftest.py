# tests/conftest.py
import pytest
from fastapi.testclient import TestClient

from app.core.config import get_settings
from app.core.database import Base, build_engine, get_db, make_session_factory
from app.main import app


@pytest.fixture
def engine(tmp_path):
    engine = build_engine(get_settings(), f"sqlite:///{tmp_path / 'tickets.db'}")
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return make_session_factory(engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client(session_factory):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()
