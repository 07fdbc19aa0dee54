from __future__ import annotations

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.config.database import Base, build_engine, create_tables, get_db
from app.handlers.response_exception_handler import ResponseExceptionHandler
from app.main import create_app


class RecordingErrorRecorder:
    def __init__(self) -> None:
        self.records: list[tuple] = []

    def record(self, severity, message, cause=None) -> None:
        self.records.append((severity, message, cause))


@pytest.fixture
def engine():
    engine = build_engine("sqlite://", poolclass=StaticPool)
    create_tables(engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db_session(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def recorder() -> RecordingErrorRecorder:
    return RecordingErrorRecorder()


@pytest.fixture
def application(session_factory, recorder):
    fastapi_app = create_app(ResponseExceptionHandler(recorder))

    def _get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    fastapi_app.dependency_overrides[get_db] = _get_db
    return fastapi_app


@pytest.fixture
def client(application) -> TestClient:
    # Starlette re-raises unhandled exceptions after the 500 handler has responded.
    return TestClient(application, raise_server_exceptions=False)


@pytest.fixture
def api_headers() -> dict[str, str]:
    return {"X-Api-Key": "test-key"}
