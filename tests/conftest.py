from collections.abc import Generator

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from backend.database import Base
from backend.main import app
from backend.routers.deps import get_blob_store, get_orchestrator
from backend.schemas.timeline import EventAnalysis
from backend.services.resolver import AnalysisResolver
from backend.services.storage import SqlBlobStore, SqlTimelineStore
from backend.services.timeline import TimelineOrchestrator


class FakeAnalysisService:
    def __init__(self, result: EventAnalysis | None = None, error: Exception | None = None):
        self.result = result
        self.error = error
        self.calls: list[str] = []

    def extract(self, file_url: str) -> EventAnalysis | None:
        self.calls.append(file_url)
        if self.error is not None:
            raise self.error
        return self.result


@pytest.fixture()
def session_factory() -> Generator:
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    Base.metadata.create_all(bind=engine)
    try:
        yield TestingSessionLocal
    finally:
        Base.metadata.drop_all(bind=engine)


@pytest.fixture()
def db_session(session_factory) -> Generator:
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture()
def analysis_service() -> FakeAnalysisService:
    return FakeAnalysisService()


@pytest.fixture()
def timeline_store(session_factory) -> SqlTimelineStore:
    return SqlTimelineStore(key="data/events.json", session_factory=session_factory)


@pytest.fixture()
def blob_store(session_factory) -> SqlBlobStore:
    return SqlBlobStore(base_url="http://testserver", prefix="exams", session_factory=session_factory)


@pytest.fixture()
def orchestrator(timeline_store, blob_store, analysis_service) -> TimelineOrchestrator:
    return TimelineOrchestrator(
        store=timeline_store,
        blobs=blob_store,
        resolver=AnalysisResolver(analysis_service),
        seed_on_empty=False,
    )


@pytest.fixture()
def client(orchestrator, blob_store) -> Generator[TestClient, None, None]:
    app.dependency_overrides[get_orchestrator] = lambda: orchestrator
    app.dependency_overrides[get_blob_store] = lambda: blob_store

    # Tests use an in-memory DB via dependency override; skip app startup side effects.
    original_startup = list(app.router.on_startup)
    app.router.on_startup.clear()
    with TestClient(app) as test_client:
        yield test_client
    app.router.on_startup[:] = original_startup
    app.dependency_overrides.clear()
