from __future__ import annotations

import os

os.environ.setdefault("ENV", "test")
os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")
os.environ.setdefault("JWT_SECRET", "test-secret")
os.environ.setdefault("CELERY_TASK_ALWAYS_EAGER", "true")
os.environ.setdefault("STRIPE_SECRET_KEY", "sk_test_dummy")
os.environ.setdefault("STRIPE_ANGEL_PRICE_ID", "price_angel")
os.environ.setdefault("STRIPE_PRO_PRICE_ID", "price_pro")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from tests.factories import FakeGateway, FakeLLMClient, FakeStorage
from venturescope.models import Base


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, expire_on_commit=False, bind=engine)


@pytest.fixture
def db_session(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def fake_storage():
    return FakeStorage()


@pytest.fixture
def fake_gateway():
    return FakeGateway()


@pytest.fixture
def fake_llm():
    return FakeLLMClient()


@pytest.fixture
def queued(monkeypatch):
    """Capture background jobs instead of sending them to the broker."""
    from venturescope.api.v1 import assessments as assessments_api
    from venturescope.api.v1 import documents as documents_api

    jobs: list[tuple[str, int]] = []

    def _assessment(assessment_id, org_id, user_id):
        jobs.append(("assessment", assessment_id))
        return f"task-assessment-{assessment_id}"

    def _document(document_id, org_id, user_id):
        jobs.append(("document", document_id))
        return f"task-document-{document_id}"

    monkeypatch.setattr(assessments_api, "enqueue_assessment", _assessment)
    monkeypatch.setattr(documents_api, "enqueue_document_processing", _document)
    return jobs


@pytest.fixture
def client(session_factory, monkeypatch, fake_storage, fake_gateway, fake_llm, queued):
    from venturescope.api.v1 import billing as billing_api
    from venturescope.api.v1 import chat as chat_api
    from venturescope.api.v1 import companies as companies_api
    from venturescope.api.v1 import documents as documents_api
    from venturescope.core.dependencies import get_db_session
    from venturescope.main import app

    def _override_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db_session] = _override_db
    monkeypatch.setattr(documents_api, "get_storage_client", lambda: fake_storage)
    monkeypatch.setattr(companies_api, "get_storage_client", lambda: fake_storage)
    monkeypatch.setattr(billing_api, "get_stripe_gateway", lambda: fake_gateway)
    monkeypatch.setattr(chat_api, "get_llm_client", lambda: fake_llm)
    with TestClient(app, raise_server_exceptions=False) as test_client:
        yield test_client
    app.dependency_overrides.clear()
