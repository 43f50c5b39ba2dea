import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker

from booking_intake import models  # noqa: F401
from booking_intake.database import Base, create_db_engine, get_db
from booking_intake.domain.bookings.router import get_notification_orchestrator
from booking_intake.domain.notifications import NotificationOrchestrator
from booking_intake.main import app

from .factories import FakeEmailService, FakeWebhook


@pytest.fixture
def engine(tmp_path):
    db_engine = create_db_engine(f"sqlite:///{tmp_path / 'bookings.db'}", log_slow_queries=False)
    Base.metadata.create_all(bind=db_engine)
    yield db_engine
    db_engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def email_service():
    return FakeEmailService()


@pytest.fixture
def webhook():
    return FakeWebhook()


@pytest.fixture
def orchestrator(session_factory, email_service, webhook):
    return NotificationOrchestrator(session_factory, email_service, webhook)


@pytest.fixture
def client(session_factory, orchestrator):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_notification_orchestrator] = lambda: orchestrator
    yield TestClient(app)
    app.dependency_overrides.clear()
