"""Test fixtures and configuration."""
import io
import os
from collections.abc import Generator

# Must be set before the app module reads settings at import time
os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")
os.environ.setdefault("SECRET_KEY", "test-secret-key-minimum-32-characters-long")

import pytest
from fastapi.testclient import TestClient
from PIL import Image
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from taskapp.api.deps import get_email_service
from taskapp.config import Settings, get_settings
from taskapp.core.security import create_auth_token, hash_password
from taskapp.database import Base, get_db
from taskapp.main import app
from taskapp.models import Task, User, UserToken
from taskapp.services.email_service import EmailService


class RecordingEmailService(EmailService):
    """Email service that records messages instead of sending them."""

    def __init__(self, settings: Settings):
        super().__init__(settings)
        self.sent: list[tuple[str, str, str]] = []

    async def send_email(self, to_email: str, subject: str, text: str) -> bool:
        self.sent.append((to_email, subject, text))
        return True


@pytest.fixture(scope="session")
def test_settings() -> Settings:
    """Get test settings."""
    return Settings(
        database_url="sqlite:///:memory:",
        secret_key="test-secret-key-minimum-32-characters-long",
        environment="test",
        otel_enabled=False,
    )


@pytest.fixture(scope="function")
def db_engine(test_settings):
    """Create a test database engine."""
    engine = create_engine(
        test_settings.database_url,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture(scope="function")
def db_session(db_engine) -> Generator[Session, None, None]:
    """Create a test database session."""
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=db_engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def email_service(test_settings) -> RecordingEmailService:
    """Email service that keeps sent messages in memory."""
    return RecordingEmailService(test_settings)


@pytest.fixture(scope="function")
def client(db_session, test_settings, email_service) -> Generator[TestClient, None, None]:
    """Create a test client."""

    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    def override_get_settings():
        return test_settings

    def override_get_email_service():
        return email_service

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_settings] = override_get_settings
    app.dependency_overrides[get_email_service] = override_get_email_service

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()


def _make_user(
    db: Session, settings: Settings, name: str, email: str, password: str, age: int, sessions: int
) -> tuple[User, list[str]]:
    user = User(name=name, email=email, hashed_password=hash_password(password), age=age)
    db.add(user)
    db.flush()
    tokens = [create_auth_token(user.id, settings) for _ in range(sessions)]
    user.tokens = [UserToken(token=token) for token in tokens]
    db.commit()
    db.refresh(user)
    return user, tokens


@pytest.fixture
def user_one_data():
    """Credentials for the first seeded user."""
    return {"name": "Samragni", "email": "samragnir@gmail.com", "password": "TEST123!", "age": 30}


@pytest.fixture
def user_two_data():
    """Credentials for the second seeded user."""
    return {"name": "Mike", "email": "mike@gmail.com", "password": "PATCH123!", "age": 34}


@pytest.fixture
def seeded(db_session, test_settings, user_one_data, user_two_data):
    """
    Two users and three tasks.

    User one has two live sessions and two tasks (one completed); user two
    has one session and one task.
    """
    user_one, user_one_tokens = _make_user(db_session, test_settings, sessions=2, **user_one_data)
    user_two, user_two_tokens = _make_user(db_session, test_settings, sessions=1, **user_two_data)

    task_one = Task(description="First Task", completed=False, owner_id=user_one.id)
    task_two = Task(description="Second Task", completed=True, owner_id=user_one.id)
    task_three = Task(description="Third Task", completed=False, owner_id=user_two.id)
    db_session.add_all([task_one, task_two, task_three])
    db_session.commit()

    return {
        "user_one": user_one,
        "user_one_tokens": user_one_tokens,
        "user_two": user_two,
        "user_two_tokens": user_two_tokens,
        "task_one_id": task_one.id,
        "task_two_id": task_two.id,
        "task_three_id": task_three.id,
    }


@pytest.fixture
def auth_one(seeded):
    """Authorization header for user one's first session."""
    return {"Authorization": f"Bearer {seeded['user_one_tokens'][0]}"}


@pytest.fixture
def auth_two(seeded):
    """Authorization header for user two's session."""
    return {"Authorization": f"Bearer {seeded['user_two_tokens'][0]}"}


@pytest.fixture
def jpeg_bytes() -> bytes:
    """A small JPEG image."""
    buffer = io.BytesIO()
    Image.new("RGB", (640, 480), color=(200, 40, 40)).save(buffer, format="JPEG")
    return buffer.getvalue()
