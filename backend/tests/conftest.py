# backend/tests/conftest.py
"""
Pytest configuration for the chat backend.

Every test gets a fresh in-memory SQLite database and a fresh application
(and therefore a fresh ConnectionHub).
"""

import os

# Set test configuration BEFORE any chatline imports!
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["AUTO_CREATE_TABLES"] = "false"
os.environ["SECRET_KEY"] = "test-secret-key"
os.environ["CI"] = "true"  # skip backend/.env

from typing import Callable, Dict, Iterator

from fastapi import FastAPI
from fastapi.testclient import TestClient
import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from chatline.auth import create_access_token, get_password_hash
from chatline.database import Base, get_db, get_session_factory
from chatline.main import create_app
from chatline.models import Conversation, Message, User
from chatline.services.conversation_service import ConversationService

test_engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestSessionLocal = sessionmaker(
    autocommit=False, autoflush=False, bind=test_engine, expire_on_commit=False
)

TEST_PASSWORD = "TestPassword123!"


@pytest.fixture(scope="function")
def db() -> Iterator[Session]:
    """Create a new database session on empty tables for each test."""
    Base.metadata.create_all(bind=test_engine)
    session = TestSessionLocal()

    yield session

    session.rollback()
    session.close()
    Base.metadata.drop_all(bind=test_engine)


@pytest.fixture
def app(db: Session) -> Iterator[FastAPI]:
    """Fresh application wired to the test database."""
    application = create_app()

    def override_get_db():
        try:
            yield db
        finally:
            pass

    application.dependency_overrides[get_db] = override_get_db
    application.dependency_overrides[get_session_factory] = lambda: TestSessionLocal

    yield application

    application.dependency_overrides.clear()


@pytest.fixture
def client(app: FastAPI) -> Iterator[TestClient]:
    """
    Test client bound to one event loop.

    The context manager keeps HTTP requests and WebSocket sessions on the same
    loop, which the in-process hub relies on.
    """
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def hub(app: FastAPI):
    return app.state.hub


@pytest.fixture
def make_user(db: Session) -> Callable[[str], User]:
    """Factory creating committed users with TEST_PASSWORD."""

    def _make_user(username: str) -> User:
        user = User(
            username=username,
            hashed_password=get_password_hash(TEST_PASSWORD),
            profile_picture_key="avatar-fox",
        )
        db.add(user)
        db.commit()
        return user

    return _make_user


@pytest.fixture
def alice(make_user) -> User:
    return make_user("alice")


@pytest.fixture
def bob(make_user) -> User:
    return make_user("bob")


@pytest.fixture
def carol(make_user) -> User:
    return make_user("carol")


def auth_headers_for(user: User) -> Dict[str, str]:
    token = create_access_token(data={"sub": user.id})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def alice_headers(alice: User) -> Dict[str, str]:
    return auth_headers_for(alice)


@pytest.fixture
def bob_headers(bob: User) -> Dict[str, str]:
    return auth_headers_for(bob)


@pytest.fixture
def carol_headers(carol: User) -> Dict[str, str]:
    return auth_headers_for(carol)


@pytest.fixture
def conversation(db: Session, alice: User, bob: User) -> Conversation:
    """Conversation created by alice with bob."""
    return ConversationService(db).create_conversation(alice, [bob.id])


@pytest.fixture
def message(db: Session, alice: User, conversation: Conversation) -> Message:
    """Message posted by alice in ``conversation``."""
    return ConversationService(db).send_message(alice, conversation.id, "hello bob")


@pytest.fixture
def session_factory(db: Session) -> Callable[[], Session]:
    """Independent sessions on the test database, e.g. for concurrent requests."""
    return TestSessionLocal
