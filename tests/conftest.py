"""
Pytest configuration and fixtures for testing.

This file provides reusable test fixtures for:
- Database setup/teardown
- FastAPI test client
- Captured OTP emails
- User factory
"""

import os
import tempfile

# Configure the app for tests before anything imports settings
os.environ.setdefault("SQLALCHEMY_DATABASE_URI", "sqlite://")
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("EMAIL_DELIVERY_ENABLED", "false")
os.environ.setdefault("BCRYPT_ROUNDS", "4")
os.environ.setdefault("UPLOAD_DIR", tempfile.mkdtemp(prefix="covidvis-uploads-"))

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.core.database import Base, get_db
from app.core.security import get_password_hash
from app.crud import user as user_crud
from app.models import User, OTPCode, UserSession  # noqa: F401  register tables
from app.schemas.user import UserCreate
from main import app


# Use in-memory SQLite for testing (fast, isolated)
SQLALCHEMY_TEST_DATABASE_URL = "sqlite:///:memory:"

engine = create_engine(
    SQLALCHEMY_TEST_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db_session():
    """
    Create a fresh database for each test.
    Tables are dropped after the test completes.
    """
    Base.metadata.create_all(bind=engine)
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def client(db_session):
    """
    FastAPI test client with overridden database dependency.
    """
    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()


@pytest.fixture
def sent_emails(monkeypatch):
    """
    Capture OTP emails instead of sending them.
    Each entry is {"to", "code", "purpose"}.
    """
    outbox = []

    def mock_send_otp_code(self, email, code, purpose):
        outbox.append({"to": email, "code": code, "purpose": purpose})
        return True

    monkeypatch.setattr(
        "app.services.email_service.EmailService.send_otp_code",
        mock_send_otp_code
    )
    return outbox


@pytest.fixture
def make_user(db_session):
    """Factory creating users directly in the store."""
    def _make_user(
        email="alice@example.com",
        username="alice",
        password="secret123",
        avatar="/avatars/1.png"
    ):
        return user_crud.create(db_session, UserCreate(
            email=email,
            username=username,
            password=get_password_hash(password) if password else None,
            avatar=avatar,
            is_verified=True,
        ))

    return _make_user


@pytest.fixture
def registration_data():
    """Sample registration form"""
    return {
        "email": "new@example.com",
        "username": "newcomer",
        "password": "hunter22",
        "avatar": "/avatars/3.png"
    }
