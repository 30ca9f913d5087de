"""
Pytest configuration and fixtures.

Every test gets a fresh in-memory SQLite database. Outbound email is captured
instead of sent.
"""

import os
import re
import tempfile
from typing import Dict, Generator, List

# Settings are read at import time, so configure the environment first
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["ENVIRONMENT"] = "testing"
os.environ["SEND_EMAILS"] = "false"
os.environ["UPLOAD_DIR"] = tempfile.mkdtemp(prefix="naus-uploads-")
os.environ["CLOUDINARY_CLOUD_NAME"] = ""
os.environ["CLOUDINARY_API_KEY"] = ""
os.environ["CLOUDINARY_API_SECRET"] = ""

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from app import crud
from app.core.email_service import EmailService
from app.core.security import create_access_token
from app.core.storage import LocalFileStorage, get_file_storage
from app.db.database import Base, get_db
from app.main import app
from app.models.admin import Admin, AdminRole
from app.models.member import Member, MembershipType
from app.schemas.admin import AdminCreate
from app.schemas.application import ApplicationCreate

engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(bind=engine, autocommit=False, autoflush=False)

ADMIN_PASSWORD = "admin-secret-1"


@pytest.fixture
def db() -> Generator[Session, None, None]:
    """A session on a freshly created schema."""
    Base.metadata.create_all(bind=engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def storage(tmp_path) -> LocalFileStorage:
    return LocalFileStorage(root=str(tmp_path / "uploads"))


@pytest.fixture
def client(db: Session, storage: LocalFileStorage) -> Generator[TestClient, None, None]:
    """API client sharing the test's session and upload directory."""
    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_file_storage] = lambda: storage
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


class SentEmails(list):
    """Emails captured from the SMTP layer."""

    def to(self, recipient: str) -> List[Dict]:
        return [email for email in self if recipient in email["to"]]

    def subjects(self) -> List[str]:
        return [email["subject"] for email in self]

    def reset_token_for(self, recipient: str) -> str:
        for email in reversed(self.to(recipient)):
            match = re.search(r"/reset-password/([0-9a-f]{64})", email["html"])
            if match:
                return match.group(1)
        raise AssertionError(f"No reset email sent to {recipient}")


@pytest.fixture
def sent_emails(monkeypatch) -> SentEmails:
    """Capture outgoing email; every send succeeds."""
    sent = SentEmails()

    def fake_send_email(self, to_emails, subject, html_content, text_content=None, reply_to=None):
        sent.append({"to": list(to_emails), "subject": subject, "html": html_content, "reply_to": reply_to})
        return True

    monkeypatch.setattr(EmailService, "send_email", fake_send_email)
    return sent


@pytest.fixture
def failing_email(monkeypatch) -> None:
    """Every email send fails."""
    monkeypatch.setattr(EmailService, "send_email", lambda self, *args, **kwargs: False)


def build_application(email: str = "a@x.com", **overrides) -> ApplicationCreate:
    data = {
        "first_name": "Ada",
        "last_name": "Okafor",
        "email": email,
        "phone_number": "08030000000",
        "area_of_specialty": "Urology",
        "mdcn_registration_number": "MDCN/12345",
        "year_qualified_mbbs": 2008,
        "additional_qualification_mdcn": "FWACS",
        "year_qualified_urologist": 2016,
        "current_practice": "Lagos University Teaching Hospital",
        "next_of_kin_name": "Chidi Okafor",
        "next_of_kin_phone": "08031111111",
        "next_of_kin_email": "chidi@example.com",
        "fellowship_college": "West African College of Surgeons",
        "fwacs": True,
        "qualification_year": 2016,
        "additional_qualification": "None",
        "residency_training": "LUTH",
        "declaration": "I confirm the information provided is accurate",
        "mbbs_certificate": "certificates/mbbs.pdf",
        "fellowship_certificate": "certificates/fellowship.pdf",
    }
    data.update(overrides)
    return ApplicationCreate(**data)


@pytest.fixture
def make_application(db: Session):
    def _make(email: str = "a@x.com", **overrides):
        return crud.application.create(db, obj_in=build_application(email, **overrides))
    return _make


@pytest.fixture
def make_member(db: Session):
    def _make(membership_number: str, email: str, **overrides) -> Member:
        data = {
            "first_name": "Bola",
            "last_name": "Adeyemi",
            "email": email,
            "membership_number": membership_number,
            "membership_type": MembershipType.EXISTING,
            "area_of_specialty": "Urology",
        }
        data.update(overrides)
        return crud.member.create(db, obj_in=data)
    return _make


@pytest.fixture
def make_admin(db: Session):
    def _make(email: str = "admin@naus.org", role: AdminRole = AdminRole.MEMBERSHIP_ADMIN) -> Admin:
        return crud.admin.create(
            db, obj_in=AdminCreate(email=email, name="Test Admin", role=role), password=ADMIN_PASSWORD
        )
    return _make


@pytest.fixture
def admin(make_admin) -> Admin:
    return make_admin()


def admin_auth_headers(admin: Admin) -> Dict[str, str]:
    token = create_access_token(admin.email, principal_id=admin.id, role=admin.role.value, principal_type="admin")
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def admin_headers(admin: Admin) -> Dict[str, str]:
    return admin_auth_headers(admin)


@pytest.fixture
def headers_for():
    """Bearer headers for any admin."""
    return admin_auth_headers


@pytest.fixture
def application_data():
    """Builder for a complete ApplicationCreate."""
    return build_application


def pytest_configure(config: pytest.Config) -> None:
    """Configure pytest."""
    config.addinivalue_line(
        "markers", "integration: marks tests that go through the HTTP API"
    )
