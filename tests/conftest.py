"""
Pytest configuration and fixtures
"""
import os
import tempfile
from datetime import datetime, timedelta, timezone

import pytest

# Settings are cached on first use, so the environment must be set before
# anything from gradebook is imported
_TMP_ROOT = tempfile.mkdtemp(prefix="gradebook-tests-")
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["SECRET_KEY"] = "test-secret"
os.environ["UPLOAD_DIR"] = os.path.join(_TMP_ROOT, "uploads")
os.environ["LOG_DIR"] = os.path.join(_TMP_ROOT, "logs")
os.environ.pop("REDIS_URL", None)

from fastapi.testclient import TestClient  # noqa: E402

from gradebook.core.config.settings import get_settings  # noqa: E402
from gradebook.db.base import Base  # noqa: E402
from gradebook.db.session import SessionLocal, engine  # noqa: E402
from gradebook.main import app  # noqa: E402
from gradebook.services.file_storage import FileStorage  # noqa: E402


@pytest.fixture(autouse=True)
def fresh_database():
    """Every test starts from empty tables."""
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client():
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def storage(tmp_path):
    settings = get_settings()
    return FileStorage(
        upload_dir=str(tmp_path / "uploads"),
        allowed_mime_types=settings.ALLOWED_MIME_TYPES,
        max_upload_size=settings.MAX_UPLOAD_SIZE,
        chunk_size=1024,
    )


def register(client, email, role, password="secret123", first_name="Ada", last_name="Lovelace"):
    response = client.post(
        "/api/auth/register",
        json={
            "email": email,
            "password": password,
            "firstName": first_name,
            "lastName": last_name,
            "role": role,
        },
    )
    assert response.status_code == 200, response.text
    return response.json()


def auth_headers(token):
    return {"Authorization": f"Bearer {token}"}


def due_in(days):
    return (datetime.now(timezone.utc) + timedelta(days=days)).isoformat()


@pytest.fixture
def teacher(client):
    body = register(client, "t@x.com", "teacher", first_name="Tess")
    return {"id": body["user"]["id"], "headers": auth_headers(body["token"])}


@pytest.fixture
def other_teacher(client):
    body = register(client, "t2@x.com", "teacher", first_name="Theo")
    return {"id": body["user"]["id"], "headers": auth_headers(body["token"])}


@pytest.fixture
def student(client):
    body = register(client, "s@x.com", "student", first_name="Sam")
    return {"id": body["user"]["id"], "headers": auth_headers(body["token"])}


@pytest.fixture
def student2(client):
    body = register(client, "s2@x.com", "student", first_name="Sky")
    return {"id": body["user"]["id"], "headers": auth_headers(body["token"])}


def create_assignment(client, teacher, **overrides):
    payload = {
        "title": "HW1",
        "description": "First homework",
        "dueDate": due_in(7),
        "maxPoints": 100,
    }
    payload.update(overrides)
    response = client.post("/api/assignments", json=payload, headers=teacher["headers"])
    assert response.status_code == 200, response.text
    return response.json()


def pdf(name="answer.pdf", content=b"%PDF-1.4 homework"):
    return ("files", (name, content, "application/pdf"))


def submit(client, student, assignment_id, files=(), notes=None):
    data = {"assignmentId": str(assignment_id)}
    if notes is not None:
        data["notes"] = notes
    return client.post(
        "/api/submissions",
        data=data,
        files=list(files) or None,
        headers=student["headers"],
    )
