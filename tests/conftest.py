import os
import shutil
import tempfile

import pytest

# Env pehle set hona chahiye, config import time pe padhta hai
_TMP_DIR = tempfile.mkdtemp(prefix="portal-tests-")
os.environ["DATABASE_URL"] = "sqlite:///" + os.path.join(_TMP_DIR, "portal-test.db")
os.environ["STORAGE_DIR"] = os.path.join(_TMP_DIR, "storage")
os.environ["PUBLIC_BASE_URL"] = "http://testserver"
os.environ["ADMIN_PASSWORD"] = ""
os.environ["GEMINI_API_KEY"] = "test-key"
os.environ["BULK_MARK_WORKERS"] = "4"

from fastapi.testclient import TestClient  # noqa: E402

import config  # noqa: E402
from database import Base, SessionLocal, engine  # noqa: E402
from main import app  # noqa: E402
from services.attendance import stats_cache  # noqa: E402
from services.backend_client import BackendClient  # noqa: E402


@pytest.fixture(autouse=True)
def fresh_db():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    shutil.rmtree(config.STORAGE_DIR, ignore_errors=True)
    stats_cache.clear()
    yield


@pytest.fixture
def client():
    return TestClient(app)


@pytest.fixture
def db():
    session = SessionLocal()
    yield session
    session.close()


@pytest.fixture
def backend(db):
    return BackendClient(db)


@pytest.fixture
def make_user(client, db):
    """Registers an account and returns (user_id, bearer headers)."""

    def _make(email="student@ece.edu", semester="5th", role="student", password="secret123", name="Test Student"):
        r = client.post("/api/v1/auth/register", json={
            "name": name,
            "email": email,
            "mobile_number": "9876543210",
            "semester": semester,
            "password": password,
            "confirm_password": password,
        })
        assert r.status_code == 200, r.text
        user_id = r.json()["user"]["id"]

        if role == "admin":
            backend = BackendClient(db)
            row = backend.first("user_roles", {"user_id": user_id})
            backend.update("user_roles", row.id, {"role": "admin"})
            r = client.post("/api/v1/auth/admin/login", json={"email": email, "password": password})
        else:
            r = client.post("/api/v1/auth/login", json={"email": email, "password": password})
        assert r.status_code == 200, r.text
        return user_id, {"Authorization": f"Bearer {r.json()['access_token']}"}

    return _make


@pytest.fixture
def student(make_user):
    return make_user()


@pytest.fixture
def admin(make_user):
    return make_user(email="admin@ece.edu", role="admin", name="Portal Admin")
