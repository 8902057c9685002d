from pathlib import Path
import os
import sys
import tempfile

ROOT = Path(__file__).resolve().parents[1]
BACKEND_DIR = ROOT / "backend"
if str(BACKEND_DIR) not in sys.path:
    sys.path.insert(0, str(BACKEND_DIR))

TEST_DB_DIR = tempfile.mkdtemp(prefix="cocurricular-tests-")
os.environ["DATABASE_URL"] = f"sqlite:///{TEST_DB_DIR}/test.db"
os.environ.setdefault("JWT_SECRET_KEY", "test-secret-key-that-is-long-enough-for-hs256")
os.environ.setdefault("JUDGE_DEFAULT_PASSWORD", "123456")
for key in ("S3_BUCKET_NAME", "S3_ACCESS_KEY", "S3_SECRET_KEY", "SMTP_PRIMARY_HOST", "SMTP_SECONDARY_HOST"):
    os.environ.pop(key, None)

import pytest
from fastapi.testclient import TestClient

from database import Base, SessionLocal, engine
from auth import get_password_hash
from models import Account, AccountRole, AccountStatus


@pytest.fixture(autouse=True)
def reset_database():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield


@pytest.fixture
def db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client():
    from server import app

    with TestClient(app, raise_server_exceptions=False) as test_client:
        yield test_client


@pytest.fixture
def make_account(db):
    def _make(email="user@example.com", password="secret123", role=AccountRole.USER, name="Test User"):
        account = Account(
            name=name,
            email=email,
            hashed_password=get_password_hash(password),
            role=role,
            status=AccountStatus.ACCEPTED,
        )
        db.add(account)
        db.commit()
        db.refresh(account)
        return account

    return _make


@pytest.fixture
def admin_headers(client, make_account):
    make_account(email="admin@example.com", password="adminpass", role=AccountRole.ADMIN, name="Admin")
    response = client.post("/auth/login", json={"email": "admin@example.com", "password": "adminpass"})
    assert response.status_code == 200
    return {"Authorization": f"Bearer {response.json()['access_token']}"}


@pytest.fixture
def uploads(monkeypatch):
    """Replace the blob store with an in-memory recorder."""
    import storage

    state = {"uploaded": [], "deleted": []}

    def fake_upload_bytes(data, folder, filename, content_type="application/octet-stream"):
        key = f"{folder}/{len(state['uploaded']) + 1}-{filename}"
        state["uploaded"].append(key)
        return {"url": f"https://bucket.example/{key}", "key": key}

    def fake_delete_blob(key):
        if not key:
            return False
        state["deleted"].append(key)
        return True

    monkeypatch.setattr(storage, "upload_bytes", fake_upload_bytes)
    monkeypatch.setattr(storage, "delete_blob", fake_delete_blob)
    for module_name in ("routers.categories", "routers.news"):
        module = __import__(module_name, fromlist=["delete_blob"])
        monkeypatch.setattr(module, "delete_blob", fake_delete_blob)
    return state
