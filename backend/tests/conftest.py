"""Pytest configuration and fixtures"""
import os
import tempfile
from pathlib import Path
from typing import Callable, Generator

# Settings are read at import time; point them at throwaway locations first
os.environ["DATABASE_URL"] = "sqlite:///./test.db"
os.environ["UPLOAD_DIR"] = tempfile.mkdtemp(prefix="filevault-uploads-")
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["LOG_LEVEL"] = "WARNING"

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import Session, sessionmaker  # noqa: E402

from filevault.api.deps import get_blob_store  # noqa: E402
from filevault.database import Base, get_db  # noqa: E402
from filevault.main import app  # noqa: E402
from filevault.stores.blob_store import LocalBlobStore  # noqa: E402

TEST_DATABASE_URL = os.environ["DATABASE_URL"]

engine = create_engine(TEST_DATABASE_URL, connect_args={"check_same_thread": False})
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

DEFAULT_PASSWORD = "s3cret-pass"


@pytest.fixture(scope="function")
def db() -> Generator[Session, None, None]:
    """Create a fresh database for each test"""
    Base.metadata.create_all(bind=engine)
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def blob_store(tmp_path: Path) -> LocalBlobStore:
    """Blob store rooted in a per-test directory"""
    return LocalBlobStore(tmp_path / "blobs")


@pytest.fixture(scope="function")
def client(db: Session, blob_store: LocalBlobStore) -> Generator[TestClient, None, None]:
    """Create test client with database session and blob store overrides"""

    def override_get_db():
        try:
            yield db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_blob_store] = lambda: blob_store
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def signup(client: TestClient) -> Callable[..., dict]:
    """Register a user and return the issued ``{token, refreshToken}`` data"""

    def _signup(user_id: str = "alice@example.com", password: str = DEFAULT_PASSWORD, headers: dict = None) -> dict:
        response = client.post("/signup", json={"id": user_id, "password": password}, headers=headers)
        assert response.status_code == 201, response.text
        return response.json()["data"]

    return _signup


def bearer(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def auth_headers(signup) -> dict:
    """Bearer headers for a freshly registered user"""
    return bearer(signup()["token"])
