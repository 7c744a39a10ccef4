import os
import tempfile

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

# Point startup at throwaway locations before the app reads its settings
_scratch = tempfile.mkdtemp(prefix="recording-server-tests-")
os.environ.setdefault("DATABASE_URL", f"sqlite:///{_scratch}/startup.db")
os.environ.setdefault("UPLOADS_DIR", os.path.join(_scratch, "uploads"))

from app.db.base import Base, get_db  # noqa: E402
from app.main import app  # noqa: E402
from app.services.blob_storage import BlobStorage, get_blob_storage  # noqa: E402

# 1. In-Memory Database Setup
SQLALCHEMY_DATABASE_URL = "sqlite:///:memory:"

engine = create_engine(
    SQLALCHEMY_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture(scope="function")
def test_db():
    # Create tables
    Base.metadata.create_all(bind=engine)

    # Create session
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()
        # Drop tables after test
        Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope="function")
def uploads_dir(tmp_path):
    path = tmp_path / "uploads"
    path.mkdir()
    return path


@pytest.fixture(scope="function")
def blob_store(uploads_dir):
    return BlobStorage(uploads_dir, chunk_size=256)


@pytest.fixture(scope="function")
def client(test_db, blob_store):
    # Override the dependencies
    def override_get_db():
        try:
            yield test_db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_blob_storage] = lambda: blob_store

    with TestClient(app) as c:
        yield c

    # Reset overrides
    app.dependency_overrides.clear()
