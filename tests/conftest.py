import pytest
from fastapi.testclient import TestClient

from app.config import settings
from app.core.security import create_access_token
from app.dependencies.store import get_store
from app.main import app
from app.services.record_store.memory_backend import MemoryRecordStore

settings.record_store_backend = "memory"


@pytest.fixture
def store():
    return MemoryRecordStore()


@pytest.fixture
def client(store):
    app.dependency_overrides[get_store] = lambda: store
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def admin_headers():
    token = create_access_token({"sub": "admin-1", "email": "admin@example.com", "role": "admin"})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def examiner_headers():
    token = create_access_token({"sub": "user-7", "email": "someone@example.com", "role": "examiner"})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def pending_record():
    def _make(note="ok", **fields):
        record = {"full_name": "Test Examiner", "mobile_number": "01700000000", "review_status": "Pending"}
        if note is not None:
            record["reviewer_note"] = note
        record.update(fields)
        return record

    return _make
