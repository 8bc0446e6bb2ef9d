import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from cliprelay.main import app
from cliprelay.config import Preferences, get_preferences
from cliprelay.database import get_db, Base
from cliprelay.dependencies import get_transport_factory
from cliprelay.models import kv_entry  # noqa: F401
from cliprelay.schemas.upload import ClipboardSnapshot
from cliprelay.services.clipboard import get_clipboard

# Create test database
SQLALCHEMY_DATABASE_URL = "sqlite:///./test.db"
engine = create_engine(SQLALCHEMY_DATABASE_URL, connect_args={"check_same_thread": False})
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

VALID_PREFERENCES = {
    "endpoint": "account123.r2.cloudflarestorage.com",
    "bucket": "clips",
    "access_key_id": "AKIDEXAMPLE",
    "secret_access_key": "wJalrXUtnFEMIK7MDENGbPxRfiCYEXAMPLEKEY",
    "public_base_url": "https://files.example.com/",
}


def override_get_db():
    try:
        db = TestingSessionLocal()
        yield db
    finally:
        db.close()


class MemoryStorage:
    """Dict-backed stand-in for durable key-value storage."""

    def __init__(self, initial=None):
        self.data = dict(initial or {})

    def get(self, key):
        return self.data.get(key)

    def set(self, key, value):
        self.data[key] = value

    def delete(self, key):
        self.data.pop(key, None)


class FakeClipboard:
    def __init__(self, snapshot=None):
        self.snapshot = snapshot or ClipboardSnapshot()
        self.read_count = 0
        self.written = []

    def read(self):
        self.read_count += 1
        return self.snapshot

    def write(self, value):
        self.written.append(value)
        return True


class FakeTransport:
    def __init__(self, error=None):
        self.error = error
        self.puts = []
        self.head_calls = []

    def put_object(self, bucket, key, body, content_type):
        if self.error:
            raise self.error
        self.puts.append({"bucket": bucket, "key": key, "body": body, "content_type": content_type})

    def head_bucket(self, bucket):
        if self.error:
            raise self.error
        self.head_calls.append(bucket)


def make_preferences(**overrides):
    values = dict(VALID_PREFERENCES)
    values.update(overrides)
    return Preferences(**values)


@pytest.fixture
def memory_storage():
    return MemoryStorage()


@pytest.fixture
def fake_clipboard():
    return FakeClipboard()


@pytest.fixture
def fake_transport():
    return FakeTransport()


@pytest.fixture
def preferences():
    return make_preferences()


@pytest.fixture(scope="function")
def db_session():
    # Create tables
    Base.metadata.create_all(bind=engine)

    # Create session
    session = TestingSessionLocal()

    yield session

    # Clean up
    session.close()
    Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope="function")
def client(db_session, preferences, fake_clipboard, fake_transport):
    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_preferences] = lambda: preferences
    app.dependency_overrides[get_clipboard] = lambda: fake_clipboard
    app.dependency_overrides[get_transport_factory] = lambda: (lambda provider, configuration: fake_transport)
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def make_prefs():
    return make_preferences
