import pytest
from cliprelay.config import get_preferences
from cliprelay.exceptions import TransportError
from cliprelay.main import app
from cliprelay.schemas.upload import ClipboardSnapshot


def test_upload_snapshot_success(client, fake_transport, fake_clipboard):
    """Test uploading an explicit text snapshot."""
    response = client.post("/upload", json={"text": "hello"})

    assert response.status_code == 200
    data = response.json()
    assert data["title"] == "Uploaded to cloud"
    assert data["url"].startswith("https://files.example.com/documents/")
    assert data["record"]["category"] == "documents"
    assert data["record"]["fileSizeBytes"] == 5
    assert data["record"]["fileExtension"] == "txt"
    assert data["notices"] == []
    assert len(fake_transport.puts) == 1
    assert fake_clipboard.written == [data["url"]]


def test_uploads_appear_in_history(client):
    """Test that a successful upload is listed newest first."""
    first = client.post("/upload", json={"text": "one"}).json()
    second = client.post("/upload", json={"text": "two"}).json()

    response = client.get("/history")

    assert response.status_code == 200
    ids = [item["id"] for item in response.json()["items"]]
    assert ids == [second["record"]["id"], first["record"]["id"]]


def test_upload_system_clipboard(client, fake_clipboard):
    """Test uploading whatever the host clipboard holds."""
    fake_clipboard.snapshot = ClipboardSnapshot(text="from the clipboard")

    response = client.post("/upload/clipboard")

    assert response.status_code == 200
    assert fake_clipboard.read_count == 1
    assert response.json()["record"]["fileSizeBytes"] == len("from the clipboard")


def test_upload_empty_snapshot_is_unsupported(client, fake_transport):
    """Test that an empty snapshot is rejected without a network call."""
    response = client.post("/upload", json={})

    assert response.status_code == 422
    detail = response.json()["detail"]
    assert detail["kind"] == "clipboard"
    assert detail["title"] == "Clipboard content not supported"
    assert fake_transport.puts == []


def test_upload_with_invalid_preferences(client, make_prefs, fake_transport):
    """Test that configuration errors route the user to preferences."""
    app.dependency_overrides[get_preferences] = lambda: make_prefs(public_base_url="")

    response = client.post("/upload", json={"text": "hello"})

    assert response.status_code == 400
    detail = response.json()["detail"]
    assert detail["kind"] == "configuration"
    assert detail["message"] == "Public Base URL is required"
    assert detail["openPreferences"] is True
    assert fake_transport.puts == []


def test_upload_disallowed_category(client, make_prefs):
    """Test that a disallowed category is reported as a policy error."""
    app.dependency_overrides[get_preferences] = lambda: make_prefs(allow_documents=False)

    response = client.post("/upload", json={"text": "hello"})

    assert response.status_code == 400
    detail = response.json()["detail"]
    assert detail["kind"] == "policy"
    assert detail["title"] == "File type not allowed"


def test_upload_transport_error(client, fake_transport):
    """Test upload when the storage transport fails."""
    fake_transport.error = TransportError("Upload failed", "The specified bucket does not exist")

    response = client.post("/upload", json={"text": "hello"})

    assert response.status_code == 502
    detail = response.json()["detail"]
    assert detail["title"] == "Upload failed"
    assert detail["message"] == "The specified bucket does not exist"
    assert client.get("/history").json()["items"] == []


@pytest.mark.parametrize("payload", [{"text": 5}, {"file": ["a"]}])
def test_upload_invalid_request(client, payload):
    """Test snapshot request with invalid data."""
    response = client.post("/upload", json=payload)

    assert response.status_code == 422  # Validation error
