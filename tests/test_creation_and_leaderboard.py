import base64

from showcase_service import main
from showcase_service.errors import PersistenceError

from conftest import GEMINI_URI, JPEG_BYTES, stored_rows

PNG_BYTES = b"\x89PNG\r\n\x1a\n\x00\x00\x00\rIHDR"


def create(client, email="maya@example.org", image=("bottle.png", PNG_BYTES, "image/png")):
    data = {"email": email} if email is not None else {}
    files = {"image": image} if image is not None else None
    return client.post("/upload-creation", data=data, files=files)


def test_creation_stores_pending_record(client, annotator):
    r = create(client)
    assert r.status_code == 201
    assert r.text == "User and image saved successfully"
    [row] = stored_rows(client)
    assert row["email"] == "maya@example.org"
    assert row["image"] == PNG_BYTES
    assert row["content_type"] == "image/png"
    assert row["gemini_uri"] is None
    assert row["status"] == "pending"
    assert annotator.calls == []


def test_creation_requires_email(client):
    r = create(client, email=None)
    assert r.status_code == 400
    assert r.text == "Email and image are required"
    assert stored_rows(client) == []


def test_creation_requires_image(client):
    r = create(client, image=None)
    assert r.status_code == 400
    assert stored_rows(client) == []


def test_creation_store_failure(client, monkeypatch):
    def broken(*args, **kwargs):
        raise PersistenceError("database is locked")
    monkeypatch.setattr(main, "create_submission", broken)
    r = create(client)
    assert r.status_code == 500
    assert r.text == "Internal server error"


def test_empty_leaderboard(client):
    r = client.get("/leaderboard")
    assert r.status_code == 200
    assert r.json() == []


def test_leaderboard_lists_every_submission(client):
    create(client)
    client.post("/upload", data={"email": "a@b.com"}, files={"image": ("can.jpg", JPEG_BYTES, "image/jpeg")})

    entries = client.get("/leaderboard").json()
    assert len(entries) == 2
    by_email = {e["email"]: e for e in entries}
    assert set(by_email["maya@example.org"]) == {"email", "contentType", "image", "geminiUri"}
    assert by_email["maya@example.org"]["geminiUri"] is None
    assert by_email["a@b.com"]["geminiUri"] == GEMINI_URI


def test_leaderboard_images_round_trip(client):
    create(client)
    [entry] = client.get("/leaderboard").json()
    assert base64.b64decode(entry["image"]) == PNG_BYTES


def test_same_email_can_submit_twice(client):
    create(client)
    create(client)
    assert [e["email"] for e in client.get("/leaderboard").json()] == ["maya@example.org"] * 2


def test_leaderboard_read_failure(client, monkeypatch):
    def broken(db):
        raise PersistenceError("no such table: submissions")
    monkeypatch.setattr(main, "list_submissions", broken)
    r = client.get("/leaderboard")
    assert r.status_code == 500
    assert r.text == "Error fetching leaderboard"


def test_healthz(client):
    assert client.get("/healthz").json() == {"status": "ok"}


def test_creation_with_text_instead_of_file_is_rejected(client):
    r = client.post("/upload-creation", data={"email": "maya@example.org", "image": "not-a-file"})
    assert r.status_code == 400
    assert r.text == "Email and image are required"
    assert stored_rows(client) == []
