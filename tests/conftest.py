import pytest
from fastapi.testclient import TestClient
from sqlalchemy import text

from showcase_service.errors import AnnotationError
from showcase_service.gemini import Annotation
from showcase_service.main import create_app, get_annotator
from showcase_service.settings import Settings

JPEG_BYTES = b"\xff\xd8\xff\xe0\x00\x10JFIF\x00\x01\x01\x00\x00\x01\x00\x01\x00\x00\xff\xd9"
GEMINI_URI = "https://generativelanguage.googleapis.com/v1beta/files/can-123"
GEMINI_TEXT = "This is a Pepsi can (1). Turn it into a desk organiser: ..."


class FakeAnnotator:
    """Stands in for GeminiAnnotator; remembers what it was asked."""

    def __init__(self):
        self.calls = []
        self.error = None

    async def annotate_image(self, path, mime_type, display_name, catalog):
        self.calls.append({
            "path": path,
            "existed": path.exists(),
            "data": path.read_bytes() if path.exists() else None,
            "mime_type": mime_type,
            "display_name": display_name,
            "catalog": catalog,
        })
        if self.error:
            raise self.error
        return Annotation(
            uri=GEMINI_URI,
            mime_type=mime_type,
            text=GEMINI_TEXT,
            raw={"candidates": [{"content": {"parts": [{"text": GEMINI_TEXT}]}}]},
        )


@pytest.fixture
def product_list(tmp_path):
    path = tmp_path / "pepsico.txt"
    path.write_text("Pepsi\nDoritos\n\n  Lay's  \n", encoding="utf-8")
    return path


@pytest.fixture
def settings(tmp_path, product_list):
    return Settings(
        _env_file=None,
        database_url="sqlite://",
        api_key="test-key",
        upload_dir=str(tmp_path / "uploads"),
        product_list_path=str(product_list),
    )


@pytest.fixture
def annotator():
    return FakeAnnotator()


@pytest.fixture
def client(settings, annotator):
    app = create_app(settings)
    app.dependency_overrides[get_annotator] = lambda: annotator
    with TestClient(app) as c:
        yield c


def stored_rows(client):
    """Every submission row, straight from the database."""
    db = client.app.state.session_factory()
    try:
        rows = db.execute(
            text("SELECT id, email, image, content_type, gemini_uri, status FROM submissions")
        ).mappings().all()
        return [dict(r) for r in rows]
    finally:
        db.close()


@pytest.fixture
def failing_annotation(annotator):
    annotator.error = AnnotationError("Gemini generation failed: 503")
    return annotator
