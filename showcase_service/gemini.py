import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict

import httpx

from .catalog import ProductCatalog
from .errors import AnnotationError, FilesystemError

logger = logging.getLogger(__name__)

REFUSAL = "This is not a Pepsico product, please take a photo of a Pepsico product!"

PROMPT_TEMPLATE = (
    "Here is a full list of Pepsico products:\n {products}. "
    "Is the object in the image a Pepsico product? "
    "If not, reply '{refusal}' "
    "If it is a pepsico product, describe how many and what brands they are. "
    "Then, give me an easy-to-follow instruction for upcycling projects with this object. "
    "the project has to be creative, environment-friendly, and fun to make. "
    "Give me only one but a different one each time"
)

def build_prompt(catalog: ProductCatalog) -> str:
    return PROMPT_TEMPLATE.format(products=catalog.as_text(), refusal=REFUSAL)

@dataclass(frozen=True)
class Annotation:
    uri: str
    mime_type: str
    text: str
    raw: Dict[str, Any] = field(default_factory=dict, repr=False)

class GeminiAnnotator:
    """Uploads an image through the Gemini Files API and asks the model about it.

    One instance is shared by the whole process; the underlying
    ``httpx.AsyncClient`` is owned by the caller.
    """

    def __init__(self, client: httpx.AsyncClient, api_key: str | None,
                 model: str = "gemini-1.5-flash",
                 base_url: str = "https://generativelanguage.googleapis.com"):
        self.client = client
        self.api_key = api_key
        self.model = model
        self.base_url = base_url.rstrip("/")

    def _params(self) -> Dict[str, str]:
        if not self.api_key:
            raise AnnotationError("Gemini API key is not configured")
        return {"key": self.api_key}

    async def upload_file(self, path: Path, mime_type: str, display_name: str) -> Dict[str, Any]:
        try:
            data = Path(path).read_bytes()
        except OSError as e:
            raise FilesystemError(f"cannot read staged file {path}: {e}") from e

        start_headers = {
            "X-Goog-Upload-Protocol": "resumable",
            "X-Goog-Upload-Command": "start",
            "X-Goog-Upload-Header-Content-Length": str(len(data)),
            "X-Goog-Upload-Header-Content-Type": mime_type,
        }
        try:
            r = await self.client.post(
                f"{self.base_url}/upload/v1beta/files",
                params=self._params(),
                json={"file": {"display_name": display_name}},
                headers=start_headers,
            )
            r.raise_for_status()
            upload_url = r.headers.get("x-goog-upload-url")
            if not upload_url:
                raise AnnotationError("Gemini did not return an upload url")

            r = await self.client.post(
                upload_url,
                content=data,
                headers={"X-Goog-Upload-Offset": "0", "X-Goog-Upload-Command": "upload, finalize"},
            )
            r.raise_for_status()
            uploaded = r.json()["file"]
        except httpx.HTTPError as e:
            raise AnnotationError(f"Gemini upload failed: {e}") from e
        except (KeyError, TypeError, ValueError) as e:
            raise AnnotationError(f"malformed Gemini upload response: {e}") from e

        if not uploaded.get("uri"):
            raise AnnotationError("Gemini upload response has no file uri")
        logger.info("Uploaded file %s as: %s", uploaded.get("displayName", display_name), uploaded["uri"])
        return uploaded

    async def generate(self, file_uri: str, mime_type: str, prompt: str) -> Dict[str, Any]:
        body = {
            "contents": [{
                "parts": [
                    {"text": prompt},
                    {"file_data": {"mime_type": mime_type, "file_uri": file_uri}},
                ],
            }],
        }
        try:
            r = await self.client.post(
                f"{self.base_url}/v1beta/models/{self.model}:generateContent",
                params=self._params(),
                json=body,
            )
            r.raise_for_status()
            return r.json()
        except httpx.HTTPError as e:
            raise AnnotationError(f"Gemini generation failed: {e}") from e
        except ValueError as e:
            raise AnnotationError(f"malformed Gemini generation response: {e}") from e

    @staticmethod
    def response_text(raw: Dict[str, Any]) -> str:
        try:
            parts = raw["candidates"][0]["content"]["parts"]
            text = "".join(p.get("text", "") for p in parts)
        except (KeyError, IndexError, TypeError) as e:
            raise AnnotationError(f"Gemini returned no candidate text: {raw.get('promptFeedback')}") from e
        if not text:
            raise AnnotationError("Gemini returned an empty answer")
        return text

    async def annotate_image(self, path: Path, mime_type: str, display_name: str,
                             catalog: ProductCatalog) -> Annotation:
        uploaded = await self.upload_file(path, mime_type, display_name)
        file_mime = uploaded.get("mimeType") or mime_type
        raw = await self.generate(uploaded["uri"], file_mime, build_prompt(catalog))
        return Annotation(uri=uploaded["uri"], mime_type=file_mime, text=self.response_text(raw), raw=raw)
