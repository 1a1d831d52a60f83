from pydantic import BaseModel, ConfigDict, Field
from typing import Optional

class UploadResult(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    message: str = "Image uploaded successfully!"
    gemini_response: str = Field(..., alias="geminiResponse")
    gemini_uri: str = Field(..., alias="geminiUri")

class LeaderboardEntry(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    email: str
    content_type: Optional[str] = Field(None, alias="contentType")
    image: Optional[str] = None  # base64
    gemini_uri: Optional[str] = Field(None, alias="geminiUri")

class CatalogReloaded(BaseModel):
    products: int
