from typing import List

from pydantic_settings import BaseSettings, SettingsConfigDict

class Settings(BaseSettings):
    database_url: str = "sqlite:///./showcase.db"

    api_key: str | None = None
    gemini_base_url: str = "https://generativelanguage.googleapis.com"
    gemini_model: str = "gemini-1.5-flash"

    upload_dir: str = "uploads"
    product_list_path: str = "uploads/pepsico.txt"

    request_timeout_seconds: float = 60.0

    cors_origins: List[str] = ["*"]
    host: str = "0.0.0.0"
    port: int = 5050
    log_level: str = "INFO"

    model_config = SettingsConfigDict(env_prefix="", env_file=".env", extra="ignore")

settings = Settings()
