from __future__ import annotations
import os

APP_TITLE = "Sustainable Showcase"

SHOWCASE_API_BASE = os.getenv("SHOWCASE_API_BASE", "http://localhost:5050")
REQUEST_TIMEOUT = int(os.getenv("REQUEST_TIMEOUT", "120"))

GALLERY_COLUMNS = 3
