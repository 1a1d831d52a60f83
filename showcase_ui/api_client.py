from __future__ import annotations
import requests
from typing import Any, Dict, List, Optional, Tuple
from showcase_ui.config import REQUEST_TIMEOUT

def _url(api_base: str, path: str) -> str:
    return api_base.rstrip("/") + path

def submit_photo(api_base: str, email: str, file_name: str, data: bytes,
                 content_type: Optional[str]) -> Tuple[bool, Any]:
    try:
        resp = requests.post(
            _url(api_base, "/upload"),
            data={"email": email},
            files={"image": (file_name, data, content_type or "application/octet-stream")},
            timeout=REQUEST_TIMEOUT,
        )
        if resp.status_code >= 400:
            return False, f"{resp.status_code} {resp.text[:200]}"
        return True, resp.json()
    except Exception as e:
        return False, str(e)

def fetch_leaderboard(api_base: str) -> Tuple[bool, Any]:
    try:
        resp = requests.get(_url(api_base, "/leaderboard"), timeout=REQUEST_TIMEOUT)
        if resp.status_code >= 400:
            return False, f"{resp.status_code} {resp.text[:200]}"
        entries: List[Dict[str, Any]] = resp.json()
        return True, entries
    except Exception as e:
        return False, str(e)
