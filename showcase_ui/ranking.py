from __future__ import annotations
import base64
from typing import Any, Dict, List, Optional
import pandas as pd

def rank_participants(entries: List[Dict[str, Any]]) -> pd.DataFrame:
    """One row per email: submissions, annotated submissions, rank (1 = most submissions)."""
    if not entries:
        return pd.DataFrame(columns=["rank", "email", "submissions", "annotated"])
    df = pd.DataFrame(entries)
    if "geminiUri" not in df:
        df["geminiUri"] = None
    df["annotated"] = df["geminiUri"].notna() & (df["geminiUri"] != "")
    table = (
        df.groupby("email", sort=False)
          .agg(submissions=("annotated", "size"), annotated=("annotated", "sum"))
          .reset_index()
          .sort_values(["submissions", "annotated"], ascending=False, kind="stable")
          .reset_index(drop=True)
    )
    table["annotated"] = table["annotated"].astype(int)
    table.insert(0, "rank", range(1, len(table) + 1))
    return table

def decode_image(entry: Dict[str, Any]) -> Optional[bytes]:
    encoded = entry.get("image")
    if not encoded:
        return None
    return base64.b64decode(encoded)
