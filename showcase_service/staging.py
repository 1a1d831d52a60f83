import time
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator

from .errors import FilesystemError

def staged_name(filename: str | None) -> str:
    # not collision-proof for identical names within the same millisecond
    base = Path(filename or "upload").name or "upload"
    return f"{int(time.time() * 1000)}-{base}"

@contextmanager
def staged_file(directory: str, filename: str | None, data: bytes) -> Iterator[Path]:
    """Write ``data`` under ``directory`` and remove it again on exit, whatever happened inside."""
    path = Path(directory) / staged_name(filename)
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(data)
    except OSError as e:
        raise FilesystemError(f"cannot stage upload at {path}: {e}") from e
    try:
        yield path
    finally:
        try:
            path.unlink(missing_ok=True)
        except OSError as e:
            raise FilesystemError(f"cannot remove staged file {path}: {e}") from e
