import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Tuple

from .errors import FilesystemError

logger = logging.getLogger(__name__)

@dataclass(frozen=True)
class ProductCatalog:
    products: Tuple[str, ...] = ()
    source: str = ""

    def as_text(self) -> str:
        return "\n".join(self.products)

    def __len__(self) -> int:
        return len(self.products)

def load_catalog(path: str) -> ProductCatalog:
    """Read a newline-delimited product list; blank lines are skipped."""
    try:
        raw = Path(path).read_text(encoding="utf-8")
    except OSError as e:
        raise FilesystemError(f"cannot read product list {path}: {e}") from e
    products = tuple(line.strip() for line in raw.splitlines() if line.strip())
    logger.info("Loaded %d products from %s", len(products), path)
    return ProductCatalog(products=products, source=path)

def load_catalog_or_empty(path: str) -> ProductCatalog:
    try:
        return load_catalog(path)
    except FilesystemError as e:
        logger.warning("%s; starting with an empty product list", e)
        return ProductCatalog(source=path)
