"""Product persistence.

Stores return independent copies of their records, so a caller must
``save_product`` after changing an entity. Nothing here serializes
concurrent writers: two read-modify-write cycles on the same id race
and the later save wins.
"""

import json
from abc import ABC, abstractmethod
from pathlib import Path

import structlog

from catalog_api.domain.entities import Product

logger = structlog.get_logger()


class ProductStore(ABC):
    """Abstract product store."""

    @abstractmethod
    def list_products(self) -> list[Product]:
        """Return every product in insertion order."""

    @abstractmethod
    def get_product(self, product_id: str) -> Product | None:
        """Return a product by id, or None if not found."""

    @abstractmethod
    def save_product(self, product: Product) -> Product:
        """Insert or replace a product by id."""

    @abstractmethod
    def delete_product(self, product_id: str) -> bool:
        """Remove a product. Returns False if it did not exist."""

    @abstractmethod
    def clear(self) -> int:
        """Remove all products. Returns how many were removed."""

    def count(self) -> int:
        """Number of stored products."""
        return len(self.list_products())


# ============================================================================
# In-memory store
# ============================================================================


class InMemoryProductStore(ProductStore):
    """Dictionary-backed store. Contents are lost on restart."""

    def __init__(self) -> None:
        self._products: dict[str, Product] = {}

    def list_products(self) -> list[Product]:
        return [p.copy() for p in self._products.values()]

    def get_product(self, product_id: str) -> Product | None:
        product = self._products.get(product_id)
        return product.copy() if product else None

    def save_product(self, product: Product) -> Product:
        self._products[product.id] = product.copy()
        return product.copy()

    def delete_product(self, product_id: str) -> bool:
        return self._products.pop(product_id, None) is not None

    def clear(self) -> int:
        count = len(self._products)
        self._products.clear()
        return count

    def count(self) -> int:
        return len(self._products)


# ============================================================================
# JSON file store
# ============================================================================


class JsonFileProductStore(ProductStore):
    """Store backed by a single JSON array on disk.

    The whole file is read on every call and rewritten on every write.
    Adequate for small catalogs only.
    """

    def __init__(self, file_path: Path) -> None:
        self._file_path = Path(file_path)
        self._ensure_file()

    def list_products(self) -> list[Product]:
        return list(self._load().values())

    def get_product(self, product_id: str) -> Product | None:
        return self._load().get(product_id)

    def save_product(self, product: Product) -> Product:
        products = self._load()
        products[product.id] = product.copy()
        self._persist(products)
        return product.copy()

    def delete_product(self, product_id: str) -> bool:
        products = self._load()
        if products.pop(product_id, None) is None:
            return False
        self._persist(products)
        return True

    def clear(self) -> int:
        products = self._load()
        self._persist({})
        return len(products)

    # --- Serialization helpers ------------------------------------------------

    def _load(self) -> dict[str, Product]:
        raw = json.loads(self._file_path.read_text(encoding="utf-8"))
        return {item["id"]: Product.from_dict(item) for item in raw}

    def _persist(self, products: dict[str, Product]) -> None:
        raw = [p.to_dict() for p in products.values()]
        # readers only ever see a complete file
        tmp_path = self._file_path.with_name(self._file_path.name + ".tmp")
        tmp_path.write_text(json.dumps(raw, indent=2) + "\n", encoding="utf-8")
        tmp_path.replace(self._file_path)

    def _ensure_file(self) -> None:
        if not self._file_path.exists():
            self._file_path.parent.mkdir(parents=True, exist_ok=True)
            self._file_path.write_text("[]", encoding="utf-8")
            logger.info("Created product store file", path=str(self._file_path))


# Global product store instance
_product_store: ProductStore | None = None


def get_product_store(path: str | None = None) -> ProductStore:
    """Get or create the product store instance.

    Args:
        path: JSON file to persist to. Only used when the store is first
            created; an in-memory store is used when omitted.

    Returns:
        ProductStore instance.
    """
    global _product_store
    if _product_store is None:
        if path:
            _product_store = JsonFileProductStore(Path(path))
        else:
            _product_store = InMemoryProductStore()
    return _product_store


def reset_product_store() -> None:
    """Reset product store instance (for testing)."""
    global _product_store
    _product_store = None
