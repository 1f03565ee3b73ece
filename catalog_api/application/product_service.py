"""Product application service.

Business rules over the product store:
- Create/read/update/delete of whole products
- Image-list edits (append, remove-all-occurrences)
- Quantity set with integer validation

``update_product`` replaces name, description and price only. Images
and quantity change exclusively through their own operations.

Sub-resource mutations are plain read-modify-write cycles against the
store. They are not atomic: concurrent writers on the same id can
overwrite each other's change to that field group.
"""

from collections.abc import Iterable
from decimal import Decimal, InvalidOperation
from typing import Any
from uuid import uuid4

import structlog

from catalog_api.domain.entities import Product
from catalog_api.domain.exceptions import InvalidInputError, ProductNotFoundError
from catalog_api.infrastructure.product_store import ProductStore, get_product_store

logger = structlog.get_logger()


# ============================================================================
# Validation helpers
# ============================================================================


def _validate_name(name: Any) -> str:
    if not isinstance(name, str) or not name.strip():
        raise InvalidInputError("Name must be a non-empty string", field="name")
    return name


def _validate_description(description: Any) -> str:
    if description is None:
        return ""
    if not isinstance(description, str):
        raise InvalidInputError("Description must be a string", field="description")
    return description


def _validate_price(price: Any) -> Decimal:
    if isinstance(price, bool) or not isinstance(price, (int, float, Decimal)):
        raise InvalidInputError("Price must be a number", field="price")
    try:
        value = Decimal(str(price))
    except InvalidOperation:
        raise InvalidInputError("Price must be a number", field="price")
    if not value.is_finite():
        raise InvalidInputError("Price must be a finite number", field="price")
    if value < 0:
        raise InvalidInputError("Price must not be negative", field="price")
    return value


def _validate_images(images: Any) -> list[str]:
    if images is None:
        return []
    if isinstance(images, str) or not isinstance(images, Iterable):
        raise InvalidInputError("Images must be a list of URLs", field="images")
    result = list(images)
    if not all(isinstance(url, str) for url in result):
        raise InvalidInputError("Images must be a list of URLs", field="images")
    return result


def _validate_quantity(quantity: Any) -> int:
    # bool is an int subclass but never a quantity
    if isinstance(quantity, bool):
        raise InvalidInputError("Quantity must be an integer", field="quantity")
    if isinstance(quantity, float) and quantity.is_integer():
        quantity = int(quantity)
    if not isinstance(quantity, int):
        raise InvalidInputError("Quantity must be an integer", field="quantity")
    if quantity < 0:
        raise InvalidInputError("Quantity must not be negative", field="quantity")
    return quantity


# ============================================================================
# Product Service
# ============================================================================


class ProductService:
    """Service for product catalog operations.

    Does not check authorization; callers reach it only after the
    auth middleware has accepted the request.
    """

    def __init__(
        self,
        store: ProductStore | None = None,
        request_id: str | None = None,
    ) -> None:
        """Initialize product service.

        Args:
            store: Product store (defaults to the process-wide store).
            request_id: Request ID for log correlation.
        """
        self.store = store if store is not None else get_product_store()
        self.request_id = request_id
        self._logger = logger.bind(request_id=request_id) if request_id else logger

    def _require(self, product_id: str) -> Product:
        product = self.store.get_product(product_id)
        if product is None:
            self._logger.warning("Product not found", product_id=product_id)
            raise ProductNotFoundError(product_id)
        return product

    # ========================================================================
    # Reads
    # ========================================================================

    def list_products(self) -> list[Product]:
        """Return every product, unfiltered and unpaginated."""
        return self.store.list_products()

    def get_product(self, product_id: str) -> Product:
        """Get a product by id.

        Raises:
            ProductNotFoundError: If the id does not exist.
        """
        return self._require(product_id)

    # ========================================================================
    # Whole-entity writes
    # ========================================================================

    def create_product(
        self,
        name: str,
        description: str,
        price: Decimal | int | float,
        images: list[str] | None = None,
        quantity: int | None = None,
    ) -> Product:
        """Create and persist a new product.

        Args:
            name: Product name (non-empty).
            description: Product description (may be empty).
            price: Non-negative price.
            images: Optional initial image URLs, order preserved.
            quantity: Optional stock level; stored as given.

        Returns:
            The created product with its assigned id.

        Raises:
            InvalidInputError: If name, description, price or images are invalid.
        """
        product = Product(
            id=uuid4().hex,
            name=_validate_name(name),
            description=_validate_description(description),
            price=_validate_price(price),
            images=_validate_images(images),
            quantity=quantity,
        )
        saved = self.store.save_product(product)

        self._logger.info(
            "Product created",
            product_id=saved.id,
            name=saved.name,
            price=str(saved.price),
        )
        return saved

    def update_product(
        self,
        product_id: str,
        name: str,
        description: str | None,
        price: Decimal | int | float,
    ) -> Product:
        """Replace a product's name, description and price.

        A description of None keeps the stored one. Images and quantity
        are left as they are.

        Raises:
            InvalidInputError: If a field value is invalid.
            ProductNotFoundError: If the id does not exist.
        """
        name = _validate_name(name)
        if description is not None:
            description = _validate_description(description)
        price = _validate_price(price)

        product = self._require(product_id)
        product.name = name
        if description is not None:
            product.description = description
        product.price = price
        saved = self.store.save_product(product)

        self._logger.info("Product updated", product_id=product_id)
        return saved

    def delete_product(self, product_id: str) -> None:
        """Permanently remove a product.

        Raises:
            ProductNotFoundError: If the id does not exist.
        """
        if not self.store.delete_product(product_id):
            self._logger.warning("Product not found", product_id=product_id)
            raise ProductNotFoundError(product_id)

        self._logger.info("Product deleted", product_id=product_id)

    # ========================================================================
    # Sub-resource writes
    # ========================================================================

    def add_images(self, product_id: str, images: list[str]) -> Product:
        """Append image URLs, keeping their order and any duplicates.

        Raises:
            InvalidInputError: If images is not a list of strings.
            ProductNotFoundError: If the id does not exist.
        """
        images = _validate_images(images)
        product = self._require(product_id)
        product.images.extend(images)
        saved = self.store.save_product(product)

        self._logger.info(
            "Images added",
            product_id=product_id,
            added=len(images),
            total=len(saved.images),
        )
        return saved

    def remove_images(self, product_id: str, images: list[str]) -> Product:
        """Remove every occurrence of each given URL.

        Survivors keep their relative order. URLs that are not present
        are ignored.

        Raises:
            InvalidInputError: If images is not a list of strings.
            ProductNotFoundError: If the id does not exist.
        """
        removal = set(_validate_images(images))
        product = self._require(product_id)
        before = len(product.images)
        product.images = [url for url in product.images if url not in removal]
        saved = self.store.save_product(product)

        self._logger.info(
            "Images removed",
            product_id=product_id,
            removed=before - len(saved.images),
            total=len(saved.images),
        )
        return saved

    def set_quantity(self, product_id: str, quantity: Any) -> Product:
        """Set the tracked stock level.

        The value is checked before the id is resolved, so a bad value
        is reported as invalid input even for an unknown id.

        Raises:
            InvalidInputError: If quantity is not a non-negative integer.
            ProductNotFoundError: If the id does not exist.
        """
        try:
            value = _validate_quantity(quantity)
        except InvalidInputError:
            self._logger.warning(
                "Rejected quantity",
                product_id=product_id,
                quantity=repr(quantity),
            )
            raise

        product = self._require(product_id)
        product.quantity = value
        saved = self.store.save_product(product)

        self._logger.info("Quantity set", product_id=product_id, quantity=value)
        return saved


def get_product_service(request_id: str | None = None) -> ProductService:
    """Get product service instance.

    Args:
        request_id: Request ID for correlation.

    Returns:
        ProductService bound to the process-wide store.
    """
    return ProductService(request_id=request_id)
