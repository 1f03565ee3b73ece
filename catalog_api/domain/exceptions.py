"""Domain exceptions.

Errors raised by the product service when a request cannot be
satisfied. The API layer maps each class onto an HTTP status.
Authorization failures never reach this layer; they are rejected
by the auth middleware before a handler runs.
"""

from typing import Any


class CatalogError(Exception):
    """Base class for all catalog exceptions."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        """Initialize catalog error.

        Args:
            message: Human-readable error message.
            details: Optional dictionary with additional error context.
        """
        super().__init__(message)
        self.message = message
        self.details = details or {}


class ProductNotFoundError(CatalogError):
    """Raised when a product id does not resolve to an entity."""

    def __init__(self, product_id: str) -> None:
        """Initialize product not found error.

        Args:
            product_id: The id that was looked up.
        """
        super().__init__(
            "Product not found",
            details={"product_id": product_id},
        )
        self.product_id = product_id


class InvalidInputError(CatalogError):
    """Raised when an operation receives a value it cannot accept."""

    def __init__(self, message: str, field: str | None = None) -> None:
        """Initialize invalid input error.

        Args:
            message: Description of what is wrong with the input.
            field: Name of the offending field, if any.
        """
        super().__init__(
            message,
            details={"field": field} if field else {},
        )
        self.field = field
