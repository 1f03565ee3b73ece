"""Domain layer.

Contains the Product entity and the catalog error taxonomy.
"""

from catalog_api.domain.entities import Product
from catalog_api.domain.exceptions import (
    CatalogError,
    InvalidInputError,
    ProductNotFoundError,
)

__all__ = [
    "CatalogError",
    "InvalidInputError",
    "Product",
    "ProductNotFoundError",
]
