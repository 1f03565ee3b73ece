"""Application layer.

Contains the product service that applies catalog rules over a store.
"""

from catalog_api.application.product_service import (
    ProductService,
    get_product_service,
)

__all__ = [
    "ProductService",
    "get_product_service",
]
