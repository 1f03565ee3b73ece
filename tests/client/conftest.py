"""Fixtures for client tests."""

from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest
import pytest_asyncio

from catalog_api.main import app
from catalog_client.api_client import APIError, APIResponse, CatalogAPIClient
from catalog_client.catalog import CatalogClient


@pytest.fixture
def mock_api() -> MagicMock:
    """Create a mock catalog API client."""
    api = MagicMock(spec=CatalogAPIClient)
    api.token = "test-token"

    api.list_products = AsyncMock(return_value=APIResponse(success=True, data=[]))
    api.get_product = AsyncMock()
    api.create_product = AsyncMock()
    api.update_product = AsyncMock()
    api.delete_product = AsyncMock()
    api.add_images = AsyncMock()
    api.remove_images = AsyncMock()
    api.set_quantity = AsyncMock()
    api.close = AsyncMock()

    return api


@pytest.fixture
def catalog(mock_api: MagicMock) -> CatalogClient:
    """CatalogClient over the mock API."""
    return CatalogClient(mock_api)


@pytest_asyncio.fixture
async def live_catalog(api_token: str):
    """CatalogClient wired to the real app through an in-process transport."""
    api = CatalogAPIClient(
        base_url="http://testserver",
        token=api_token,
        transport=httpx.ASGITransport(app=app),
    )
    catalog = CatalogClient(api)
    yield catalog
    await catalog.close()


@pytest.fixture
def product_factory():
    """Build product dicts as the API returns them."""

    def make(product_id: str, name: str = "Widget", description: str = "", price=10):
        return {
            "id": product_id,
            "name": name,
            "description": description,
            "price": price,
            "images": [],
            "quantity": None,
        }

    return make


@pytest.fixture
def ok():
    """Build a successful API response."""

    def make(data=None) -> APIResponse:
        return APIResponse(success=True, data=data, status_code=200)

    return make


@pytest.fixture
def failed():
    """Build a failed API response."""

    def make(
        error_code: str = "PRODUCT_NOT_FOUND",
        message: str = "Product not found",
        status_code: int = 404,
    ) -> APIResponse:
        return APIResponse(
            success=False,
            status_code=status_code,
            error=APIError(
                error_code=error_code,
                message=message,
                status_code=status_code,
            ),
        )

    return make
