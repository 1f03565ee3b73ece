"""Shared fixtures for catalog tests."""

import pytest
from fastapi.testclient import TestClient

from catalog_api.application.product_service import ProductService
from catalog_api.infrastructure.config import settings
from catalog_api.infrastructure.product_store import (
    get_product_store,
    reset_product_store,
)
from catalog_api.main import app


@pytest.fixture(autouse=True)
def reset_store():
    """Start every test with an empty in-memory store."""
    reset_product_store()
    app.state.token_verifier = None
    yield
    reset_product_store()
    app.state.token_verifier = None


@pytest.fixture
def api_token() -> str:
    """A bearer token the default verifier accepts."""
    return settings.catalog_api_tokens[0]


@pytest.fixture
def client() -> TestClient:
    """Create test client without authentication."""
    return TestClient(app)


@pytest.fixture
def auth_headers(api_token: str) -> dict[str, str]:
    """Get authentication headers."""
    return {"Authorization": f"Bearer {api_token}"}


@pytest.fixture
def auth_client(api_token: str) -> TestClient:
    """Create test client with a valid bearer token."""
    return TestClient(
        app,
        headers={"Authorization": f"Bearer {api_token}"},
    )


@pytest.fixture
def product_store():
    """Get product store instance."""
    return get_product_store()


@pytest.fixture
def service(product_store) -> ProductService:
    """Product service over the shared store."""
    return ProductService(store=product_store)


@pytest.fixture
def sample_product(service):
    """A stored product with two images and a tracked quantity."""
    return service.create_product(
        name="Widget",
        description="a spec item",
        price=10,
        images=["https://img/a.png", "https://img/b.png"],
        quantity=5,
    )
