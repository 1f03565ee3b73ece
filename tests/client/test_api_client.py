"""Tests for the catalog API client."""

from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock, patch

import httpx
import pytest

from catalog_client.api_client import CatalogAPIClient


def mock_response(status_code: int, payload=None, json_error: bool = False) -> MagicMock:
    response = MagicMock()
    response.status_code = status_code
    if json_error:
        response.json.side_effect = ValueError("Expecting value")
        response.text = "<html>bad gateway</html>"
    else:
        response.json.return_value = payload
    return response


class TestCatalogAPIClient:
    """Tests for CatalogAPIClient."""

    @pytest.fixture
    def client(self):
        """Create a test client."""
        return CatalogAPIClient(
            base_url="http://localhost:3000/",
            token="test-token",
        )

    @pytest.mark.asyncio
    async def test_client_initialization(self, client):
        """Trailing slash is stripped and no HTTP client exists yet."""
        assert client.base_url == "http://localhost:3000"
        assert client.token == "test-token"
        assert client.timeout is None
        assert client._client is None

    @pytest.mark.asyncio
    async def test_list_products_success(self, client):
        """Successful reads return the body as data."""
        with patch.object(client, "_get_client", new_callable=AsyncMock) as get_client:
            http = AsyncMock()
            http.request = AsyncMock(return_value=mock_response(200, [{"id": "p1"}]))
            get_client.return_value = http

            result = await client.list_products()

            assert result.success is True
            assert result.data == [{"id": "p1"}]
            kwargs = http.request.call_args.kwargs
            assert kwargs["method"] == "GET"
            assert kwargs["url"] == "/products"
            assert "Authorization" not in kwargs["headers"]

    @pytest.mark.asyncio
    async def test_write_sends_bearer_token(self, client):
        """Write calls carry the Authorization header."""
        with patch.object(client, "_get_client", new_callable=AsyncMock) as get_client:
            http = AsyncMock()
            http.request = AsyncMock(return_value=mock_response(201, {"id": "p1"}))
            get_client.return_value = http

            await client.create_product("Widget", "", Decimal("9.99"), images=["a"])

            kwargs = http.request.call_args.kwargs
            assert kwargs["method"] == "POST"
            assert kwargs["headers"]["Authorization"] == "Bearer test-token"
            assert kwargs["json"] == {
                "name": "Widget",
                "description": "",
                "price": 9.99,
                "images": ["a"],
            }

    @pytest.mark.asyncio
    async def test_update_without_description_omits_it(self, client):
        """A None description is not sent, so the server keeps its value."""
        with patch.object(client, "_get_client", new_callable=AsyncMock) as get_client:
            http = AsyncMock()
            http.request = AsyncMock(return_value=mock_response(200, {"id": "p1"}))
            get_client.return_value = http

            await client.update_product("p1", "Widget 2", None, 12)

            kwargs = http.request.call_args.kwargs
            assert kwargs["method"] == "PUT"
            assert kwargs["json"] == {"name": "Widget 2", "price": 12}

    @pytest.mark.asyncio
    async def test_remove_images_uses_delete_with_body(self, client):
        """Image removal is a DELETE carrying the URL list."""
        with patch.object(client, "_get_client", new_callable=AsyncMock) as get_client:
            http = AsyncMock()
            http.request = AsyncMock(return_value=mock_response(200, {"id": "p1"}))
            get_client.return_value = http

            await client.remove_images("p1", ["a"])

            kwargs = http.request.call_args.kwargs
            assert kwargs["method"] == "DELETE"
            assert kwargs["url"] == "/products/p1/images"
            assert kwargs["json"] == {"images": ["a"]}

    @pytest.mark.asyncio
    async def test_error_response(self, client):
        """Non-2xx responses become APIError values."""
        with patch.object(client, "_get_client", new_callable=AsyncMock) as get_client:
            http = AsyncMock()
            http.request = AsyncMock(
                return_value=mock_response(
                    404,
                    {"error_code": "PRODUCT_NOT_FOUND", "message": "Product not found"},
                )
            )
            get_client.return_value = http

            result = await client.get_product("missing")

            assert result.success is False
            assert result.status_code == 404
            assert result.error.error_code == "PRODUCT_NOT_FOUND"
            assert result.error.message == "Product not found"

    @pytest.mark.asyncio
    async def test_internal_error_message_is_kept(self, client):
        """The raw ``error`` field of a 500 is used as the message."""
        with patch.object(client, "_get_client", new_callable=AsyncMock) as get_client:
            http = AsyncMock()
            http.request = AsyncMock(
                return_value=mock_response(500, {"error": "store unavailable"})
            )
            get_client.return_value = http

            result = await client.list_products()

            assert result.error.error_code == "UNKNOWN_ERROR"
            assert result.error.message == "store unavailable"

    @pytest.mark.asyncio
    async def test_non_json_error_body(self, client):
        """An error page that is not JSON still yields an APIError."""
        with patch.object(client, "_get_client", new_callable=AsyncMock) as get_client:
            http = AsyncMock()
            http.request = AsyncMock(return_value=mock_response(502, json_error=True))
            get_client.return_value = http

            result = await client.list_products()

            assert result.success is False
            assert result.error.status_code == 502

    @pytest.mark.asyncio
    async def test_invalid_success_body(self, client):
        """A 200 with an undecodable body is reported, not raised."""
        with patch.object(client, "_get_client", new_callable=AsyncMock) as get_client:
            http = AsyncMock()
            http.request = AsyncMock(return_value=mock_response(200, json_error=True))
            get_client.return_value = http

            result = await client.list_products()

            assert result.success is False
            assert result.error.error_code == "INVALID_RESPONSE"

    @pytest.mark.asyncio
    async def test_request_timeout(self, client):
        """Test request timeout handling."""
        with patch.object(client, "_get_client", new_callable=AsyncMock) as get_client:
            http = AsyncMock()
            http.request = AsyncMock(
                side_effect=httpx.TimeoutException("Connection timeout")
            )
            get_client.return_value = http

            result = await client.list_products()

            assert result.success is False
            assert result.error.error_code == "TIMEOUT"
            assert result.error.status_code == 504

    @pytest.mark.asyncio
    async def test_request_error(self, client):
        """Test request error handling."""
        with patch.object(client, "_get_client", new_callable=AsyncMock) as get_client:
            http = AsyncMock()
            http.request = AsyncMock(
                side_effect=httpx.ConnectError("Connection refused")
            )
            get_client.return_value = http

            result = await client.delete_product("p1")

            assert result.success is False
            assert result.error.error_code == "REQUEST_ERROR"

    @pytest.mark.asyncio
    async def test_close_client(self, client):
        """Test client cleanup."""
        http = AsyncMock()
        client._client = http

        await client.close()

        http.aclose.assert_called_once()
        assert client._client is None
