"""Catalog API Client.

Thin HTTP client for communicating with the catalog REST API.
This module handles authentication, error handling, and response parsing.
Failures are returned as ``APIResponse`` values, never raised.
"""

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any

import httpx
import structlog

logger = structlog.get_logger()


@dataclass
class APIError:
    """Represents an API error response."""

    error_code: str
    message: str
    status_code: int
    details: Any = field(default_factory=dict)


@dataclass
class APIResponse:
    """Represents an API response."""

    success: bool
    data: dict[str, Any] | list[Any] | None = None
    error: APIError | None = None
    status_code: int | None = None


class CatalogAPIClient:
    """HTTP client for the catalog REST API.

    Read endpoints are called anonymously. Write endpoints carry the
    bearer token when one is set.
    """

    def __init__(
        self,
        base_url: str,
        token: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize the API client.

        Args:
            base_url: Catalog API base URL, including any mount prefix.
            token: Bearer token for write endpoints.
            timeout: Request timeout in seconds; None waits indefinitely.
            transport: Optional transport (e.g. ``httpx.ASGITransport``).
        """
        self.base_url = base_url.rstrip("/")
        self.token = token
        self.timeout = timeout
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create the HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                timeout=self.timeout,
                transport=self._transport,
                headers={
                    "Content-Type": "application/json",
                    "Accept": "application/json",
                },
            )
        return self._client

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def _request(
        self,
        method: str,
        path: str,
        json: dict[str, Any] | None = None,
        requires_auth: bool = False,
    ) -> APIResponse:
        """Make an API request.

        Args:
            method: HTTP method.
            path: API endpoint path.
            json: Request body as JSON.
            requires_auth: Attach the bearer token if one is set.

        Returns:
            APIResponse with success status and data or error.
        """
        client = await self._get_client()

        headers = {}
        if requires_auth and self.token:
            headers["Authorization"] = f"Bearer {self.token}"

        try:
            logger.debug(
                "Making API request",
                method=method,
                path=path,
                has_body=json is not None,
            )

            response = await client.request(
                method=method,
                url=path,
                json=json,
                headers=headers,
            )

            if response.status_code >= 400:
                error_data = _safe_json(response)
                if not isinstance(error_data, dict):
                    error_data = {}
                logger.warning(
                    "API request rejected",
                    method=method,
                    path=path,
                    status_code=response.status_code,
                    error_code=error_data.get("error_code"),
                )
                return APIResponse(
                    success=False,
                    status_code=response.status_code,
                    error=APIError(
                        error_code=error_data.get("error_code", "UNKNOWN_ERROR"),
                        message=error_data.get("message")
                        or error_data.get("error")
                        or "Unknown error",
                        status_code=response.status_code,
                        details=error_data.get("details", {}),
                    ),
                )

            if response.status_code == 204:
                return APIResponse(success=True, status_code=204)

            return APIResponse(
                success=True,
                data=response.json(),
                status_code=response.status_code,
            )

        except httpx.TimeoutException as e:
            logger.error("API request timeout", path=path, error=str(e))
            return APIResponse(
                success=False,
                error=APIError(
                    error_code="TIMEOUT",
                    message=f"Request timed out: {path}",
                    status_code=504,
                ),
            )
        except httpx.RequestError as e:
            logger.error("API request failed", path=path, error=str(e))
            return APIResponse(
                success=False,
                error=APIError(
                    error_code="REQUEST_ERROR",
                    message=f"Request failed: {str(e)}",
                    status_code=503,
                ),
            )
        except ValueError as e:
            logger.error("Undecodable API response", path=path, error=str(e))
            return APIResponse(
                success=False,
                error=APIError(
                    error_code="INVALID_RESPONSE",
                    message=f"Invalid response body: {str(e)}",
                    status_code=502,
                ),
            )

    # =========================================================================
    # Read Endpoints
    # =========================================================================

    async def list_products(self) -> APIResponse:
        """Get the full catalog.

        Returns:
            APIResponse with a list of product dicts.
        """
        return await self._request(method="GET", path="/products")

    async def get_product(self, product_id: str) -> APIResponse:
        """Get a product by ID.

        Args:
            product_id: Product identifier.

        Returns:
            APIResponse with product data.
        """
        return await self._request(method="GET", path=f"/products/{product_id}")

    # =========================================================================
    # Write Endpoints
    # =========================================================================

    async def create_product(
        self,
        name: str,
        description: str,
        price: Decimal | int | float,
        images: list[str] | None = None,
        quantity: int | None = None,
    ) -> APIResponse:
        """Create a product.

        Returns:
            APIResponse with the created product.
        """
        body: dict[str, Any] = {
            "name": name,
            "description": description,
            "price": _price_to_json(price),
            "images": list(images or []),
        }
        if quantity is not None:
            body["quantity"] = quantity

        return await self._request(
            method="POST",
            path="/products",
            json=body,
            requires_auth=True,
        )

    async def update_product(
        self,
        product_id: str,
        name: str,
        description: str | None,
        price: Decimal | int | float,
    ) -> APIResponse:
        """Replace a product's name, description and price.

        A description of None is left out of the body, so the server
        keeps the stored one.

        Returns:
            APIResponse with the updated product.
        """
        body: dict[str, Any] = {"name": name, "price": _price_to_json(price)}
        if description is not None:
            body["description"] = description

        return await self._request(
            method="PUT",
            path=f"/products/{product_id}",
            json=body,
            requires_auth=True,
        )

    async def delete_product(self, product_id: str) -> APIResponse:
        """Delete a product.

        Returns:
            APIResponse with a confirmation message.
        """
        return await self._request(
            method="DELETE",
            path=f"/products/{product_id}",
            requires_auth=True,
        )

    async def add_images(self, product_id: str, images: list[str]) -> APIResponse:
        """Append image URLs to a product.

        Returns:
            APIResponse with the updated product.
        """
        return await self._request(
            method="POST",
            path=f"/products/{product_id}/images",
            json={"images": list(images)},
            requires_auth=True,
        )

    async def remove_images(self, product_id: str, images: list[str]) -> APIResponse:
        """Remove image URLs from a product.

        Returns:
            APIResponse with the updated product.
        """
        return await self._request(
            method="DELETE",
            path=f"/products/{product_id}/images",
            json={"images": list(images)},
            requires_auth=True,
        )

    async def set_quantity(self, product_id: str, quantity: Any) -> APIResponse:
        """Set a product's stock level.

        Returns:
            APIResponse with the updated product.
        """
        return await self._request(
            method="PATCH",
            path=f"/products/{product_id}/quantity",
            json={"quantity": quantity},
            requires_auth=True,
        )


def _price_to_json(price: Decimal | int | float) -> int | float:
    if isinstance(price, Decimal):
        return float(price)
    return price


def _safe_json(response: httpx.Response) -> Any:
    try:
        return response.json()
    except ValueError:
        return {"message": response.text or response.reason_phrase}
