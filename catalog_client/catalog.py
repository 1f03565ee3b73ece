"""Catalog client.

Holds the dashboard's local snapshot of the catalog and orchestrates
remote calls against it:
- ``fetch_all`` replaces the snapshot wholesale; on failure the old
  snapshot is kept.
- Writes never touch the snapshot directly. A confirmed write
  triggers ``fetch_all``, so the snapshot trails the server by one
  round trip.
- ``bulk_delete`` deletes one id at a time, in order, with no rollback.
- Search and analytics are recomputed from the snapshot on each call.
"""

from collections.abc import Awaitable, Callable, Iterable
from dataclasses import dataclass, field
from datetime import datetime, timezone
from decimal import ROUND_HALF_UP, Decimal
from enum import Enum
from typing import Any

import structlog
from pydantic import BaseModel, Field, TypeAdapter, ValidationError

from catalog_client.api_client import APIError, APIResponse, CatalogAPIClient

logger = structlog.get_logger()

TWO_PLACES = Decimal("0.01")


# ============================================================================
# Models
# ============================================================================


class CatalogProduct(BaseModel):
    """A product as seen by the client."""

    id: str
    name: str
    description: str = ""
    price: Decimal = Field(..., ge=0)
    images: list[str] = Field(default_factory=list)
    quantity: int | None = None


_catalog_adapter = TypeAdapter(list[CatalogProduct])


class ActivityKind(str, Enum):
    """Kind of line in the activity feed."""

    SYSTEM = "system"
    COMMAND = "command"
    SUCCESS = "success"
    ERROR = "error"


@dataclass
class ActivityEntry:
    """One line of the activity feed."""

    kind: ActivityKind
    message: str
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


@dataclass
class DeleteOutcome:
    """Result of deleting one product during a bulk delete."""

    product_id: str
    succeeded: bool
    error: APIError | None = None


@dataclass
class BulkDeleteResult:
    """Aggregate result of a bulk delete.

    Deletions that succeeded stay in effect even when a later one
    failed; check ``failed`` rather than assuming all-or-nothing.
    """

    outcomes: list[DeleteOutcome] = field(default_factory=list)

    @property
    def requested(self) -> int:
        return len(self.outcomes)

    @property
    def deleted(self) -> list[str]:
        return [o.product_id for o in self.outcomes if o.succeeded]

    @property
    def failed(self) -> list[DeleteOutcome]:
        return [o for o in self.outcomes if not o.succeeded]

    @property
    def all_succeeded(self) -> bool:
        return not self.failed


# ============================================================================
# Helpers
# ============================================================================


def parse_image_list(raw: str | None) -> list[str]:
    """Split comma-separated image URLs, dropping blanks."""
    if not raw:
        return []
    return [url.strip() for url in raw.split(",") if url.strip()]


def format_price(amount: Decimal | int | float) -> str:
    """Format a price with two decimals."""
    return str(Decimal(str(amount)).quantize(TWO_PLACES, rounding=ROUND_HALF_UP))


def _not_authenticated() -> APIResponse:
    return APIResponse(
        success=False,
        status_code=401,
        error=APIError(
            error_code="NOT_AUTHENTICATED",
            message="Authentication required",
            status_code=401,
        ),
    )


def _describe(response: APIResponse) -> str:
    if response.error:
        return f"[{response.error.error_code}] {response.error.message}"
    return "Unknown error"


# ============================================================================
# Catalog Client
# ============================================================================


class CatalogClient:
    """Local catalog view synchronized with the catalog API.

    Every remote failure is caught, logged and recorded in the
    activity feed; methods return the ``APIResponse`` instead of
    raising.
    """

    def __init__(self, api: CatalogAPIClient) -> None:
        """Initialize catalog client.

        Args:
            api: HTTP client for the catalog API.
        """
        self.api = api
        self._products: list[CatalogProduct] = []
        self._selected: dict[str, None] = {}
        self._activity: list[ActivityEntry] = []
        self._busy = False

    # ========================================================================
    # State
    # ========================================================================

    @property
    def products(self) -> list[CatalogProduct]:
        """Snapshot of the cached catalog."""
        return list(self._products)

    @property
    def activity(self) -> list[ActivityEntry]:
        """Activity feed, oldest first."""
        return list(self._activity)

    @property
    def is_busy(self) -> bool:
        """True while a single-item write is in flight."""
        return self._busy

    @property
    def is_authenticated(self) -> bool:
        return bool(self.api.token)

    def authenticate(self, token: str) -> None:
        """Use ``token`` for subsequent writes."""
        self.api.token = token
        self._log(ActivityKind.SUCCESS, "Session authenticated")

    def logout(self) -> None:
        """Forget the token and the current selection."""
        self.api.token = None
        self._selected.clear()
        self._log(ActivityKind.SYSTEM, "Session closed")

    def clear_activity(self) -> None:
        self._activity.clear()

    def _log(self, kind: ActivityKind, message: str) -> None:
        self._activity.append(ActivityEntry(kind=kind, message=message))

    async def close(self) -> None:
        await self.api.close()

    # ========================================================================
    # Sync
    # ========================================================================

    async def fetch_all(self) -> APIResponse:
        """Replace the cache with the server's full catalog.

        On a transport error, error status or unparseable body the cache
        is left untouched and the failed response is returned.
        """
        response = await self.api.list_products()

        if not response.success:
            logger.warning("Catalog fetch failed", error=_describe(response))
            self._log(ActivityKind.ERROR, "Failed to load product catalog")
            return response

        try:
            products = _catalog_adapter.validate_python(response.data)
        except ValidationError as e:
            logger.error("Catalog response did not parse", error=str(e))
            self._log(ActivityKind.ERROR, "Failed to load product catalog")
            return APIResponse(
                success=False,
                status_code=response.status_code,
                error=APIError(
                    error_code="INVALID_RESPONSE",
                    message="Catalog response did not match the product format",
                    status_code=502,
                    details={"errors": e.error_count()},
                ),
            )

        self._products = products
        self._log(ActivityKind.SUCCESS, f"Loaded {len(products)} products from catalog")
        logger.debug("Catalog refreshed", count=len(products))
        return response

    async def get_product(self, product_id: str) -> APIResponse:
        """Fetch one product from the server. The cache is not touched."""
        response = await self.api.get_product(product_id)
        if not response.success:
            self._log(ActivityKind.ERROR, f"Product {product_id}: {_describe(response)}")
        return response

    # ========================================================================
    # Derived views
    # ========================================================================

    def search(self, term: str) -> list[CatalogProduct]:
        """Case-insensitive substring match on name or description.

        An empty term returns the whole cache.
        """
        needle = (term or "").lower()
        if not needle:
            return list(self._products)
        return [
            p
            for p in self._products
            if needle in p.name.lower() or needle in p.description.lower()
        ]

    @property
    def count(self) -> int:
        """Number of cached products."""
        return len(self._products)

    @property
    def average_price(self) -> Decimal:
        """Mean price over the cache, rounded to cents. 0.00 when empty."""
        if not self._products:
            return Decimal("0.00")
        total = sum((p.price for p in self._products), Decimal("0"))
        return (total / len(self._products)).quantize(TWO_PLACES, rounding=ROUND_HALF_UP)

    # ========================================================================
    # Writes
    # ========================================================================

    async def _write(
        self,
        command: str,
        call: Callable[[], Awaitable[APIResponse]],
        success_message: str,
        failure_message: str,
    ) -> APIResponse:
        """Run a write and resync on success.

        The returned response is the write's own, even if the resync
        afterwards fails.
        """
        if not self.is_authenticated:
            self._log(ActivityKind.ERROR, f"{command}: authentication required")
            return _not_authenticated()

        self._log(ActivityKind.COMMAND, command)
        response = await call()

        if not response.success:
            logger.warning(
                "Catalog write failed",
                command=command,
                error=_describe(response),
            )
            self._log(ActivityKind.ERROR, f"{failure_message}: {_describe(response)}")
            return response

        self._log(ActivityKind.SUCCESS, success_message)
        await self.fetch_all()
        return response

    async def _guarded_write(self, *args: Any) -> APIResponse:
        self._busy = True
        try:
            return await self._write(*args)
        finally:
            self._busy = False

    async def create_product(
        self,
        name: str,
        description: str,
        price: Decimal | int | float,
        images: list[str] | None = None,
        quantity: int | None = None,
    ) -> APIResponse:
        """Create a product, then resync."""
        return await self._guarded_write(
            f'catalog --add-product --name="{name}"',
            lambda: self.api.create_product(
                name=name,
                description=description,
                price=price,
                images=images,
                quantity=quantity,
            ),
            f'Product "{name}" added to catalog',
            "Failed to add product",
        )

    async def update_product(
        self,
        product_id: str,
        name: str,
        description: str | None,
        price: Decimal | int | float,
    ) -> APIResponse:
        """Update name, description and price, then resync."""
        return await self._guarded_write(
            f"catalog --update --id={product_id}",
            lambda: self.api.update_product(
                product_id,
                name=name,
                description=description,
                price=price,
            ),
            f"Product {product_id} updated",
            "Failed to update product",
        )

    async def delete_product(self, product_id: str) -> APIResponse:
        """Delete a product, then resync."""
        return await self._guarded_write(
            f"catalog --delete --id={product_id}",
            lambda: self.api.delete_product(product_id),
            f"Product {product_id} deleted",
            "Failed to delete product",
        )

    async def add_images(self, product_id: str, images: list[str]) -> APIResponse:
        """Append images to a product, then resync."""
        return await self._guarded_write(
            f"catalog --add-images --id={product_id} --count={len(images)}",
            lambda: self.api.add_images(product_id, images),
            f"Added {len(images)} image(s) to {product_id}",
            "Failed to add images",
        )

    async def remove_images(self, product_id: str, images: list[str]) -> APIResponse:
        """Remove images from a product, then resync."""
        return await self._guarded_write(
            f"catalog --remove-images --id={product_id} --count={len(images)}",
            lambda: self.api.remove_images(product_id, images),
            f"Removed image(s) from {product_id}",
            "Failed to remove images",
        )

    async def set_quantity(self, product_id: str, quantity: Any) -> APIResponse:
        """Set a product's stock level, then resync."""
        return await self._guarded_write(
            f"catalog --set-quantity --id={product_id} --quantity={quantity}",
            lambda: self.api.set_quantity(product_id, quantity),
            f"Quantity of {product_id} set to {quantity}",
            "Failed to set quantity",
        )

    # ========================================================================
    # Bulk delete
    # ========================================================================

    async def bulk_delete(self, product_ids: Iterable[str]) -> BulkDeleteResult:
        """Delete products one after another.

        Each request is awaited before the next starts. A failure does
        not stop the batch and does not undo earlier deletions.
        """
        ids = list(product_ids)
        result = BulkDeleteResult()

        if not ids:
            return result
        if not self.is_authenticated:
            self._log(ActivityKind.ERROR, "catalog --bulk-delete: authentication required")
            denied = _not_authenticated().error
            result.outcomes = [DeleteOutcome(pid, False, denied) for pid in ids]
            return result

        self._log(ActivityKind.COMMAND, f"catalog --bulk-delete --count={len(ids)}")

        for product_id in ids:
            response = await self.delete_product(product_id)
            result.outcomes.append(
                DeleteOutcome(
                    product_id=product_id,
                    succeeded=response.success,
                    error=response.error,
                )
            )

        if result.all_succeeded:
            self._log(
                ActivityKind.SUCCESS,
                f"Bulk delete completed: {len(result.deleted)} products removed",
            )
        else:
            logger.warning(
                "Bulk delete partially failed",
                requested=result.requested,
                deleted=len(result.deleted),
                failed=[o.product_id for o in result.failed],
            )
            self._log(
                ActivityKind.ERROR,
                f"Bulk delete completed with failures: "
                f"{len(result.deleted)} of {result.requested} removed",
            )

        return result

    # ========================================================================
    # Selection
    # ========================================================================

    @property
    def selected_ids(self) -> list[str]:
        """Selected product ids in selection order."""
        return list(self._selected)

    def toggle_selection(self, product_id: str) -> bool:
        """Flip selection of one product. Returns the new state."""
        if product_id in self._selected:
            del self._selected[product_id]
            self._log(ActivityKind.COMMAND, f"select --remove --id={product_id}")
            return False
        self._selected[product_id] = None
        self._log(ActivityKind.COMMAND, f"select --add --id={product_id}")
        return True

    def clear_selection(self) -> None:
        self._selected.clear()

    async def bulk_delete_selected(self) -> BulkDeleteResult:
        """Bulk delete the current selection, then clear it."""
        result = await self.bulk_delete(self.selected_ids)
        if self.is_authenticated:
            self.clear_selection()
        return result
