"""Pydantic schemas for the catalog API.

Defines request/response models for products and error payloads.
"""

from decimal import Decimal
from typing import Annotated, Any

from pydantic import BaseModel, ConfigDict, Field, PlainSerializer

# Prices travel as JSON numbers, not strings
JsonDecimal = Annotated[
    Decimal,
    PlainSerializer(float, return_type=float, when_used="json"),
]


# ============================================================================
# Product Schemas
# ============================================================================


class ProductSchema(BaseModel):
    """Product details."""

    model_config = ConfigDict(from_attributes=True)

    id: str = Field(..., description="Product ID")
    name: str = Field(..., description="Product name")
    description: str = Field(default="", description="Product description")
    price: JsonDecimal = Field(..., description="Product price")
    images: list[str] = Field(default_factory=list, description="Image URLs in order")
    quantity: int | None = Field(None, description="Stock level, null when untracked")


class ProductCreateRequest(BaseModel):
    """Request to create a product."""

    name: str = Field(..., min_length=1, description="Product name")
    description: str = Field(default="", description="Product description")
    price: Decimal = Field(..., ge=0, description="Product price")
    images: list[str] = Field(default_factory=list, description="Initial image URLs")
    quantity: int | None = Field(None, description="Initial stock level")


class ProductUpdateRequest(BaseModel):
    """Request to replace a product's name, description and price.

    Any other keys in the body (images, quantity) are ignored.
    """

    model_config = ConfigDict(extra="ignore")

    name: str = Field(..., min_length=1, description="Product name")
    description: str | None = Field(
        default=None,
        description="Product description; left unchanged when omitted",
    )
    price: Decimal = Field(..., ge=0, description="Product price")


class ImagesRequest(BaseModel):
    """Image URLs to add to or remove from a product."""

    images: list[str] = Field(..., description="Image URLs")


class QuantityRequest(BaseModel):
    """Quantity update.

    The value is left untyped here so the service can report a
    non-integer as invalid input.
    """

    quantity: Any = Field(None, description="New stock level (integer >= 0)")


class MessageResponse(BaseModel):
    """Plain acknowledgement."""

    message: str


# ============================================================================
# Error Schemas
# ============================================================================


class ErrorResponse(BaseModel):
    """Standard error response."""

    error_code: str = Field(..., description="Machine-readable error code")
    message: str = Field(..., description="Human-readable message")
    details: Any = Field(default_factory=list, description="Additional context")
    request_id: str | None = Field(None, description="Request correlation ID")
