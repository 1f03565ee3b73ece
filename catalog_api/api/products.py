"""Product API endpoints.

Provides endpoints for the product resource:
- GET /products - list all products
- GET /products/{id} - product details
- POST /products - create a product
- PUT /products/{id} - replace name, description and price
- DELETE /products/{id} - delete a product
- POST /products/{id}/images - append image URLs
- DELETE /products/{id}/images - remove image URLs
- PATCH /products/{id}/quantity - set stock level

Write endpoints sit behind the auth gate middleware.
"""

from typing import Annotated, NoReturn

from fastapi import APIRouter, Depends, HTTPException, Request, status

from catalog_api.api.schemas import (
    ErrorResponse,
    ImagesRequest,
    MessageResponse,
    ProductCreateRequest,
    ProductSchema,
    ProductUpdateRequest,
    QuantityRequest,
)
from catalog_api.application.product_service import (
    ProductService,
    get_product_service,
)
from catalog_api.domain.entities import Product
from catalog_api.domain.exceptions import (
    CatalogError,
    InvalidInputError,
    ProductNotFoundError,
)

router = APIRouter(prefix="/products", tags=["Products"])


# ============================================================================
# Dependencies
# ============================================================================


def get_service(request: Request) -> ProductService:
    """Get product service with request ID."""
    request_id = getattr(request.state, "request_id", None)
    return get_product_service(request_id=request_id)


Service = Annotated[ProductService, Depends(get_service)]


# ============================================================================
# Helpers
# ============================================================================


def to_schema(product: Product) -> ProductSchema:
    """Convert a Product entity to its response schema."""
    return ProductSchema.model_validate(product)


def raise_http_error(error: CatalogError) -> NoReturn:
    """Translate a domain error into an HTTPException."""
    if isinstance(error, ProductNotFoundError):
        status_code = status.HTTP_404_NOT_FOUND
        error_code = "PRODUCT_NOT_FOUND"
    elif isinstance(error, InvalidInputError):
        status_code = status.HTTP_400_BAD_REQUEST
        error_code = "INVALID_INPUT"
    else:
        status_code = status.HTTP_400_BAD_REQUEST
        error_code = "CATALOG_ERROR"

    raise HTTPException(
        status_code=status_code,
        detail={
            "error_code": error_code,
            "message": error.message,
            "details": error.details,
        },
    )


NOT_FOUND = {404: {"model": ErrorResponse}}
WRITE_ERRORS = {401: {"model": ErrorResponse}, 404: {"model": ErrorResponse}}


# ============================================================================
# Read Endpoints
# ============================================================================


@router.get("", response_model=list[ProductSchema])
async def list_products(service: Service) -> list[ProductSchema]:
    """List every product.

    Returns:
        All products, unfiltered and unpaginated.
    """
    return [to_schema(p) for p in service.list_products()]


@router.get("/{product_id}", response_model=ProductSchema, responses=NOT_FOUND)
async def get_product(product_id: str, service: Service) -> ProductSchema:
    """Get product details by ID.

    Raises:
        HTTPException: If product not found.
    """
    try:
        return to_schema(service.get_product(product_id))
    except CatalogError as e:
        raise_http_error(e)


# ============================================================================
# Write Endpoints
# ============================================================================


@router.post(
    "",
    response_model=ProductSchema,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"model": ErrorResponse}, 401: {"model": ErrorResponse}},
)
async def create_product(
    request: ProductCreateRequest,
    service: Service,
) -> ProductSchema:
    """Create a product.

    Args:
        request: Name, description, price and optional images/quantity.

    Returns:
        The created product including its new ID.
    """
    try:
        product = service.create_product(
            name=request.name,
            description=request.description,
            price=request.price,
            images=request.images,
            quantity=request.quantity,
        )
    except CatalogError as e:
        raise_http_error(e)
    return to_schema(product)


@router.put("/{product_id}", response_model=ProductSchema, responses=WRITE_ERRORS)
async def update_product(
    product_id: str,
    request: ProductUpdateRequest,
    service: Service,
) -> ProductSchema:
    """Replace a product's name, description and price.

    Images and quantity are not touched, even if present in the body.
    """
    try:
        product = service.update_product(
            product_id,
            name=request.name,
            description=request.description,
            price=request.price,
        )
    except CatalogError as e:
        raise_http_error(e)
    return to_schema(product)


@router.delete("/{product_id}", response_model=MessageResponse, responses=WRITE_ERRORS)
async def delete_product(product_id: str, service: Service) -> MessageResponse:
    """Delete a product permanently."""
    try:
        service.delete_product(product_id)
    except CatalogError as e:
        raise_http_error(e)
    return MessageResponse(message="Product deleted")


@router.post(
    "/{product_id}/images",
    response_model=ProductSchema,
    responses=WRITE_ERRORS,
)
async def add_images(
    product_id: str,
    request: ImagesRequest,
    service: Service,
) -> ProductSchema:
    """Append image URLs to a product, preserving order and duplicates."""
    try:
        product = service.add_images(product_id, request.images)
    except CatalogError as e:
        raise_http_error(e)
    return to_schema(product)


@router.delete(
    "/{product_id}/images",
    response_model=ProductSchema,
    responses=WRITE_ERRORS,
)
async def remove_images(
    product_id: str,
    request: ImagesRequest,
    service: Service,
) -> ProductSchema:
    """Remove every occurrence of the given image URLs."""
    try:
        product = service.remove_images(product_id, request.images)
    except CatalogError as e:
        raise_http_error(e)
    return to_schema(product)


@router.patch(
    "/{product_id}/quantity",
    response_model=ProductSchema,
    responses={400: {"model": ErrorResponse}, **WRITE_ERRORS},
)
async def set_quantity(
    product_id: str,
    request: QuantityRequest,
    service: Service,
) -> ProductSchema:
    """Set a product's stock level.

    Raises:
        HTTPException: 400 if quantity is not a non-negative integer,
            404 if product not found.
    """
    try:
        product = service.set_quantity(product_id, request.quantity)
    except CatalogError as e:
        raise_http_error(e)
    return to_schema(product)
