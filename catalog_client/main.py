"""Catalog dashboard command line.

Non-visual front end over CatalogClient. Every command loads the
catalog first, so reads and analytics reflect the server's current
state, and writes print the resynchronized result.

Commands:
    list                          show the catalog
    search TERM                   filter by name/description
    show ID                       one product from the server
    stats                         product count and average price
    create NAME PRICE [...]       add a product
    update ID NAME PRICE [...]    replace name/description/price
    delete ID                     remove a product
    bulk-delete ID [ID ...]       remove several products, one at a time
    add-images ID URLS            append comma-separated image URLs
    remove-images ID URLS         remove comma-separated image URLs
    set-quantity ID N             set stock level
"""

import argparse
import asyncio
import json
import logging
import sys
from decimal import Decimal, InvalidOperation
from typing import Any

import structlog
from pydantic import Field
from pydantic_settings import BaseSettings

from catalog_client.api_client import APIResponse, CatalogAPIClient
from catalog_client.catalog import (
    CatalogClient,
    CatalogProduct,
    format_price,
    parse_image_list,
)


# ============================================================================
# Configuration
# ============================================================================


class Settings(BaseSettings):
    """Dashboard settings."""

    catalog_api_url: str = Field(
        default="http://localhost:3000",
        description="Catalog API base URL",
    )
    catalog_api_token: str | None = Field(
        default=None,
        description="Bearer token for write commands",
    )
    log_level: str = Field(
        default="WARNING",
        description="Logging level",
    )

    model_config = {
        "env_file": ".env",
        "extra": "ignore",
    }


def configure_logging(level: str) -> None:
    """Send structured logs to stderr so stdout stays parseable."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.WARNING),
        format="%(message)s",
        stream=sys.stderr,
    )
    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.JSONRenderer(),
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )


# ============================================================================
# Argument parsing
# ============================================================================


def _price(value: str) -> Decimal:
    try:
        price = Decimal(value)
    except InvalidOperation:
        raise argparse.ArgumentTypeError(f"invalid price: {value!r}")
    if price < 0:
        raise argparse.ArgumentTypeError("price must not be negative")
    return price


def build_parser() -> argparse.ArgumentParser:
    """Build the command-line parser."""
    parser = argparse.ArgumentParser(
        prog="catalog-dashboard",
        description="Manage the product catalog",
    )
    parser.add_argument("--url", help="Catalog API base URL")
    parser.add_argument("--token", help="Bearer token for write commands")

    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("list", help="Show the catalog")

    p = sub.add_parser("search", help="Filter by name or description")
    p.add_argument("term")

    p = sub.add_parser("show", help="Show one product")
    p.add_argument("id")

    sub.add_parser("stats", help="Product count and average price")

    p = sub.add_parser("create", help="Add a product")
    p.add_argument("name")
    p.add_argument("price", type=_price)
    p.add_argument("--description", default="")
    p.add_argument("--images", default="", help="Comma-separated image URLs")
    p.add_argument("--quantity", type=int)

    p = sub.add_parser("update", help="Replace name, description and price")
    p.add_argument("id")
    p.add_argument("name")
    p.add_argument("price", type=_price)
    p.add_argument("--description", help="Left unchanged when omitted")

    p = sub.add_parser("delete", help="Remove a product")
    p.add_argument("id")

    p = sub.add_parser("bulk-delete", help="Remove several products in order")
    p.add_argument("ids", nargs="+")

    p = sub.add_parser("add-images", help="Append image URLs")
    p.add_argument("id")
    p.add_argument("images", help="Comma-separated image URLs")

    p = sub.add_parser("remove-images", help="Remove image URLs")
    p.add_argument("id")
    p.add_argument("images", help="Comma-separated image URLs")

    p = sub.add_parser("set-quantity", help="Set stock level")
    p.add_argument("id")
    p.add_argument("quantity", type=int)

    return parser


# ============================================================================
# Output
# ============================================================================


def product_to_dict(product: CatalogProduct) -> dict[str, Any]:
    data = product.model_dump()
    data["price"] = format_price(product.price)
    return data


def emit(data: Any) -> None:
    print(json.dumps(data, indent=2, default=str))


def report_failure(response: APIResponse) -> int:
    error = response.error
    if error:
        print(f"Error [{error.error_code}]: {error.message}", file=sys.stderr)
    else:
        print("Unknown error occurred", file=sys.stderr)
    return 1


# ============================================================================
# Commands
# ============================================================================


async def run_command(args: argparse.Namespace, catalog: CatalogClient) -> int:
    """Execute one parsed command. Returns the process exit status."""
    command = args.command

    if command == "show":
        response = await catalog.get_product(args.id)
        if not response.success:
            return report_failure(response)
        emit(response.data)
        return 0

    loaded = await catalog.fetch_all()
    if not loaded.success:
        return report_failure(loaded)

    if command == "list":
        emit([product_to_dict(p) for p in catalog.products])
        return 0

    if command == "search":
        emit([product_to_dict(p) for p in catalog.search(args.term)])
        return 0

    if command == "stats":
        emit(
            {
                "total_products": catalog.count,
                "average_price": format_price(catalog.average_price),
            }
        )
        return 0

    if command == "bulk-delete":
        result = await catalog.bulk_delete(args.ids)
        emit(
            {
                "requested": result.requested,
                "deleted": result.deleted,
                "failed": [
                    {
                        "id": o.product_id,
                        "error": o.error.message if o.error else None,
                    }
                    for o in result.failed
                ],
            }
        )
        return 0 if result.all_succeeded else 1

    if command == "create":
        response = await catalog.create_product(
            name=args.name,
            description=args.description,
            price=args.price,
            images=parse_image_list(args.images),
            quantity=args.quantity,
        )
    elif command == "update":
        response = await catalog.update_product(
            args.id,
            name=args.name,
            description=args.description,
            price=args.price,
        )
    elif command == "delete":
        response = await catalog.delete_product(args.id)
    elif command == "add-images":
        response = await catalog.add_images(args.id, parse_image_list(args.images))
    elif command == "remove-images":
        response = await catalog.remove_images(args.id, parse_image_list(args.images))
    elif command == "set-quantity":
        response = await catalog.set_quantity(args.id, args.quantity)
    else:
        raise ValueError(f"Unknown command: {command}")

    if not response.success:
        return report_failure(response)
    emit(response.data)
    return 0


async def _main(argv: list[str] | None) -> int:
    args = build_parser().parse_args(argv)
    settings = Settings()
    configure_logging(settings.log_level)

    api = CatalogAPIClient(
        base_url=args.url or settings.catalog_api_url,
        token=args.token or settings.catalog_api_token,
    )
    catalog = CatalogClient(api)
    try:
        return await run_command(args, catalog)
    finally:
        await catalog.close()


def main(argv: list[str] | None = None) -> None:
    """Console entry point."""
    sys.exit(asyncio.run(_main(argv)))


if __name__ == "__main__":
    main()
