#!/usr/bin/env python3
"""Seed product catalog script.

Creates a small demo catalog on a running catalog API through the
dashboard client.

Usage:
    python scripts/seed_catalog.py --token <token>
    python scripts/seed_catalog.py --url http://localhost:3000/api --token <token>
"""

import argparse
import asyncio
from decimal import Decimal

from catalog_client.api_client import CatalogAPIClient
from catalog_client.catalog import CatalogClient

SAMPLE_PRODUCTS = [
    {
        "name": "Widget",
        "description": "A spec item for everyday use",
        "price": Decimal("10.00"),
        "images": ["https://picsum.photos/seed/widget/400/400"],
        "quantity": 25,
    },
    {
        "name": "Gadget",
        "description": "Compact and rechargeable",
        "price": Decimal("20.00"),
        "images": ["https://picsum.photos/seed/gadget/400/400"],
        "quantity": 8,
    },
    {
        "name": "Desk Lamp",
        "description": "LED lamp with adjustable arm",
        "price": Decimal("34.99"),
        "images": [],
        "quantity": None,
    },
    {
        "name": "Notebook",
        "description": "Dotted pages, hard cover",
        "price": Decimal("7.50"),
        "images": [
            "https://picsum.photos/seed/notebook-front/400/400",
            "https://picsum.photos/seed/notebook-back/400/400",
        ],
        "quantity": 120,
    },
]


async def main() -> None:
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="Seed the product catalog with sample products",
    )
    parser.add_argument(
        "--url",
        default="http://localhost:3000",
        help="Catalog API base URL (default: http://localhost:3000)",
    )
    parser.add_argument(
        "--token",
        required=True,
        help="Bearer token accepted by the API for writes",
    )
    parser.add_argument(
        "--clear",
        action="store_true",
        help="Delete all existing products before seeding",
    )

    args = parser.parse_args()

    print("=" * 60)
    print("Catalog Seeder")
    print("=" * 60)
    print(f"API: {args.url}")
    print()

    catalog = CatalogClient(CatalogAPIClient(base_url=args.url, token=args.token))
    try:
        loaded = await catalog.fetch_all()
        if not loaded.success:
            print(f"  ✗ Error: {loaded.error.message}")
            raise SystemExit(1)

        if args.clear and catalog.count:
            result = await catalog.bulk_delete(p.id for p in catalog.products)
            print(f"  ✓ Deleted: {len(result.deleted)} existing products")
            for outcome in result.failed:
                print(f"  ✗ Could not delete {outcome.product_id}: {outcome.error.message}")

        for product in SAMPLE_PRODUCTS:
            response = await catalog.create_product(**product)
            if response.success:
                print(f"  ✓ Created: {product['name']} ({response.data['id']})")
            else:
                print(f"  ✗ Error creating {product['name']}: {response.error.message}")

        print()
        print(f"Catalog now holds {catalog.count} products")
    finally:
        await catalog.close()

    print("=" * 60)
    print("Seeding complete!")
    print("=" * 60)


if __name__ == "__main__":
    asyncio.run(main())
