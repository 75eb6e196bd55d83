#!/usr/bin/env python3
"""
Export the product catalog to a Shopify-importable CSV.

Products come from Supabase (credentials in .env), the bundled demo data,
or a local file (JSON list of store records, or a Shopify CSV).

Usage:
    # Export everything from Supabase
    python3 export_catalog.py

    # Only unpublished teas, custom file name
    python3 export_catalog.py --type Tea --published false --filename teas.csv

    # Check a JSON dump without writing anything
    python3 export_catalog.py --input products.json --validate-only

    # Demo data, print row/image counts
    python3 export_catalog.py --demo --stats
"""

import argparse
import json
import logging
import os
import sys
from pathlib import Path

# Add project root to path for imports
sys.path.insert(0, os.path.dirname(__file__))

from dotenv import load_dotenv

from catalog_admin.common import ConfigError, load_settings, require_env, setup_logging
from catalog_admin.models import Product
from catalog_admin.shopify import (
    CatalogExporter,
    EmptyInputError,
    FileDelivery,
    ShopifyCSVImporter,
    ValidationError,
)
from catalog_admin.store import InMemoryProductStore, SupabaseProductStore

load_dotenv(Path(__file__).parent / ".env")

logger = logging.getLogger("catalog_admin.export_catalog")


def load_from_file(path: str) -> list[Product]:
    """Read products from a JSON list of records or a Shopify CSV."""
    if path.lower().endswith(".csv"):
        return ShopifyCSVImporter().read_file(path)

    with open(path, "r", encoding="utf-8") as f:
        records = json.load(f)
    if not isinstance(records, list):
        raise ValueError(f"{path}: expected a JSON list of product records")
    return [Product.from_record(record) for record in records]


def load_products(args, settings: dict) -> list[Product]:
    filters = {"vendor": args.vendor, "type": args.type, "published": args.published}
    filters = {key: value for key, value in filters.items() if value is not None}

    if args.input:
        store = InMemoryProductStore(load_from_file(args.input))
    elif args.demo:
        store = InMemoryProductStore.with_demo_data()
    else:
        supabase = settings.get("supabase", {})
        store = SupabaseProductStore(
            url=require_env("SUPABASE_URL"),
            api_key=require_env("SUPABASE_SERVICE_ROLE_KEY"),
            table=supabase.get("table", SupabaseProductStore.DEFAULT_TABLE),
            timeout=supabase.get("timeout", 30),
        )

    return store.list_products(args.search or "", filters)


def main():
    parser = argparse.ArgumentParser(
        description="Export products to Shopify CSV format",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    source = parser.add_mutually_exclusive_group()
    source.add_argument("--input", "-i", help="JSON or CSV file to read products from")
    source.add_argument("--demo", action="store_true", help="Use the bundled demo catalog")

    parser.add_argument("--search", "-s", help="Match Title, Handle or Tags")
    parser.add_argument("--vendor", help="Only this vendor")
    parser.add_argument("--type", help="Only this product type")
    parser.add_argument("--published", choices=["true", "false"], help="Only published / unpublished")

    parser.add_argument("--output-dir", "-o", help="Directory for the CSV (default: from settings)")
    parser.add_argument("--filename", "-f", help="CSV file name (default: shopify-products-{date}.csv)")
    parser.add_argument("--stats", action="store_true", help="Print export statistics")
    parser.add_argument("--validate-only", action="store_true", help="Validate without writing")
    parser.add_argument("--verbose", "-v", action="store_true", help="Debug logging")
    parser.add_argument("--quiet", "-q", action="store_true", help="Warnings and errors only")

    args = parser.parse_args()
    setup_logging(verbose=args.verbose, quiet=args.quiet)

    settings = load_settings()
    output_dir = args.output_dir or settings.get("export", {}).get("output_dir", "output")
    exporter = CatalogExporter(FileDelivery(output_dir))

    try:
        products = load_products(args, settings)
    except (ConfigError, ValueError, OSError) as e:
        logger.error("Could not load products: %s", e)
        sys.exit(1)

    print(f"Loaded {len(products)} products")

    if args.stats:
        stats = exporter.compute_stats(products)
        print(f"  Products:       {stats.total_products}")
        print(f"  Variants:       {stats.total_variants}")
        print(f"  Images:         {stats.total_images}")
        print(f"  Estimated rows: {stats.estimated_rows} (including header)")

    if args.validate_only:
        validation = exporter.validate(products)
        for error in validation.errors:
            print(f"  ERROR   {error}")
        for warning in validation.warnings:
            print(f"  WARNING {warning}")
        print("Valid" if validation.is_valid else "Invalid")
        sys.exit(0 if validation.is_valid else 1)

    try:
        result = exporter.export(products, args.filename)
    except EmptyInputError as e:
        logger.error("%s", e)
        sys.exit(1)
    except ValidationError as e:
        logger.error("Export aborted, %d product(s) cannot be exported:", len(e.errors))
        for error in e.errors:
            logger.error("  %s", error)
        sys.exit(1)

    print(f"Exported {result.total_products} products ({result.total_rows} rows) to {result.path}")


if __name__ == "__main__":
    main()
