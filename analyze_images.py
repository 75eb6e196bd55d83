#!/usr/bin/env python3
"""
Create a draft product from photos using AI image analysis.

Local files are uploaded to Supabase Storage first; URLs are analyzed
directly. The draft is printed as JSON and, with --save, stored
unpublished for review.

Usage:
    python3 analyze_images.py https://example.com/front.jpg https://example.com/back.jpg
    python3 analyze_images.py photos/front.jpg photos/label.png --save
    python3 analyze_images.py photos/front.jpg --handle green-tea --save
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

from catalog_admin.ai import OpenAIVisionAnalyzer
from catalog_admin.common import ConfigError, load_settings, require_env, setup_logging
from catalog_admin.images import ImageFile, ImageUploadError, SupabaseImageStore
from catalog_admin.services import ProductCreationFlow
from catalog_admin.store import SupabaseProductStore

load_dotenv(Path(__file__).parent / ".env")

logger = logging.getLogger("catalog_admin.analyze_images")


def build_flow(settings: dict) -> ProductCreationFlow:
    """Wire the Supabase and OpenAI collaborators from settings and env."""
    supabase = settings.get("supabase", {})
    uploads = settings.get("uploads", {})
    openai = settings.get("openai", {})

    url = require_env("SUPABASE_URL")
    key = require_env("SUPABASE_SERVICE_ROLE_KEY")

    store = SupabaseProductStore(
        url=url,
        api_key=key,
        table=supabase.get("table", SupabaseProductStore.DEFAULT_TABLE),
        timeout=supabase.get("timeout", 30),
    )
    image_store = SupabaseImageStore(
        url=url,
        api_key=key,
        bucket=supabase.get("bucket", SupabaseImageStore.DEFAULT_BUCKET),
        allowed_types=uploads.get("allowed_types"),
        max_size=uploads.get("max_size_bytes", 5 * 1024 * 1024),
        prefix=supabase.get("upload_prefix", "products"),
    )
    analyzer = OpenAIVisionAnalyzer(
        api_key=require_env("OPENAI_API_KEY"),
        model=openai.get("model", OpenAIVisionAnalyzer.DEFAULT_MODEL),
        api_url=openai.get("api_url", OpenAIVisionAnalyzer.API_URL),
        timeout=openai.get("timeout", 90),
    )
    return ProductCreationFlow(store, image_store, analyzer)


def main():
    parser = argparse.ArgumentParser(description="Draft a product from photos with AI analysis")
    parser.add_argument("images", nargs="+", help="Image URLs or local image files")
    parser.add_argument("--handle", help="Handle used to name uploaded files")
    parser.add_argument("--save", action="store_true", help="Store the draft in Supabase")
    parser.add_argument("--verbose", "-v", action="store_true", help="Debug logging")

    args = parser.parse_args()
    setup_logging(verbose=args.verbose)

    try:
        flow = build_flow(load_settings())
    except ConfigError as e:
        logger.error("%s", e)
        sys.exit(1)

    urls = [image for image in args.images if image.startswith(("http://", "https://"))]
    files = [ImageFile.from_path(image) for image in args.images if image not in urls]

    try:
        uploaded = flow.upload_images(files, args.handle)
    except ImageUploadError as e:
        logger.error("%s", e)
        sys.exit(1)

    analysis = flow.analyze(urls + [image.url for image in uploaded])
    draft = analysis.to_product(
        urls + [image.url for image in uploaded],
        image_alt_text=uploaded[0].alt_text if uploaded else None,
    )

    print(json.dumps({"analysis": analysis.to_dict(), "product": draft.to_record()},
                     indent=2, ensure_ascii=False, default=str))

    if args.save:
        result = flow.store.create_product(draft)
        if not result.success:
            logger.error("Could not save draft: %s", result.error)
            sys.exit(1)
        print(f"Saved draft {draft.handle}")

    if analysis.failed:
        sys.exit(2)


if __name__ == "__main__":
    main()
