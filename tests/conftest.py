"""Shared test fixtures."""

import csv
import io
import json
from pathlib import Path

import pytest

from catalog_admin.models import Product
from catalog_admin.shopify import CatalogExporter


class RecordingDelivery:
    """Delivery double that keeps what it was asked to write."""

    def __init__(self):
        self.calls = []

    def deliver(self, csv_content, filename):
        self.calls.append((csv_content, filename))
        return Path(filename)


def _parse_rows(csv_text):
    return list(csv.DictReader(io.StringIO(csv_text, newline='')))


@pytest.fixture
def parse_rows():
    """Parse exporter output into row dictionaries."""
    return _parse_rows


@pytest.fixture
def delivery():
    return RecordingDelivery()


@pytest.fixture
def exporter(delivery):
    return CatalogExporter(delivery)


@pytest.fixture
def minimal_product():
    """Create a minimal product with only identity fields."""
    return Product(
        title="Test Product 500mg",
        handle="test-product-500mg",
        vendor="TestBrand",
    )


@pytest.fixture
def full_product():
    """Create a fully populated product with three images."""
    return Product(
        handle="omega-3-fish-oil",
        title="Omega-3 Fish Oil Softgels",
        body_html="<p>High strength fish oil.</p>",
        vendor="GNC",
        product_type="Supplement",
        product_category="Health & Beauty > Health Care > Vitamins & Supplements",
        tags='"Omega-3", "Heart Health"',
        published=True,
        status="active",
        sku="GNC-OMEGA-1000",
        grams="250",
        inventory_qty=60,
        price="34.99",
        compare_at_price="39.99",
        image_urls=json.dumps([
            "https://cdn.example.com/omega-front.jpg",
            "https://cdn.example.com/omega-back.jpg",
            "https://cdn.example.com/omega-label.jpg",
        ]),
        image_alt_text="Omega-3 bottle",
        seo_title="Omega-3 Fish Oil | GNC",
        seo_description="Supports heart health.",
        benefits="Heart health, Brain function",
        detailed_ingredients="Fish oil 1000mg, Gelatin",
        certifications="GMP",
        age_group="Adult",
        dietary_preferences="Gluten-Free",
        flavor="Lemon",
        how_to_use="Take one softgel daily",
    )


@pytest.fixture
def green_tea_product():
    """Two images, explicitly unpublished, no handle."""
    return Product(
        title="Green Tea",
        vendor="Harney",
        image_urls='["a.jpg","b.jpg"]',
        published=False,
    )


@pytest.fixture
def store_records():
    """Store rows keyed by column names."""
    return [
        {
            "id": 1,
            "Handle": "organic-green-tea",
            "Title": "Organic Green Tea Blend",
            "Vendor": "Harney & Sons",
            "Type": "Tea",
            "Variant Price": 19.99,
            "Published": True,
            "Tags": '"Tea", "Organic"',
            "Image Src": "https://cdn.example.com/tea-1.jpg",
            "Image Position": 1,
            "created_at": "2025-01-02T10:00:00+00:00",
        },
        {
            "id": 2,
            "Handle": "organic-green-tea",
            "Title": "Organic Green Tea Blend",
            "Vendor": "Harney & Sons",
            "Type": "Tea",
            "Image Src": "https://cdn.example.com/tea-2.jpg",
            "Image Position": 2,
            "created_at": "2025-01-02T10:00:00+00:00",
        },
        {
            "id": 3,
            "Handle": "chamomile-tea",
            "Title": "Chamomile Relaxation Tea",
            "Vendor": "Harney & Sons",
            "Type": "Tea",
            "Published": False,
            "AI Benefits": "Relaxation",
            "created_at": "2025-01-01T10:00:00+00:00",
        },
    ]
