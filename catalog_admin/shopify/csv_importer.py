"""
Shopify CSV Importer

Reads a Shopify product CSV back into Product records. Rows sharing a
Handle are grouped: the first row carries the product fields and every row
contributes its Image Src, in order, to the product's image list.
"""

import json
import logging
from pathlib import Path
from typing import Dict, List

from ..common.csv_utils import parse_csv_text
from ..models import Product
from .csv_exporter import SHOPIFY_COLUMNS
from .errors import CSVFormatError

logger = logging.getLogger(__name__)

# CSV column -> Product attribute for columns that map back onto the record.
# Fixed-vocabulary columns (inventory policy, gift card, ...) are dropped.
IMPORT_FIELDS: Dict[str, str] = {
    'Title': 'title',
    'Body (HTML)': 'body_html',
    'Vendor': 'vendor',
    'Product Category': 'product_category',
    'Type': 'product_type',
    'Tags': 'tags',
    'Variant SKU': 'sku',
    'Variant Grams': 'grams',
    'Variant Inventory Qty': 'inventory_qty',
    'Variant Price': 'price',
    'Variant Compare At Price': 'compare_at_price',
    'SEO Title': 'seo_title',
    'SEO Description': 'seo_description',
    'Cost per item': 'cost_per_item',
    'Status': 'status',
}

# Metafield columns share their ExportRow attribute name with Product, except
# the ingredient-category slot, which carries how-to-use text.
_METAFIELD_ATTRIBUTES = {
    'benefits': 'benefits',
    'age_group': 'age_group',
    'detailed_ingredients': 'detailed_ingredients',
    'dietary_preferences': 'dietary_preferences',
    'flavor': 'flavor',
    'ingredient_category': 'how_to_use',
    'certifications': 'certifications',
}
for _column in SHOPIFY_COLUMNS:
    if _column.attribute in _METAFIELD_ATTRIBUTES:
        IMPORT_FIELDS[_column.header] = _METAFIELD_ATTRIBUTES[_column.attribute]


class ShopifyCSVImporter:
    """
    Parses Shopify product CSVs into Product records.

    Usage:
        importer = ShopifyCSVImporter()
        products = importer.read_file("output/shopify-products-2025-01-31.csv")
    """

    def read_file(self, path: str | Path) -> List[Product]:
        """Parse a CSV file (UTF-8, BOM tolerated)."""
        text = Path(path).read_text(encoding='utf-8-sig')
        return self.parse(text)

    def parse(self, text: str) -> List[Product]:
        """
        Parse CSV text into products, in first-appearance order.

        Raises:
            CSVFormatError: If the header has no Handle column, or an image
                row appears before any product row
        """
        fieldnames, rows = parse_csv_text(text)
        if 'Handle' not in fieldnames:
            raise CSVFormatError("CSV header has no 'Handle' column")

        products: Dict[str, Product] = {}
        images: Dict[str, List[str]] = {}

        for line_number, row in enumerate(rows, start=2):
            handle = (row.get('Handle') or '').strip()
            if not handle:
                logger.warning("Line %d: row without Handle skipped", line_number)
                continue

            if handle not in products:
                if not (row.get('Title') or '').strip():
                    raise CSVFormatError(
                        f"Line {line_number}: image row for '{handle}' precedes its product row"
                    )
                products[handle] = self.row_to_product(row)
                images[handle] = []

            image_src = (row.get('Image Src') or '').strip()
            if image_src:
                images[handle].append(image_src)

        for handle, product in products.items():
            urls = images[handle]
            if urls:
                product.image_urls = json.dumps(urls)
                product.image_src = urls[0]

        logger.info("Parsed %d products from %d rows", len(products), len(rows))
        return list(products.values())

    def row_to_product(self, row: Dict[str, str]) -> Product:
        """Map a main row's columns onto a Product."""
        product = Product(handle=row['Handle'].strip())

        for column, attribute in IMPORT_FIELDS.items():
            value = row.get(column)
            if value:
                setattr(product, attribute, value)

        published = (row.get('Published') or '').strip().lower()
        product.published = published != 'false'

        if row.get('Image Src'):
            product.image_alt_text = row.get('Image Alt Text') or None

        return product
