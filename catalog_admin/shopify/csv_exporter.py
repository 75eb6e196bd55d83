"""
Shopify CSV Exporter

Exports catalog products to Shopify-compatible CSV format.

Shopify's product CSV is denormalized: one main row per product carrying
every field plus the first image, followed by one row per extra image that
repeats only the Handle. Column order is fixed by SHOPIFY_COLUMNS, which is
the single source of truth for the header, row serialization and column
positions.
"""

import json
import logging
import math
from dataclasses import dataclass
from datetime import date, datetime, timezone
from pathlib import Path
from typing import Any, Iterable, Iterator, List, NamedTuple, Optional, Sequence, Tuple

from ..common.text_utils import generate_handle, parse_number
from ..models import ExportResult, ExportStats, Product, ValidationResult
from .delivery import ROW_TERMINATOR, FileDelivery
from .errors import EmptyInputError, MalformedImageListError, ValidationError

logger = logging.getLogger(__name__)


class Column(NamedTuple):
    """One CSV column: header text, ExportRow attribute, free-text quoting."""
    header: str
    attribute: str
    free_text: bool = False


SHOPIFY_COLUMNS: List[Column] = [
    Column('Handle', 'handle'),
    Column('Title', 'title', True),
    Column('Body (HTML)', 'body_html', True),
    Column('Vendor', 'vendor', True),
    Column('Product Category', 'product_category', True),
    Column('Type', 'product_type', True),
    Column('Tags', 'tags', True),
    Column('Published', 'published'),
    Column('Option1 Name', 'option1_name'),
    Column('Option1 Value', 'option1_value'),
    Column('Option1 Linked To', 'option1_linked_to'),
    Column('Option2 Name', 'option2_name'),
    Column('Option2 Value', 'option2_value'),
    Column('Option2 Linked To', 'option2_linked_to'),
    Column('Option3 Name', 'option3_name'),
    Column('Option3 Value', 'option3_value'),
    Column('Option3 Linked To', 'option3_linked_to'),
    Column('Variant SKU', 'variant_sku'),
    Column('Variant Grams', 'variant_grams'),
    Column('Variant Inventory Tracker', 'variant_inventory_tracker'),
    Column('Variant Inventory Qty', 'variant_inventory_qty'),
    Column('Variant Inventory Policy', 'variant_inventory_policy'),
    Column('Variant Fulfillment Service', 'variant_fulfillment_service'),
    Column('Variant Price', 'variant_price'),
    Column('Variant Compare At Price', 'variant_compare_at_price'),
    Column('Variant Requires Shipping', 'variant_requires_shipping'),
    Column('Variant Taxable', 'variant_taxable'),
    Column('Variant Barcode', 'variant_barcode'),
    Column('Image Src', 'image_src'),
    Column('Image Position', 'image_position'),
    Column('Image Alt Text', 'image_alt_text', True),
    Column('Gift Card', 'gift_card'),
    Column('SEO Title', 'seo_title', True),
    Column('SEO Description', 'seo_description', True),
    Column('Benefits (product.metafields.custom.benefits)', 'benefits', True),
    Column('Age group (product.metafields.shopify.age-group)', 'age_group', True),
    Column('Application method (product.metafields.shopify.application-method)',
           'application_method', True),
    Column('Detailed ingredients (product.metafields.shopify.detailed-ingredients)',
           'detailed_ingredients', True),
    Column('Dietary preferences (product.metafields.shopify.dietary-preferences)',
           'dietary_preferences', True),
    Column('Flavor (product.metafields.shopify.flavor)', 'flavor', True),
    Column('Ingredient category (product.metafields.shopify.ingredient-category)',
           'ingredient_category', True),
    Column('Product certifications & standards '
           '(product.metafields.shopify.product-certifications-standards)',
           'certifications', True),
    Column('Variant Image', 'variant_image'),
    Column('Variant Weight Unit', 'variant_weight_unit'),
    Column('Variant Tax Code', 'variant_tax_code'),
    Column('Cost per item', 'cost_per_item'),
    Column('Status', 'status'),
]

SHOPIFY_FIELDNAMES: List[str] = [column.header for column in SHOPIFY_COLUMNS]
COLUMN_INDEX = {column.header: index for index, column in enumerate(SHOPIFY_COLUMNS)}
HEADER_LINE = ','.join(SHOPIFY_FIELDNAMES)

DEFAULT_FILENAME_PREFIX = 'shopify-products'


def _is_empty(value: Any) -> bool:
    # NaN and infinities count as missing numbers
    if isinstance(value, float) and not math.isfinite(value):
        return True
    return not value


def _or_default(value: Any, default: str) -> Any:
    return default if _is_empty(value) else value


def _is_number(value: Any) -> bool:
    number = parse_number(value)
    return number is not None and math.isfinite(number)


def _stringify(value: Any) -> str:
    if isinstance(value, bool):
        return 'true' if value else 'false'
    if isinstance(value, float) and math.isfinite(value) and value.is_integer():
        return str(int(value))
    return str(value)


def format_csv_value(value: Any) -> str:
    """
    Format a free-text cell.

    Empty values become ''. Values containing a double quote, comma or
    newline are wrapped in double quotes with inner quotes doubled.

    Example:
        >>> format_csv_value('Al\\'s "Best", Vitamin')
        '"Al\\'s ""Best"", Vitamin"'
    """
    if _is_empty(value):
        return ''
    text = _stringify(value)
    if '"' in text or ',' in text or '\n' in text:
        return '"' + text.replace('"', '""') + '"'
    return text


def format_raw_value(value: Any) -> str:
    """Format a fixed-vocabulary or numeric cell (no quoting)."""
    if _is_empty(value):
        return ''
    return _stringify(value)


@dataclass
class ExportRow:
    """One CSV row with a named field per Shopify column."""
    handle: Any = ''
    title: Any = ''
    body_html: Any = ''
    vendor: Any = ''
    product_category: Any = ''
    product_type: Any = ''
    tags: Any = ''
    published: Any = ''
    option1_name: Any = ''
    option1_value: Any = ''
    option1_linked_to: Any = ''
    option2_name: Any = ''
    option2_value: Any = ''
    option2_linked_to: Any = ''
    option3_name: Any = ''
    option3_value: Any = ''
    option3_linked_to: Any = ''
    variant_sku: Any = ''
    variant_grams: Any = ''
    variant_inventory_tracker: Any = ''
    variant_inventory_qty: Any = ''
    variant_inventory_policy: Any = ''
    variant_fulfillment_service: Any = ''
    variant_price: Any = ''
    variant_compare_at_price: Any = ''
    variant_requires_shipping: Any = ''
    variant_taxable: Any = ''
    variant_barcode: Any = ''
    image_src: Any = ''
    image_position: Any = ''
    image_alt_text: Any = ''
    gift_card: Any = ''
    seo_title: Any = ''
    seo_description: Any = ''
    benefits: Any = ''
    age_group: Any = ''
    application_method: Any = ''
    detailed_ingredients: Any = ''
    dietary_preferences: Any = ''
    flavor: Any = ''
    ingredient_category: Any = ''
    certifications: Any = ''
    variant_image: Any = ''
    variant_weight_unit: Any = ''
    variant_tax_code: Any = ''
    cost_per_item: Any = ''
    status: Any = ''

    def cells(self) -> List[str]:
        """Serialized cell values in header order."""
        cells = []
        for column in SHOPIFY_COLUMNS:
            value = getattr(self, column.attribute)
            if column.free_text:
                cells.append(format_csv_value(value))
            else:
                cells.append(format_raw_value(value))
        return cells

    def to_line(self) -> str:
        return ','.join(self.cells())


def parse_image_list(value: Any) -> List[str]:
    """
    Decode an image list stored as a JSON array of URL strings.

    Already-decoded lists are accepted. Empty entries are dropped.

    Raises:
        MalformedImageListError: If the value is not a JSON array of strings
    """
    if isinstance(value, (list, tuple)):
        urls = list(value)
    else:
        try:
            urls = json.loads(value)
        except (TypeError, ValueError) as e:
            raise MalformedImageListError(f"Image URLs is not valid JSON: {e}") from e

    if not isinstance(urls, list):
        raise MalformedImageListError(
            f"Image URLs must be a JSON array, got {type(urls).__name__}"
        )
    if not all(isinstance(url, str) for url in urls):
        raise MalformedImageListError("Image URLs must contain only strings")

    return [url for url in urls if url]


def resolve_image_urls(product: Product) -> List[str]:
    """
    Resolve a product's ordered image URLs.

    Priority: the Image URLs list, then the single Image Src, then none.
    A malformed Image URLs value is logged and skipped.
    """
    if product.image_urls:
        try:
            return parse_image_list(product.image_urls)
        except MalformedImageListError as e:
            logger.warning("Product %s: %s", product.handle or product.title or '?', e)

    if product.image_src:
        return [product.image_src]
    return []


def default_filename(today: Optional[date] = None) -> str:
    """Date-stamped export file name, e.g. shopify-products-2025-01-31.csv."""
    today = today or datetime.now(timezone.utc).date()
    return f"{DEFAULT_FILENAME_PREFIX}-{today.isoformat()}.csv"


class CatalogExporter:
    """
    Exports products to Shopify-compatible CSV format.

    Row building is pure; writing the finished document is delegated to the
    injected delivery object (anything with deliver(csv_text, filename)).

    Usage:
        exporter = CatalogExporter(FileDelivery("output"))
        report = exporter.validate(products)
        stats = exporter.compute_stats(products)
        result = exporter.export(products)
    """

    def __init__(self, delivery=None):
        """
        Initialize the exporter.

        Args:
            delivery: Destination for the finished CSV (default: FileDelivery
                writing to ./output)
        """
        self.fieldnames = SHOPIFY_FIELDNAMES
        self.delivery = delivery if delivery is not None else FileDelivery()

    # ── Validation and statistics ───────────────────────────────────────────

    def validate(self, products: Optional[Sequence[Product]]) -> ValidationResult:
        """
        Check products before export.

        Products missing all of Title, Handle and Vendor are errors; a single
        missing identity field or an unparseable price/weight is a warning.
        """
        errors: List[str] = []
        warnings: List[str] = []

        if not products:
            errors.append('No products provided for validation')
            return ValidationResult(is_valid=False, errors=errors, warnings=warnings)

        for number, product in enumerate(products, start=1):
            if not product.title and not product.handle and not product.vendor:
                errors.append(
                    f"Product {number}: Missing all identifying fields "
                    f"(Title, Handle, Vendor) - cannot export"
                )
            else:
                if not product.title:
                    warnings.append(f"Product {number}: Missing Title - will use Handle or generate from Vendor")
                if not product.handle:
                    warnings.append(f"Product {number}: Missing Handle - will be auto-generated from Title")
                if not product.vendor:
                    warnings.append(f"Product {number}: Missing Vendor - will use store default")

            if product.price and not _is_number(product.price):
                warnings.append(f"Product {number}: Invalid price format - will default to 0.00")

            if product.grams and not _is_number(product.grams):
                warnings.append(f"Product {number}: Invalid weight format - will default to 0")

        return ValidationResult(
            is_valid=not errors,
            errors=errors,
            warnings=warnings,
            total_products=len(products),
        )

    def compute_stats(self, products: Optional[Sequence[Product]]) -> ExportStats:
        """Predict product, image and row counts (header row included)."""
        if not products:
            return ExportStats()

        total_images = 0
        estimated_rows = len(products)

        for product in products:
            image_count = len(resolve_image_urls(product))
            total_images += image_count
            if image_count > 1:
                estimated_rows += image_count - 1

        return ExportStats(
            total_products=len(products),
            total_variants=len(products),  # single variant per product
            total_images=total_images,
            estimated_rows=estimated_rows + 1,
        )

    # ── Row building ────────────────────────────────────────────────────────

    def resolve_identity(self, product: Product) -> Tuple[str, str]:
        """Return (title, handle) with fallbacks applied."""
        title = product.title or product.handle or f"{product.vendor or 'Unknown'} Product"
        handle = product.handle or generate_handle(title)
        return title, handle

    def product_to_main_row(
        self,
        product: Product,
        image_urls: List[str],
        title: str,
        handle: str,
    ) -> ExportRow:
        """
        Convert product to its main CSV row (includes first image).

        Args:
            product: Product to convert
            image_urls: Resolved image URLs
            title: Title after fallbacks
            handle: Handle after fallbacks
        """
        first_image = image_urls[0] if image_urls else ''

        return ExportRow(
            handle=handle,
            title=title,
            body_html=product.body_html,
            vendor=product.vendor or 'Store Default',
            product_category=product.product_category,
            product_type=product.product_type or 'Supplement',
            tags=product.tags,
            published='false' if product.published is False else 'true',
            option1_name='Title',
            option1_value='Default Title',
            variant_sku=product.sku,
            variant_grams=_or_default(product.grams, '0'),
            variant_inventory_tracker='shopify',
            variant_inventory_qty=_or_default(product.inventory_qty, '0'),
            variant_inventory_policy='deny',
            variant_fulfillment_service='manual',
            variant_price=_or_default(product.price, '0.00'),
            variant_compare_at_price=product.compare_at_price,
            variant_requires_shipping='true',
            variant_taxable='true',
            image_src=first_image,
            image_position='1' if first_image else '',
            image_alt_text=(product.image_alt_text or title) if first_image else '',
            gift_card='false',
            seo_title=product.seo_title or title,
            seo_description=product.seo_description,
            benefits=product.benefits,
            age_group=product.age_group or 'Adult',
            detailed_ingredients=product.detailed_ingredients,
            dietary_preferences=product.dietary_preferences,
            flavor=product.flavor,
            ingredient_category=product.how_to_use,
            certifications=product.certifications,
            variant_weight_unit='kg',
            status=product.status or 'active',
        )

    def image_to_row(self, handle: str, title: str, image_url: str, position: int) -> ExportRow:
        """
        Convert an additional image to a CSV row.

        Only Handle and the image columns are filled; Shopify attaches the
        image to the product with the same Handle.
        """
        return ExportRow(
            handle=handle,
            image_src=image_url,
            image_position=str(position),
            image_alt_text=f"{title} - Image {position}",
        )

    def product_to_rows(self, product: Product) -> List[ExportRow]:
        """Convert product to all CSV rows (main + additional images)."""
        image_urls = resolve_image_urls(product)
        title, handle = self.resolve_identity(product)

        rows = [self.product_to_main_row(product, image_urls, title, handle)]
        for index in range(1, len(image_urls)):
            rows.append(self.image_to_row(handle, title, image_urls[index], index + 1))
        return rows

    def iter_rows(self, products: Iterable[Product]) -> Iterator[ExportRow]:
        for product in products:
            yield from self.product_to_rows(product)

    def iter_csv_lines(self, products: Iterable[Product]) -> Iterator[str]:
        """Yield the header line, then one line per row, without terminators."""
        yield HEADER_LINE
        for row in self.iter_rows(products):
            yield row.to_line()

    def build_csv(self, products: Iterable[Product]) -> str:
        """Build the complete CSV document (rows joined by '\\n')."""
        return ROW_TERMINATOR.join(self.iter_csv_lines(products))

    # ── Export ──────────────────────────────────────────────────────────────

    def export(self, products: Optional[Sequence[Product]], filename: Optional[str] = None) -> ExportResult:
        """
        Validate, build and deliver the CSV.

        Args:
            products: Products to export
            filename: Output file name (default: shopify-products-{date}.csv)

        Returns:
            ExportResult with product and row counts (header excluded)

        Raises:
            EmptyInputError: If no products are given
            ValidationError: If any product cannot be exported
        """
        products = list(products or [])
        if not products:
            raise EmptyInputError('No products provided for export')

        validation = self.validate(products)
        for warning in validation.warnings:
            logger.warning(warning)
        if not validation.is_valid:
            raise ValidationError(validation.errors)

        lines = list(self.iter_csv_lines(products))
        filename = filename or default_filename()
        path = self.delivery.deliver(ROW_TERMINATOR.join(lines), filename)
        if path is not None:
            # Report the name the delivery actually wrote
            filename = Path(path).name

        total_rows = len(lines) - 1
        logger.info("Exported %d products (%d rows) to %s", len(products), total_rows, filename)

        return ExportResult(
            total_products=len(products),
            total_rows=total_rows,
            filename=filename,
            path=path,
        )
