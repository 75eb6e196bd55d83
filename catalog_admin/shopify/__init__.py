"""
Shopify CSV format.

Modules:
    csv_exporter - Product export to Shopify CSV format
    csv_importer - Shopify CSV back into product records
    delivery - Writing finished CSV documents
    errors - Export/import exceptions
"""

from .csv_exporter import (
    COLUMN_INDEX,
    HEADER_LINE,
    SHOPIFY_COLUMNS,
    SHOPIFY_FIELDNAMES,
    CatalogExporter,
    ExportRow,
    default_filename,
    format_csv_value,
    resolve_image_urls,
)
from .csv_importer import ShopifyCSVImporter
from .delivery import CSV_CONTENT_TYPE, FileDelivery
from .errors import (
    CSVFormatError,
    EmptyInputError,
    ExportError,
    MalformedImageListError,
    ValidationError,
)

__all__ = [
    # Export
    'CatalogExporter',
    'ExportRow',
    'SHOPIFY_COLUMNS',
    'SHOPIFY_FIELDNAMES',
    'COLUMN_INDEX',
    'HEADER_LINE',
    'default_filename',
    'format_csv_value',
    'resolve_image_urls',
    # Import
    'ShopifyCSVImporter',
    # Delivery
    'FileDelivery',
    'CSV_CONTENT_TYPE',
    # Errors
    'ExportError',
    'EmptyInputError',
    'ValidationError',
    'MalformedImageListError',
    'CSVFormatError',
]
