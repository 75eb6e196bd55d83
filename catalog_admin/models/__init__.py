"""
Data models for the product catalog.

This module contains pure data classes with no business logic.
"""

from .product import COLUMN_TO_FIELD, RECORD_FIELDS, Product, ProductImage
from .results import ExportResult, ExportStats, StoreResult, ValidationResult

__all__ = [
    'Product',
    'ProductImage',
    'RECORD_FIELDS',
    'COLUMN_TO_FIELD',
    'ValidationResult',
    'ExportStats',
    'ExportResult',
    'StoreResult',
]
