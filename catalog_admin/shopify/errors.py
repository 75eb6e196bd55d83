"""
Exceptions raised by the Shopify CSV export and import.
"""

from typing import List


class ExportError(Exception):
    """Base class for export failures."""


class EmptyInputError(ExportError):
    """No products were given to export."""


class ValidationError(ExportError):
    """One or more products cannot be exported. Nothing was written."""

    def __init__(self, errors: List[str]):
        self.errors = list(errors)
        super().__init__(f"{len(self.errors)} product(s) failed validation: " + "; ".join(self.errors))


class MalformedImageListError(ValueError):
    """A product's image list is not a JSON array of strings."""


class CSVFormatError(ValueError):
    """A CSV document does not follow the Shopify product layout."""
