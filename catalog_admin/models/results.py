"""
Result records returned by the exporter and the store.

Errors and warnings travel as data so callers decide whether to proceed.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, List, Optional


@dataclass
class ValidationResult:
    """Outcome of validating products before export."""
    is_valid: bool
    errors: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)
    total_products: int = 0


@dataclass
class ExportStats:
    """Row and image counts predicted for an export."""
    total_products: int = 0
    total_variants: int = 0
    total_images: int = 0
    estimated_rows: int = 0  # includes the header row


@dataclass
class ExportResult:
    """Summary of a completed export."""
    total_products: int
    total_rows: int  # excludes the header row
    filename: str
    path: Optional[Path] = None


@dataclass
class StoreResult:
    """Outcome of a store write. Backend failures come back as error text."""
    success: bool
    data: Any = None
    error: Optional[str] = None
