"""
CSV Utilities

Common functions for reading CSV data with proper configuration.
Handles large field sizes (long HTML bodies) and encoding issues.
"""

import csv
import io
from pathlib import Path
from typing import Dict, Iterator, List, Tuple


def configure_csv(field_size_limit: int = 10 * 1024 * 1024) -> None:
    """
    Configure CSV module for large fields.

    Args:
        field_size_limit: Maximum field size in bytes (default: 10MB)
    """
    csv.field_size_limit(field_size_limit)


def parse_csv_text(text: str) -> Tuple[List[str], List[Dict[str, str]]]:
    """
    Parse CSV text into row dictionaries keyed by header.

    Args:
        text: CSV document (first line is the header)

    Returns:
        Tuple of (header names, list of row dictionaries)
    """
    reader = csv.DictReader(io.StringIO(text, newline=''))
    rows = list(reader)
    return list(reader.fieldnames or []), rows


def read_csv(file_path: str | Path, encoding: str = 'utf-8-sig') -> Iterator[Dict[str, str]]:
    """
    Read CSV file and yield rows as dictionaries.

    Args:
        file_path: Path to CSV file
        encoding: File encoding (default: utf-8, tolerating a BOM)

    Yields:
        Dictionary for each row with column names as keys
    """
    with open(file_path, 'r', encoding=encoding, newline='') as f:
        reader = csv.DictReader(f)
        for row in reader:
            yield row


# Initialize CSV configuration on module import
configure_csv()
