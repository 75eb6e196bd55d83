"""
Text Utilities

Helper functions for handles, numbers and other text cleanup.
"""

import math
import re
import time
from typing import Any, Optional

_NON_ALNUM_RE = re.compile(r'[^a-z0-9]+')

# Leading-number grammar: "12.5kg" -> 12.5, "abc" -> no number
_LEADING_NUMBER_RE = re.compile(r'^\s*([+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)')
_INFINITY_RE = re.compile(r'^\s*[+-]?Infinity')


def current_millis() -> int:
    """Milliseconds since the epoch."""
    return int(time.time() * 1000)


def generate_handle(title: Optional[str], max_length: Optional[int] = None) -> str:
    """
    Generate URL-friendly handle from title.

    Lowercases the title and collapses every run of characters outside
    [a-z0-9] into a single hyphen, stripping hyphens at both ends.
    Falls back to "product-{epoch ms}" when nothing usable is left.

    Args:
        title: Product title
        max_length: Optional cap on the handle length

    Returns:
        URL-friendly handle

    Example:
        >>> generate_handle("Omega 3")
        'omega-3'
        >>> generate_handle("Al's \\"Best\\", Vitamin")
        'al-s-best-vitamin'
    """
    handle = ''
    if title:
        handle = _NON_ALNUM_RE.sub('-', title.lower()).strip('-')
        if max_length:
            handle = handle[:max_length]

    if not handle:
        handle = f"product-{current_millis()}"

    return handle


def parse_number(value: Any) -> Optional[float]:
    """
    Parse the leading number of a value.

    Numbers pass through; strings are read up to the first character that
    cannot continue a decimal literal. Returns None when no number is found.

    Example:
        >>> parse_number("12.50")
        12.5
        >>> parse_number("250g")
        250.0
        >>> parse_number("n/a") is None
        True
    """
    if value is None or isinstance(value, bool):
        return None

    if isinstance(value, (int, float)):
        number = float(value)
        return None if math.isnan(number) else number

    text = str(value)
    match = _LEADING_NUMBER_RE.match(text)
    if match:
        return float(match.group(1))

    if _INFINITY_RE.match(text):
        return -math.inf if text.strip().startswith('-') else math.inf

    return None


def alt_text_from_filename(filename: str) -> str:
    """
    Derive image alt text from a file name.

    Drops the extension and turns hyphens/underscores into spaces.

    Example:
        >>> alt_text_from_filename("green-tea_front.jpg")
        'green tea front'
    """
    stem = re.sub(r'\.[^/.]+$', '', filename)
    return re.sub(r'[-_]', ' ', stem)
