"""
Utilities Package

Small helpers shared by routers and services:
- slugify: URL-friendly identifiers for authors, books and file names
- format_file_size: human-readable sizes for book files
- format_price: cents to a currency string
"""

import re
import unicodedata
from decimal import Decimal

_NON_WORD = re.compile(r"[^a-z0-9]+")


def slugify(value: str, fallback: str = "") -> str:
    """
    Lowercase, strip accents and join words with hyphens.

    Values with no ASCII letters or digits left (e.g. "李小龙") give fallback.

    >>> slugify("The Hobbit 42")
    'the-hobbit-42'
    """
    normalized = unicodedata.normalize("NFKD", value).encode("ascii", "ignore").decode()
    return _NON_WORD.sub("-", normalized.lower()).strip("-") or fallback


def format_file_size(size: int) -> str:
    """Bytes to a short string: 512 -> "512B", 1536 -> "1.50KB"."""
    if size < 1024:
        return f"{size}B"
    if size < 1024 * 1024:
        return f"{size / 1024:.2f}KB"
    return f"{size / (1024 * 1024):.2f}MB"


def format_price(cents: int) -> str:
    """Cents to a two-decimal currency string (1250 -> "12.50")."""
    return f"{Decimal(cents) / 100:.2f}"
