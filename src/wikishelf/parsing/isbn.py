"""
ISBN cleanup and ISBN-10 to ISBN-13 conversion.

Volume templates carry ISBNs in whatever form the editor typed them:
hyphenated, spaced, wrapped in templates, ISBN-10 or ISBN-13. Everything is
normalized to a bare 13-character string.
"""

from __future__ import annotations

import re

_NON_ISBN_CHARS = re.compile(r"[^0-9Xx]")


def convert_isbn10_to_13(isbn10: str) -> str:
    """
    Convert an ISBN-10 to ISBN-13.

    Drops the ISBN-10 check digit, prefixes "978" and computes the ISBN-13
    check digit (weights alternate 1, 3 across the first 12 digits).

    Args:
        isbn10: 10-character ISBN (digits, possibly ending in X)

    Returns:
        13-digit ISBN string

    Example:
        >>> convert_isbn10_to_13("1569319014")
        '9781569319017'
    """
    base = "978" + isbn10[:9]
    total = 0
    for i, ch in enumerate(base[:12]):
        digit = int(ch) if ch.isdigit() else 0
        total += digit if i % 2 == 0 else digit * 3
    check_digit = (10 - (total % 10)) % 10
    return f"{base}{check_digit}"


def clean_isbn(raw: str | None) -> str | None:
    """
    Normalize a raw ISBN field value.

    Keeps only digits and X, converts ISBN-10 to ISBN-13 and rejects anything
    that does not end up at least 13 characters long.

    Args:
        raw: Field value as authored (e.g. "978-1-56931-901-7")

    Returns:
        Normalized ISBN-13 string, or None if the value is unusable
    """
    if not raw:
        return None

    cleaned = _NON_ISBN_CHARS.sub("", raw)
    if len(cleaned) < 10:
        return None

    if len(cleaned) == 10:
        cleaned = convert_isbn10_to_13(cleaned)

    return cleaned if len(cleaned) >= 13 else None
