"""
Slugify transform.

Turns free-form titles into URL-safe identifiers:
- Unicode is transliterated to ASCII where possible
- Runs of anything that is not [a-z0-9] collapse to one separator
- Leading/trailing separators are stripped
"""

from __future__ import annotations

import re
import unicodedata


def slugify(
    text: str | None,
    separator: str = "-",
    max_length: int | None = None,
) -> str:
    """
    Generate a URL-safe slug from text.

    Args:
        text: Source text (None is treated as empty)
        separator: Character joining words
        max_length: Optional maximum length, cut at a word boundary

    Returns:
        Slug string, empty when the text has no usable characters

    Examples:
        >>> slugify("My First Post")
        'my-first-post'
        >>> slugify("Crème Brûlée & Friends!")
        'creme-brulee-friends'
    """
    if not text:
        return ""

    normalized = unicodedata.normalize("NFKD", text)
    ascii_only = normalized.encode("ascii", "ignore").decode("ascii")
    lowered = ascii_only.lower()

    slug = re.sub(r"[^a-z0-9]+", separator, lowered).strip(separator)

    if max_length is not None and len(slug) > max_length:
        slug = truncate(slug, max_length, separator)

    return slug


def truncate(slug: str, max_length: int, separator: str = "-") -> str:
    """Cut a slug to max_length, preferring the last separator boundary."""
    if len(slug) <= max_length:
        return slug

    head = slug[:max_length]
    # Whole word fits exactly
    if slug[max_length] == separator:
        return head

    boundary = head.rfind(separator)
    if boundary > 0:
        return head[:boundary]
    return head
