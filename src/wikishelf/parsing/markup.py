"""
Wiki markup helpers.

Small, regex-based utilities for the parts of wiki markup the parser cares
about: template field values, headings, transcluded sub-pages and a few
page-level facts (completion status, author). None of this renders markup;
anything beyond the volume-list template family is stripped or ignored.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Callable

logger = logging.getLogger(__name__)

# =============================================================================
# Field values
# =============================================================================

_REF_PAIRED = re.compile(r"<ref[^>]*>.*?</ref>", re.IGNORECASE | re.DOTALL)
_REF_SELF_CLOSING = re.compile(r"<ref[^>]*/>", re.IGNORECASE)
# Innermost templates only; applied repeatedly to peel nested ones
_TEMPLATE = re.compile(r"\{\{[^{}]*\}\}")
_WIKI_LINK = re.compile(r"\[\[(?:[^\]|]+\|)?([^\]]+)\]\]")
_BOLD_ITALIC = re.compile(r"'''?")


def clean_field_value(value: str) -> str:
    """
    Reduce a template field value to plain text.

    Strips <ref> tags, templates ({{nihongo|...}}, {{efn|...}}), resolves
    [[Target|Label]] links to their label and removes bold/italic quotes.

    Args:
        value: Raw text after the ``=`` of a ``| Field = value`` line

    Returns:
        Cleaned, whitespace-trimmed text (may be empty)

    Example:
        >>> clean_field_value("[[Viz Media|Viz]] '''Vol. 1'''<ref>x</ref>")
        'Viz Vol. 1'
    """
    text = _REF_PAIRED.sub("", value)
    text = _REF_SELF_CLOSING.sub("", text)
    previous = None
    while previous != text:
        previous = text
        text = _TEMPLATE.sub("", text)
    text = _WIKI_LINK.sub(r"\1", text)
    text = _BOLD_ITALIC.sub("", text)
    return text.strip()


def clean_heading(text: str) -> str:
    """Heading text without link/bold/italic markup, e.g. ``''Part 1''`` -> ``Part 1``."""
    return clean_field_value(text)


# =============================================================================
# Transclusion
# =============================================================================

_TRANSCLUSION = re.compile(r"\{\{:([^}]+)\}\}")


def find_transclusions(markup: str) -> list[str]:
    """
    Titles of transcluded sub-pages that look like chapter/volume lists.

    Only ``{{:Page title}}`` transclusions whose title contains "chapter" or
    "volume" are returned, in order of appearance, without duplicates.
    """
    titles: list[str] = []
    for match in _TRANSCLUSION.finditer(markup):
        title = match.group(1).strip()
        lower = title.lower()
        if ("chapter" in lower or "volume" in lower) and title not in titles:
            titles.append(title)
    return titles


def inline_transclusions(markup: str, fetch: Callable[[str], str | None]) -> str:
    """
    Replace chapter/volume transclusions with the sub-page markup.

    Sub-pages are spliced in place so their volumes land under the heading
    that transcludes them. Unavailable sub-pages leave the marker untouched.

    Args:
        markup: Page markup
        fetch: Returns the markup of a page title, or None if missing

    Returns:
        Markup with transclusions expanded (single level)
    """
    titles = find_transclusions(markup)
    if not titles:
        return markup

    logger.debug(f"Expanding {len(titles)} transcluded page(s)")
    expanded: dict[str, str] = {}
    for title in titles:
        sub_markup = fetch(title)
        if sub_markup is None:
            logger.debug(f"Transcluded page not found: {title}")
            continue
        expanded[title] = sub_markup

    def replace(match: re.Match[str]) -> str:
        title = match.group(1).strip()
        if title in expanded:
            return f"\n{expanded[title]}\n"
        return match.group(0)

    return _TRANSCLUSION.sub(replace, markup)


# =============================================================================
# Page-level metadata
# =============================================================================

_RAN_FROM_TO = re.compile(
    r"ran\s+(?:from|until)[^.]*?(\d{4})[^.]*?to[^.]*?(\d{4})", re.IGNORECASE
)

_AUTHOR_PATTERNS = (
    re.compile(r"\|\s*author\s*=\s*\[\[([^\]|]+)", re.IGNORECASE),
    re.compile(r"\|\s*writer\s*=\s*\[\[([^\]|]+)", re.IGNORECASE),
    re.compile(r"written\s+(?:and\s+illustrated\s+)?by\s+\[\[([^\]|]+)", re.IGNORECASE),
    re.compile(r"\|\s*author\s*=\s*([^|\n]+)", re.IGNORECASE),
)

_CANONICAL_SUFFIXES = (
    re.compile(r" chapters?$", re.IGNORECASE),
    re.compile(r" manga volumes?$", re.IGNORECASE),
    re.compile(r" manga$", re.IGNORECASE),
    re.compile(r" \(manga\)$", re.IGNORECASE),
    re.compile(r" light novels?$", re.IGNORECASE),
)


def check_series_complete(markup: str) -> bool:
    """Heuristic: the page says the run finished, or gives a from/to year range."""
    lower = markup.lower()
    if any(word in lower for word in ("finished", "completed", "concluded")):
        return True
    return _RAN_FROM_TO.search(markup) is not None


def extract_author(markup: str) -> str | None:
    """First author/writer named by the infobox or lead sentence."""
    for pattern in _AUTHOR_PATTERNS:
        match = pattern.search(markup)
        if match:
            author = match.group(1).strip()
            if author:
                return author
    return None


def canonical_series_title(page_title: str) -> str:
    """
    Series title derived from a list page title.

    Example:
        >>> canonical_series_title("List of One Piece manga volumes")
        'One Piece'
    """
    title = page_title.removeprefix("List of ")
    for suffix in _CANONICAL_SUFFIXES:
        title = suffix.sub("", title)
    return title.strip()
