"""
Section relationship classification.

Decides whether a heading introduces the main series or a related work
(spin-off, sequel, side story, anthology, prequel). The rules are ordered
heuristics evaluated first-match-wins; see classify_section().

The main series is identified by a single "key word": the first word of the
cleaned main title. Matching on one token tolerates subtitle variation
("Demon Slayer" vs "Demon Slayer: Kimetsu no Yaiba") at the cost of
occasional false positives and negatives.
"""

from __future__ import annotations

import logging
import re

from wikishelf.models import SeriesRelationship
from wikishelf.parsing.media_type import is_media_heading

logger = logging.getLogger(__name__)

# Headings that only name the list itself
GENERIC_HEADINGS: frozenset[str] = frozenset(
    {"volume list", "volumes", "chapter list", "chapters", "manga", "light novels"}
)

# Titles/headings that mark spin-off material
SPINOFF_TITLE_TERMS: tuple[str, ...] = (
    "short story",
    "side story",
    "anthology",
    "gaiden",
    "stories –",  # "Royal Academy Stories – First Year"
    "stories -",
    "fan book",
    "guidebook",
    "art book",
)

_CONTINUATION_PATTERNS = (
    re.compile(r"^part\s*\d"),
    re.compile(r"^volumes?\s*\d"),
)
_YEAR_PATTERN = re.compile(r"year\s*\d")
_PUNCTUATION = re.compile(r"[^\w\s]")
_LIST_OF_PREFIX = re.compile(r"^list of\s+")
_LIST_SUFFIX = re.compile(r"\s+(?:manga volumes|chapters|volumes|manga|light novels?)$")


def is_spinoff_title(title: str | None) -> bool:
    """Check whether a volume title or heading names spin-off material."""
    if not title:
        return False
    lower = title.lower()
    return any(term in lower for term in SPINOFF_TITLE_TERMS)


def main_series_key_word(main_title: str) -> str:
    """
    First significant word of the main series title.

    Lower-cases, strips punctuation, drops a leading "list of" and a trailing
    "chapters"/"volumes"/"manga"/"light novels", then takes the first token.

    Example:
        >>> main_series_key_word("List of Demon Slayer: Kimetsu no Yaiba chapters")
        'demon'
    """
    cleaned = _PUNCTUATION.sub("", main_title.lower()).strip()
    cleaned = _LIST_OF_PREFIX.sub("", cleaned)
    cleaned = _LIST_SUFFIX.sub("", cleaned).strip()
    tokens = cleaned.split()
    return tokens[0] if tokens else ""


def _mentions(text: str, word: str) -> bool:
    return bool(word) and word in text


def classify_section(
    heading: str,
    main_series_title: str,
    parent_heading: str | None = None,
) -> SeriesRelationship:
    """
    Classify a section heading relative to the main series.

    Rules, first match wins:

    1. "Part N" / "Volume(s) N" continuation headings -> main
    2. Generic list headings ("Volumes", "Manga", ...) -> main
    3. "spin-off" / "spinoff" -> spinoff
    4. "Year N" -> sequel
    5. "alternative" / "progressive" -> spinoff
    6. "side stor" -> side_story, "short stor" -> anthology,
       "gaiden" -> side_story, "prequel" -> prequel
    7. "stories" without the key word -> anthology
    8. "Title: Subtitle" headings containing the key word -> spinoff
    9. Nested under a media heading without the key word -> spinoff
    10. Spin-off title lexicon -> spinoff
    11. Contains the key word -> main
    12. Otherwise -> main

    Args:
        heading: Cleaned heading text
        main_series_title: Title of the page/series being parsed
        parent_heading: Enclosing heading used as context, if any

    Returns:
        The inferred SeriesRelationship
    """
    lower = heading.lower().strip()
    key_word = main_series_key_word(main_series_title)

    if any(p.match(lower) for p in _CONTINUATION_PATTERNS):
        return SeriesRelationship.MAIN

    if lower in GENERIC_HEADINGS:
        return SeriesRelationship.MAIN

    if "spin-off" in lower or "spinoff" in lower:
        return SeriesRelationship.SPINOFF

    if _YEAR_PATTERN.search(lower):
        return SeriesRelationship.SEQUEL

    if "alternative" in lower or "progressive" in lower:
        return SeriesRelationship.SPINOFF

    if "side stor" in lower:
        return SeriesRelationship.SIDE_STORY
    if "short stor" in lower:
        return SeriesRelationship.ANTHOLOGY
    if "gaiden" in lower:
        return SeriesRelationship.SIDE_STORY
    if "prequel" in lower:
        return SeriesRelationship.PREQUEL

    if "stories" in lower and not _mentions(lower, key_word):
        return SeriesRelationship.ANTHOLOGY

    # "Main Title: Subtitle" is a separate work sharing the franchise name
    if ":" in lower and _mentions(lower, key_word) and lower != main_series_title.lower().strip():
        return SeriesRelationship.SPINOFF

    if parent_heading and is_media_heading(parent_heading) and not _mentions(lower, key_word):
        return SeriesRelationship.SPINOFF

    if is_spinoff_title(heading):
        return SeriesRelationship.SPINOFF

    return SeriesRelationship.MAIN
