"""Media type detection from section headings."""

from __future__ import annotations

from wikishelf.models import MediaType


def detect_media_type(heading: str) -> MediaType:
    """
    Classify a heading as manga, light novel or unknown.

    "novel" is checked before "manga", so ambiguous headings such as
    "Manga Light Novels" resolve to light_novel.

    Args:
        heading: Section heading text

    Returns:
        Detected MediaType
    """
    lower = heading.lower()
    if "novel" in lower:
        return MediaType.LIGHT_NOVEL
    if "manga" in lower:
        return MediaType.MANGA
    return MediaType.UNKNOWN


def is_media_heading(heading: str) -> bool:
    """True for media-type headings ("Manga", "Light novels") and "Media" headings."""
    return detect_media_type(heading) is not MediaType.UNKNOWN or "media" in heading.lower()
