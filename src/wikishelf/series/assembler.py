"""
Series assembly.

Splits parsed sections into the main series and its related series, and
attaches page-level metadata (completion status, author).

Rules:
- Main volumes come from ``main`` sections, minus volumes whose own title
  marks them as spin-off material.
- The primary medium is manga if the main sections list any manga volumes,
  else light novels if they list any. Volumes of unknown medium stay with
  the main series.
- Main-section volumes of the other known medium become one ``adaptation``
  related series ("<title> (Light Novel)" / "<title> (Manga)").
- Non-main sections are grouped by (name, relationship, medium) into
  related series named after the section.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence

from wikishelf.models import (
    MediaType,
    RelatedSeries,
    Section,
    Series,
    SeriesRelationship,
    Volume,
)
from wikishelf.parsing.markup import check_series_complete, extract_author
from wikishelf.parsing.volumes import dedupe_volumes, filter_spinoff_volumes

logger = logging.getLogger(__name__)

ADAPTATION_SUFFIXES: dict[MediaType, str] = {
    MediaType.MANGA: "Manga",
    MediaType.LIGHT_NOVEL: "Light Novel",
}


def primary_media_type(volumes: Sequence[Volume]) -> MediaType:
    """Manga if any manga volumes, else light novel if any, else unknown."""
    kinds = {v.media_type for v in volumes}
    if MediaType.MANGA in kinds:
        return MediaType.MANGA
    if MediaType.LIGHT_NOVEL in kinds:
        return MediaType.LIGHT_NOVEL
    return MediaType.UNKNOWN


def _related_from_sections(sections: Sequence[Section]) -> list[RelatedSeries]:
    """Group non-main sections by (name, relationship, media type), in page order."""
    groups: dict[tuple[str, SeriesRelationship, MediaType], list[Volume]] = {}
    for section in sections:
        if section.relationship is SeriesRelationship.MAIN:
            continue
        key = (section.name, section.relationship, section.media_type)
        groups.setdefault(key, []).extend(section.volumes)

    return [
        RelatedSeries(
            title=name,
            relationship=relationship,
            volumes=tuple(dedupe_volumes(volumes)),
            media_type=media_type,
        )
        for (name, relationship, media_type), volumes in groups.items()
    ]


def assemble_series(
    title: str,
    page_id: int,
    sections: Sequence[Section],
    markup: str,
) -> Series:
    """
    Build the final Series record from parsed sections.

    Args:
        title: Canonical series title
        page_id: Page id of the chosen page
        sections: Parsed sections of the chosen page
        markup: Full page markup (for completion status and author)

    Returns:
        Series with deduplicated, ordered volumes and optional related series
    """
    main_volumes = filter_spinoff_volumes(
        v
        for section in sections
        if section.relationship is SeriesRelationship.MAIN
        for v in section.volumes
    )
    primary = primary_media_type(main_volumes)

    series_volumes = dedupe_volumes(
        v for v in main_volumes if v.media_type in (primary, MediaType.UNKNOWN)
    )

    related: list[RelatedSeries] = []
    for media_type, suffix in ADAPTATION_SUFFIXES.items():
        if media_type is primary:
            continue
        other = [v for v in main_volumes if v.media_type is media_type]
        if other:
            related.append(
                RelatedSeries(
                    title=f"{title} ({suffix})",
                    relationship=SeriesRelationship.ADAPTATION,
                    volumes=tuple(dedupe_volumes(other)),
                    media_type=media_type,
                )
            )
    related.extend(_related_from_sections(sections))

    series = Series(
        title=title,
        page_id=page_id,
        volumes=tuple(series_volumes),
        total_volumes=len(series_volumes),
        is_complete=check_series_complete(markup),
        media_type=primary if primary is not MediaType.UNKNOWN else MediaType.MANGA,
        author=extract_author(markup),
        related_series=tuple(related) or None,
    )
    logger.info(
        f"Assembled '{title}': {series.total_volumes} {series.media_type.value} volume(s), "
        f"{len(related)} related series"
    )
    return series


def expand_related(series: Series) -> list[Series]:
    """
    Main series followed by one Series per related series.

    Related entries share the page id, completion flag and author of the
    main series and carry no related series of their own.
    """
    expanded = [series]
    for related in series.related_series or ():
        expanded.append(
            Series(
                title=related.title,
                page_id=series.page_id,
                volumes=related.volumes,
                total_volumes=len(related.volumes),
                is_complete=series.is_complete,
                media_type=(
                    related.media_type
                    if related.media_type is not MediaType.UNKNOWN
                    else MediaType.MANGA
                ),
                author=series.author,
            )
        )
    return expanded
