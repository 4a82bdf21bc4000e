"""
Bibliography records shared across the parsing and series layers.

All records are frozen pydantic models. Field names are snake_case in Python;
JSON output (``to_json_dict``) uses the camelCase aliases consumers expect,
e.g. ``volumeNumber``, ``englishISBN``, ``relatedSeries``.
"""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


class MediaType(str, Enum):
    """Publication medium of a volume or section."""

    MANGA = "manga"
    LIGHT_NOVEL = "light_novel"
    UNKNOWN = "unknown"


class SeriesRelationship(str, Enum):
    """How a section or related series relates to the main series."""

    MAIN = "main"
    SPINOFF = "spinoff"
    SEQUEL = "sequel"
    SIDE_STORY = "side_story"
    ANTHOLOGY = "anthology"
    PREQUEL = "prequel"
    ADAPTATION = "adaptation"


# Output ordering: manga first, then light novels, then anything else
MEDIA_TYPE_ORDER: dict[MediaType, int] = {
    MediaType.MANGA: 0,
    MediaType.LIGHT_NOVEL: 1,
    MediaType.UNKNOWN: 2,
}


class _Record(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    def to_json_dict(self) -> dict[str, Any]:
        """Serialize with camelCase aliases, omitting unset optional fields."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class Volume(_Record):
    """A single numbered volume from a volume-list template.

    Release dates are kept exactly as authored on the page.
    """

    volume_number: int = Field(alias="volumeNumber", gt=0)
    title: str | None = None
    japanese_isbn: str | None = Field(default=None, alias="japaneseISBN")
    english_isbn: str | None = Field(default=None, alias="englishISBN")
    japanese_release_date: str | None = Field(default=None, alias="japaneseReleaseDate")
    english_release_date: str | None = Field(default=None, alias="englishReleaseDate")
    media_type: MediaType = Field(default=MediaType.UNKNOWN, alias="mediaType")


class Section(_Record):
    """A heading-delimited block of the page and the volumes listed under it."""

    name: str
    heading_level: int = Field(alias="headingLevel", ge=2, le=4)
    media_type: MediaType = Field(default=MediaType.UNKNOWN, alias="mediaType")
    relationship: SeriesRelationship = SeriesRelationship.MAIN
    volumes: tuple[Volume, ...] = ()


class RelatedSeries(_Record):
    """A spin-off, sequel, adaptation, ... found on the main series' page."""

    title: str
    relationship: SeriesRelationship
    volumes: tuple[Volume, ...] = ()
    media_type: MediaType = Field(default=MediaType.UNKNOWN, alias="mediaType")

    @field_validator("relationship")
    @classmethod
    def reject_main(cls, v: SeriesRelationship) -> SeriesRelationship:
        """A related series is by definition not the main series."""
        if v is SeriesRelationship.MAIN:
            raise ValueError("related series cannot have relationship 'main'")
        return v


class Series(_Record):
    """Final bibliography for one series."""

    title: str
    page_id: int = Field(alias="pageId")
    volumes: tuple[Volume, ...] = ()
    total_volumes: int = Field(alias="totalVolumes", ge=0)
    is_complete: bool = Field(default=False, alias="isComplete")
    media_type: MediaType = Field(default=MediaType.MANGA, alias="mediaType")
    author: str | None = None
    related_series: tuple[RelatedSeries, ...] | None = Field(default=None, alias="relatedSeries")


class SearchCandidate(_Record):
    """Scored search result used while ranking candidate pages."""

    title: str
    score: int


class WikiPage(_Record):
    """Raw page as returned by the fetch layer (after redirects)."""

    page_id: int = Field(alias="pageId")
    title: str
    markup: str
