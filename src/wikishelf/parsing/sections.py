"""
Section parser for volume-list pages.

Turns page markup into an ordered list of Section records, each carrying the
volumes listed under it. The scan is an explicit fold over the lines of the
page: every line maps one immutable ParserState to the next, so there is no
mutable "current X" variable shared across lines.

Recognized structure
====================
- Headings ``== X ==`` through ``==== X ====`` open a new section. The
  heading path (one slot per level 2..4) is kept as a tuple and truncated on
  update, so the parent of a heading is a pure lookup.
- ``{{Graphic novel list`` opens a volume record (``/header`` variants are
  ignored). Following ``| Field = value`` lines populate it.
- "Part N" headings renumber volumes into one continuous sequence.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field, replace
from functools import reduce

from wikishelf.models import MediaType, Section, SeriesRelationship, Volume
from wikishelf.parsing.classifier import classify_section
from wikishelf.parsing.isbn import clean_isbn
from wikishelf.parsing.markup import clean_field_value, clean_heading
from wikishelf.parsing.media_type import detect_media_type, is_media_heading

logger = logging.getLogger(__name__)

_HEADING = re.compile(r"^(={2,4})\s*([^=].*?)\s*={2,4}\s*$")
_FIELD = re.compile(r"^\s*\|\s*(\w+)\s*=\s*(.+)")
_PART = re.compile(r"part\s*(\d+)", re.IGNORECASE)
_LEADING_DIGITS = re.compile(r"^\d+")

VOLUME_TEMPLATE_MARKER = "{{graphic novel list"
HEADER_VARIANT_MARKER = "/header"

MIN_HEADING_LEVEL = 2
MAX_HEADING_LEVEL = 4

_TITLE_FIELDS = frozenset({"licensedtitle", "originaltitle", "title"})
_JAPANESE_ISBN_FIELDS = frozenset({"isbn", "originalisbn"})
_JAPANESE_DATE_FIELDS = frozenset({"reldate", "originalreldate"})


# =============================================================================
# Parser state
# =============================================================================


@dataclass(frozen=True)
class VolumeDraft:
    """Volume record still being populated from template fields."""

    media_type: MediaType
    volume_number: int | None = None
    title: str | None = None
    japanese_isbn: str | None = None
    english_isbn: str | None = None
    japanese_release_date: str | None = None
    english_release_date: str | None = None


@dataclass(frozen=True)
class PartState:
    """Continuation numbering across "Part N" headings."""

    current: int | None = None
    offset: int = 0
    last_in_part: int = 0

    def enter(self, part_number: int) -> PartState:
        """Switch to ``part_number``, carrying the finished part's volumes into the offset."""
        if self.current is not None and part_number > self.current:
            return PartState(current=part_number, offset=self.offset + self.last_in_part)
        return replace(self, current=part_number)

    def adjust(self, raw_number: int) -> tuple[int, PartState]:
        """Adjusted number for a finished volume and the updated state."""
        adjusted = raw_number + self.offset if self.current is not None else raw_number
        return adjusted, replace(self, last_in_part=max(self.last_in_part, raw_number))


@dataclass(frozen=True)
class SectionDraft:
    name: str
    heading_level: int
    media_type: MediaType
    relationship: SeriesRelationship
    volumes: tuple[Volume, ...] = ()

    def to_section(self) -> Section:
        return Section(
            name=self.name,
            heading_level=self.heading_level,
            media_type=self.media_type,
            relationship=self.relationship,
            volumes=self.volumes,
        )


@dataclass(frozen=True)
class ParserState:
    """Snapshot of the scan after one line."""

    main_title: str
    headings: tuple[str | None, ...] = (None, None, None)
    media_type: MediaType = MediaType.UNKNOWN
    part: PartState = field(default_factory=PartState)
    section: SectionDraft | None = None
    volume: VolumeDraft | None = None
    finished: tuple[SectionDraft, ...] = ()

    def parent_heading(self, level: int) -> str | None:
        """
        Nearest enclosing level-3/4 heading above ``level``.

        Without one, a level-2 media heading ("==Light novels==") is the
        parent, so works listed directly under it are classified against it.
        """
        for parent_level in range(level - 1, 2, -1):
            heading = self.headings[parent_level - MIN_HEADING_LEVEL]
            if heading:
                return heading
        top = self.headings[0]
        if level > MIN_HEADING_LEVEL and top and is_media_heading(top):
            return top
        return None


# =============================================================================
# Transitions
# =============================================================================


def _close_volume(state: ParserState) -> ParserState:
    """Finish the open volume into the current section (dropped if unnumbered)."""
    draft = state.volume
    if draft is None:
        return state
    if draft.volume_number is None or state.section is None:
        return replace(state, volume=None)

    adjusted, part = state.part.adjust(draft.volume_number)
    volume = Volume(
        volume_number=adjusted,
        title=draft.title,
        japanese_isbn=draft.japanese_isbn,
        english_isbn=draft.english_isbn,
        japanese_release_date=draft.japanese_release_date,
        english_release_date=draft.english_release_date,
        media_type=draft.media_type,
    )
    section = replace(state.section, volumes=(*state.section.volumes, volume))
    return replace(state, volume=None, part=part, section=section)


def _close_section(state: ParserState) -> ParserState:
    if state.section is None:
        return state
    return replace(state, section=None, finished=(*state.finished, state.section))


def _on_heading(state: ParserState, level: int, raw_text: str) -> ParserState:
    state = _close_volume(state)
    state = _close_section(state)

    name = clean_heading(raw_text)
    slot = level - MIN_HEADING_LEVEL
    headings = (*state.headings[:slot], name) + (None,) * (len(state.headings) - slot - 1)
    state = replace(state, headings=headings)

    heading_media = detect_media_type(name)
    if heading_media is not MediaType.UNKNOWN:
        state = replace(state, media_type=heading_media, part=PartState())

    part_match = _PART.search(name)
    if part_match:
        state = replace(state, part=state.part.enter(int(part_match.group(1))))

    parent = state.parent_heading(level)
    relationship = classify_section(name, state.main_title, parent)
    logger.debug(f"Section '{name}' (level {level}, parent={parent!r}) -> {relationship.value}")

    section = SectionDraft(
        name=name,
        heading_level=level,
        media_type=state.media_type,
        relationship=relationship,
    )
    return replace(state, section=section)


def _on_volume_start(state: ParserState) -> ParserState:
    state = _close_volume(state)
    if state.section is None:
        # Volumes before any heading belong to an implicit main section
        implicit = SectionDraft(
            name=state.main_title,
            heading_level=MIN_HEADING_LEVEL,
            media_type=state.media_type,
            relationship=SeriesRelationship.MAIN,
        )
        state = replace(state, section=implicit)
    return replace(state, volume=VolumeDraft(media_type=state.media_type))


def _apply_field(draft: VolumeDraft, name: str, raw_value: str) -> VolumeDraft:
    """Populate one template field; unknown or malformed fields are ignored."""
    value = clean_field_value(raw_value)

    if name == "volumenumber":
        match = _LEADING_DIGITS.match(value)
        if match and int(match.group(0)) > 0:
            return replace(draft, volume_number=int(match.group(0)))
        return draft

    if name in _JAPANESE_ISBN_FIELDS:
        isbn = clean_isbn(value)
        return replace(draft, japanese_isbn=isbn) if isbn else draft

    if name == "licensedisbn":
        isbn = clean_isbn(value)
        return replace(draft, english_isbn=isbn) if isbn else draft

    if name in _JAPANESE_DATE_FIELDS:
        return replace(draft, japanese_release_date=value) if value else draft

    if name == "licensedreldate":
        return replace(draft, english_release_date=value) if value else draft

    if name in _TITLE_FIELDS and value and not draft.title:
        return replace(draft, title=value)

    return draft


def step(state: ParserState, line: str) -> ParserState:
    """Advance the parser by one line."""
    heading = _HEADING.match(line)
    if heading:
        return _on_heading(state, len(heading.group(1)), heading.group(2))

    lower = line.lower()
    if VOLUME_TEMPLATE_MARKER in lower and HEADER_VARIANT_MARKER not in lower:
        return _on_volume_start(state)

    if state.volume is None:
        return state

    field_match = _FIELD.match(line)
    if not field_match:
        return state
    return replace(
        state,
        volume=_apply_field(state.volume, field_match.group(1).lower(), field_match.group(2)),
    )


def finish(state: ParserState) -> list[Section]:
    """Close anything still open and return the non-empty sections."""
    state = _close_section(_close_volume(state))
    return [draft.to_section() for draft in state.finished if draft.volumes]


# =============================================================================
# Public API
# =============================================================================


def parse_sections(markup: str, main_title: str) -> list[Section]:
    """
    Parse page markup into sections with their volumes.

    Args:
        markup: Page markup (transclusions already expanded)
        main_title: Title of the series/page, used to classify headings

    Returns:
        Non-empty sections in page order; volumes in line order

    Example:
        >>> markup = "==Manga==\\n{{Graphic novel list\\n| VolumeNumber = 1\\n}}"
        >>> [(s.name, len(s.volumes)) for s in parse_sections(markup, "Foo")]
        [('Manga', 1)]
    """
    initial = ParserState(main_title=main_title)
    sections = finish(reduce(step, markup.splitlines(), initial))
    logger.debug(
        f"Parsed {len(sections)} section(s), "
        f"{sum(len(s.volumes) for s in sections)} volume(s) for '{main_title}'"
    )
    return sections


def count_volumes(sections: list[Section]) -> int:
    """Total number of volumes across sections."""
    return sum(len(section.volumes) for section in sections)
