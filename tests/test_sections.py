"""Tests for the section parser."""

from __future__ import annotations

from wikishelf.models import MediaType, SeriesRelationship
from wikishelf.parsing.sections import ParserState, PartState, parse_sections, step

from tests.conftest import volume_template, volumes_block


class TestBasicParsing:
    """Sections, volumes and fields."""

    def test_fields_are_populated(self) -> None:
        """Recognized fields fill the volume record."""
        markup = "\n".join(
            [
                "==Volume list==",
                volume_template(
                    1,
                    title="[[Cruelty]]",
                    isbn="978-4-08-880723-6",
                    licensed_isbn="978-1-9747-0052-3",
                    reldate="July 4, 2016<ref>x</ref>",
                    licensed_reldate="July 3, 2018",
                ),
            ]
        )
        sections = parse_sections(markup, "Demon Slayer")
        assert len(sections) == 1
        volume = sections[0].volumes[0]
        assert volume.volume_number == 1
        assert volume.title == "Cruelty"
        assert volume.japanese_isbn == "9784088807236"
        assert volume.english_isbn == "9781974700523"
        assert volume.japanese_release_date == "July 4, 2016"
        assert volume.english_release_date == "July 3, 2018"

    def test_field_names_are_case_insensitive(self) -> None:
        """Field names match regardless of case."""
        markup = "==Manga==\n{{Graphic novel list\n| volumenumber = 4\n| LICENSEDISBN = 1569319014\n}}"
        volume = parse_sections(markup, "X")[0].volumes[0]
        assert volume.volume_number == 4
        assert volume.english_isbn == "9781569319017"

    def test_bare_isbn_and_reldate_are_japanese(self) -> None:
        """Plain ISBN/RelDate fields (any case) fill the Japanese edition fields."""
        markup = "\n".join(
            [
                "==Manga==",
                "{{Graphic novel list",
                " | VolumeNumber = 1",
                " | isbn = 978-4-08-880723-6",
                " | RELDATE = July 4, 2016",
                "}}",
            ]
        )
        volume = parse_sections(markup, "X")[0].volumes[0]
        assert volume.japanese_isbn == "9784088807236"
        assert volume.japanese_release_date == "July 4, 2016"
        assert volume.english_isbn is None
        assert volume.english_release_date is None

    def test_first_title_wins(self) -> None:
        """Later title fields do not overwrite an earlier title."""
        markup = "\n".join(
            [
                "==Volumes==",
                "{{Graphic novel list",
                " | VolumeNumber = 1",
                " | LicensedTitle = English Title",
                " | OriginalTitle = Japanese Title",
                " | Title = Other",
                "}}",
            ]
        )
        assert parse_sections(markup, "X")[0].volumes[0].title == "English Title"

    def test_empty_title_does_not_block_later_title(self) -> None:
        """A title that cleans to nothing does not count."""
        markup = "==Volumes==\n{{Graphic novel list\n| VolumeNumber = 1\n| LicensedTitle = {{tba}}\n| OriginalTitle = Real\n}}"
        assert parse_sections(markup, "X")[0].volumes[0].title == "Real"

    def test_volume_without_number_is_discarded(self) -> None:
        """Records missing a volume number are dropped."""
        markup = "==Volumes==\n" + volume_template(None, title="Orphan") + "\n" + volume_template(2)
        volumes = parse_sections(markup, "X")[0].volumes
        assert [v.volume_number for v in volumes] == [2]

    def test_malformed_number_is_skipped(self) -> None:
        """Non-numeric and zero volume numbers are ignored per field."""
        markup = "==Volumes==\n" + volume_template("TBA") + "\n" + volume_template(0) + "\n" + volume_template("3 (special)")
        volumes = parse_sections(markup, "X")[0].volumes
        assert [v.volume_number for v in volumes] == [3]

    def test_invalid_isbn_is_not_stored(self) -> None:
        """Unusable ISBNs leave the field empty."""
        markup = "==Volumes==\n" + volume_template(1, isbn="—", licensed_isbn="TBA")
        volume = parse_sections(markup, "X")[0].volumes[0]
        assert volume.japanese_isbn is None
        assert volume.english_isbn is None

    def test_header_template_does_not_open_volume(self) -> None:
        """The /header variant is not a volume."""
        markup = "==Volumes==\n{{Graphic novel list/header\n| VolumeNumber = 9\n}}"
        assert parse_sections(markup, "X") == []

    def test_fields_outside_volume_ignored(self) -> None:
        """Field lines before any volume template are ignored."""
        markup = "{{Infobox\n| VolumeNumber = 7\n}}\n==Volumes==\n" + volume_template(1)
        sections = parse_sections(markup, "X")
        assert [v.volume_number for v in sections[0].volumes] == [1]

    def test_empty_sections_dropped(self) -> None:
        """Sections without volumes are not returned."""
        markup = "==Plot==\ntext\n==Volumes==\n" + volume_template(1) + "\n==Reception==\ntext"
        sections = parse_sections(markup, "X")
        assert [s.name for s in sections] == ["Volumes"]

    def test_no_templates(self) -> None:
        """Pages without volume templates yield no sections."""
        assert parse_sections("==Plot==\nSome text", "X") == []


class TestSectionStructure:
    """Headings, implicit section and ordering."""

    def test_implicit_default_section(self) -> None:
        """Volumes before any heading land in an implicit main section."""
        markup = volumes_block(range(1, 3))
        sections = parse_sections(markup, "List of Foo chapters")
        assert len(sections) == 1
        assert sections[0].name == "List of Foo chapters"
        assert sections[0].heading_level == 2
        assert sections[0].relationship is SeriesRelationship.MAIN
        assert [v.volume_number for v in sections[0].volumes] == [1, 2]

    def test_heading_levels(self) -> None:
        """Heading level is the number of '=' signs."""
        markup = "\n".join(
            ["==Manga==", volume_template(1), "===Volumes===", volume_template(2), "====Part 1====", volume_template(3)]
        )
        levels = [s.heading_level for s in parse_sections(markup, "X")]
        assert levels == [2, 3, 4]

    def test_heading_text_is_cleaned(self) -> None:
        """Italic markup is removed from heading names."""
        markup = "====''Part 1''====\n" + volume_template(1)
        assert parse_sections(markup, "X")[0].name == "Part 1"

    def test_output_preserves_line_order(self) -> None:
        """Sections and volumes follow input order (no sorting)."""
        markup = "\n".join(["==B==", volume_template(5), volume_template(2), "==A==", volume_template(1)])
        sections = parse_sections(markup, "X")
        assert [s.name for s in sections] == ["B", "A"]
        assert [v.volume_number for v in sections[0].volumes] == [5, 2]

    def test_media_type_from_heading(self) -> None:
        """Volumes are tagged with the media type of the enclosing heading."""
        markup = "\n".join(["==Manga==", volume_template(1), "==Light novels==", volume_template(1)])
        sections = parse_sections(markup, "X")
        assert sections[0].media_type is MediaType.MANGA
        assert sections[0].volumes[0].media_type is MediaType.MANGA
        assert sections[1].media_type is MediaType.LIGHT_NOVEL
        assert sections[1].volumes[0].media_type is MediaType.LIGHT_NOVEL

    def test_media_type_inherited_by_subsections(self) -> None:
        """Subsections without a media word keep the current media type."""
        markup = "\n".join(["==Light novels==", "===Part 1===", volume_template(1)])
        section = parse_sections(markup, "X")[0]
        assert section.media_type is MediaType.LIGHT_NOVEL

    def test_nested_spinoff_under_media_heading(self) -> None:
        """Level-4 entries nested under a media heading are classified with it as parent."""
        markup = "\n".join(
            [
                "==Media==",
                "===Light novels===",
                "====Ascendance of a Bookworm====",
                volume_template(1),
                "====Hannelore's Fifth Year====",
                volume_template(1),
            ]
        )
        sections = parse_sections(markup, "Ascendance of a Bookworm")
        assert [s.relationship for s in sections] == [
            SeriesRelationship.MAIN,
            SeriesRelationship.SPINOFF,
        ]

    def test_level3_spinoff_under_level2_media_heading(self) -> None:
        """A level-2 media heading is the parent when no level-3/4 heading encloses."""
        markup = "\n".join(
            [
                "==Light novels==",
                "===Ascendance of a Bookworm===",
                volume_template(1),
                "===Hannelore's Fifth Year===",
                volume_template(1),
            ]
        )
        sections = parse_sections(markup, "Ascendance of a Bookworm")
        assert [(s.name, s.relationship) for s in sections] == [
            ("Ascendance of a Bookworm", SeriesRelationship.MAIN),
            ("Hannelore's Fifth Year", SeriesRelationship.SPINOFF),
        ]

    def test_non_media_level2_heading_is_not_parent(self) -> None:
        """Level-2 headings that name no media type give no parent."""
        state = ParserState(main_title="X", headings=("Reception", "Other", None))
        assert state.parent_heading(3) is None
        media = ParserState(main_title="X", headings=("Manga", "Other", None))
        assert media.parent_heading(3) == "Manga"
        assert media.parent_heading(2) is None

    """Continuous numbering across 'Part N' headings."""

    def test_parts_are_offset(self) -> None:
        """Part 2 volumes continue after Part 1's highest volume."""
        markup = "\n".join(
            [
                "==Manga==",
                "===Part 1===",
                *(volume_template(n) for n in (1, 2, 3)),
                "===Part 2===",
                *(volume_template(n) for n in (1, 2)),
            ]
        )
        sections = parse_sections(markup, "JoJo")
        numbers = [v.volume_number for s in sections for v in s.volumes]
        assert numbers == [1, 2, 3, 4, 5]

    def test_three_parts(self) -> None:
        """Offsets accumulate across several parts."""
        markup = "\n".join(
            [
                "====''Part 1''====",
                *(volume_template(n) for n in (1, 2)),
                "====''Part 2''====",
                *(volume_template(n) for n in (1, 2, 3)),
                "====''Part 3''====",
                volume_template(1),
            ]
        )
        numbers = [v.volume_number for s in parse_sections(markup, "X") for v in s.volumes]
        assert numbers == [1, 2, 3, 4, 5, 6]

    def test_media_switch_resets_parts(self) -> None:
        """A new media-type heading resets part numbering."""
        markup = "\n".join(
            [
                "==Manga==",
                "===Part 1===",
                *(volume_template(n) for n in (1, 2)),
                "===Part 2===",
                volume_template(1),
                "==Light novels==",
                "===Part 1===",
                volume_template(1),
            ]
        )
        sections = parse_sections(markup, "X")
        assert [v.volume_number for v in sections[-1].volumes] == [1]
        assert [v.volume_number for v in sections[1].volumes] == [3]

    def test_without_parts_numbers_are_raw(self) -> None:
        """No offset is applied when no part is active."""
        markup = "==Volumes==\n" + volumes_block([7, 8])
        numbers = [v.volume_number for v in parse_sections(markup, "X")[0].volumes]
        assert numbers == [7, 8]


class TestPartState:
    """Tests for the PartState transitions."""

    def test_enter_first_part(self) -> None:
        """Entering the first part sets no offset."""
        state = PartState().enter(1)
        assert state == PartState(current=1, offset=0, last_in_part=0)

    def test_enter_higher_part_accumulates(self) -> None:
        """Moving to a higher part adds the finished part's highest volume."""
        state = PartState(current=1, offset=0, last_in_part=3).enter(2)
        assert state == PartState(current=2, offset=3, last_in_part=0)

    def test_adjust(self) -> None:
        """Adjusting adds the offset and tracks the highest raw number."""
        adjusted, state = PartState(current=2, offset=3, last_in_part=1).adjust(2)
        assert adjusted == 5
        assert state.last_in_part == 2


class TestStep:
    """The fold step is a pure function of (state, line)."""

    def test_step_does_not_mutate(self) -> None:
        """Each step returns a new snapshot."""
        initial = ParserState(main_title="X")
        after = step(initial, "==Manga==")
        assert initial.section is None
        assert after.section is not None
        assert after.media_type is MediaType.MANGA

    def test_heading_path_truncated(self) -> None:
        """A new level-2 heading clears deeper heading slots."""
        state = ParserState(main_title="X")
        for line in ("==A==", "===B===", "====C====", "==D=="):
            state = step(state, line)
        assert state.headings == ("D", None, None)
