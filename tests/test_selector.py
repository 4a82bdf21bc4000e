"""Tests for candidate scoring, ranking and page probing."""

from __future__ import annotations

import pytest

from wikishelf.exceptions import WikipediaError
from wikishelf.models import WikiPage
from wikishelf.series.selector import (
    build_probe_titles,
    is_excluded,
    normalize_for_compare,
    probe_pages,
    rank_candidates,
    score_candidate,
    select_best_candidate,
)

from tests.conftest import FakePageSource, volumes_block


class TestNormalization:
    """Tests for normalize_for_compare() and is_excluded()."""

    def test_normalize(self) -> None:
        """Case, the multiplication sign, colons and whitespace are normalized."""
        assert normalize_for_compare("Spy × Family:  Code White") == "spy x family code white"

    def test_normalize_curly_quotes(self) -> None:
        """Curly quotes become straight quotes."""
        assert normalize_for_compare("JoJo’s Bizarre Adventure") == "jojo's bizarre adventure"

    def test_excluded_titles(self) -> None:
        """Film, TV and episode pages are excluded."""
        assert is_excluded("One Piece Film: Red")
        assert is_excluded("Naruto Shippuden (TV series)")
        assert is_excluded("List of Bleach episodes")
        assert is_excluded("The Rising of the Shield Hero Season 2")

    def test_non_canonical_titles(self) -> None:
        """Known decoy titles are excluded."""
        assert is_excluded("One Piece: Stampede")

    def test_extra_keywords(self) -> None:
        """Configured keywords extend the exclusion list."""
        assert not is_excluded("Foo soundtrack")
        assert is_excluded("Foo soundtrack", ["soundtrack"])

    def test_regular_title_not_excluded(self) -> None:
        """Ordinary series titles pass."""
        assert not is_excluded("List of Demon Slayer: Kimetsu no Yaiba chapters")


class TestScoring:
    """Tests for score_candidate() and rank_candidates()."""

    def test_list_page_scores_highest(self) -> None:
        """The chapter list page outranks the franchise page."""
        query = "demon slayer"
        list_page = "List of Demon Slayer: Kimetsu no Yaiba chapters"
        franchise = "Demon Slayer: Kimetsu no Yaiba"
        assert score_candidate(list_page, query) == 420
        assert score_candidate(franchise, query) == 30

    def test_manga_page_bonus(self) -> None:
        """An exact '<query> (manga)' page gets both manga bonuses."""
        # +300 (manga), +200 exact manga page, +50 contains query, +10 length
        assert score_candidate("Blue Box (manga)", "blue box") == 560

    def test_bare_title_penalized(self) -> None:
        """A title equal to the query is treated as a likely disambiguation page."""
        # -50 equal, +50 contains, +10 length, -50 short
        assert score_candidate("Bleach", "bleach") == -40

    def test_manga_page_beats_bare_title(self) -> None:
        """TV pages are excluded and the (manga) page outranks the bare title."""
        ranked = rank_candidates(
            ["Demon Slayer (manga)", "Demon Slayer", "Demon Slayer (2019 TV series)"],
            "Demon Slayer",
        )
        assert [(c.title, c.score) for c in ranked] == [
            ("Demon Slayer (manga)", 560),
            ("Demon Slayer", -40),
        ]

    def test_rank_order(self) -> None:
        """Candidates are sorted best first, excluded titles dropped."""
        titles = [
            "Demon Slayer: Kimetsu no Yaiba",
            "Demon Slayer: Kimetsu no Yaiba – The Movie: Mugen Train",
            "List of Demon Slayer: Kimetsu no Yaiba chapters",
        ]
        ranked = rank_candidates(titles, "demon slayer")
        assert [c.title for c in ranked] == [
            "List of Demon Slayer: Kimetsu no Yaiba chapters",
            "Demon Slayer: Kimetsu no Yaiba",
        ]

    def test_rank_is_stable(self) -> None:
        """Ties keep search order."""
        ranked = rank_candidates(["Foo Bar Baz Qux", "Foo Bar Baz Quux"], "foo")
        assert ranked[0].score == ranked[1].score
        assert [c.title for c in ranked] == ["Foo Bar Baz Qux", "Foo Bar Baz Quux"]

    def test_fallback_when_all_excluded(self) -> None:
        """If every title is excluded, one fallback candidate is returned."""
        ranked = rank_candidates(["Foo (film)", "List of Foo episodes"], "foo")
        assert [c.title for c in ranked] == ["List of Foo episodes"]

    def test_fallback_first_title(self) -> None:
        """Without a looser match the first title is the fallback."""
        ranked = rank_candidates(["Foo (film)", "Foo movie"], "foo")
        assert [c.title for c in ranked] == ["Foo (film)"]

    def test_empty(self) -> None:
        """No titles, no candidates."""
        assert rank_candidates([], "foo") == []
        assert select_best_candidate([], "foo") is None

    def test_select_best(self) -> None:
        """select_best_candidate() returns the top title."""
        assert select_best_candidate(["Blue Box", "Blue Box (manga)"], "blue box") == "Blue Box (manga)"


class TestProbeTitles:
    """Tests for build_probe_titles()."""

    def test_order_and_dedupe(self) -> None:
        """Query list pages first, then top-result variants, then the bare query."""
        probes = build_probe_titles(
            "blue box",
            "Blue Box (manga)",
            ["Blue Box (manga)", "List of Blue Box chapters", "Blue Box"],
        )
        assert probes == [
            "List of blue box chapters",
            "List of blue box manga volumes",
            "List of Blue Box manga volumes",
            "List of Blue Box chapters",
            "Blue Box",
            "Blue Box (manga)",
            "blue box",
            "blue box (manga)",
        ]

    def test_top_list_page_tried_first(self) -> None:
        """A top result that is already a list page is probed right after the query variants."""
        top = "List of One Piece chapters (1–186)"
        probes = build_probe_titles("one piece", top)
        assert probes[2] == top

    def test_subtitle_base_variants(self) -> None:
        """Text before a ':' subtitle gets its own variants."""
        probes = build_probe_titles("frieren", "Frieren: Beyond Journey's End")
        assert "List of Frieren manga volumes" in probes
        assert "Frieren (manga)" in probes
        assert probes.index("Frieren: Beyond Journey's End") < probes.index("Frieren")

    def test_no_top_title(self) -> None:
        """Without search results only query-derived titles remain."""
        assert build_probe_titles("foo", None) == [
            "List of foo chapters",
            "List of foo manga volumes",
            "foo",
            "foo (manga)",
        ]

    def test_other_list_pages_included(self) -> None:
        """Other results that look like list pages are probed."""
        probes = build_probe_titles("foo", "Foo", ["Foo", "List of Foo characters", "Foo volumes (2020)"])
        assert "Foo volumes (2020)" in probes
        assert "List of Foo characters" not in probes


class TestProbePages:
    """Tests for probe_pages()."""

    def test_keeps_largest(self) -> None:
        """The page with the most volumes wins."""
        source = FakePageSource(
            pages={
                "A": volumes_block(range(1, 3)),
                "B": volumes_block(range(1, 6)),
                "C": volumes_block(range(1, 4)),
            }
        )
        result = probe_pages(["A", "B", "C"], source.fetch_page_by_title)
        assert result is not None
        assert result.page.title == "B"
        assert result.volume_count == 5
        assert source.fetched == ["A", "B", "C"]

    def test_tie_keeps_first(self) -> None:
        """Only a strictly larger count replaces the current best."""
        source = FakePageSource(pages={"A": volumes_block([1, 2]), "B": volumes_block([1, 2])})
        result = probe_pages(["A", "B"], source.fetch_page_by_title)
        assert result is not None
        assert result.page.title == "A"

    def test_early_exit(self) -> None:
        """No further page is fetched once one has enough volumes."""
        source = FakePageSource(
            pages={"A": volumes_block(range(1, 11)), "B": volumes_block(range(1, 30))}
        )
        result = probe_pages(["Missing", "A", "B"], source.fetch_page_by_title)
        assert result is not None
        assert result.page.title == "A"
        assert source.fetched == ["Missing", "A"]

    def test_custom_threshold(self) -> None:
        """The early-exit threshold is configurable."""
        source = FakePageSource(pages={"A": volumes_block([1, 2]), "B": volumes_block([1, 2, 3])})
        result = probe_pages(["A", "B"], source.fetch_page_by_title, early_exit_volumes=2)
        assert result is not None
        assert result.page.title == "A"
        assert source.fetched == ["A"]

    def test_none_without_volumes(self) -> None:
        """Pages without volumes never win."""
        source = FakePageSource(pages={"A": "==Plot==\ntext"})
        assert probe_pages(["A", "Missing"], source.fetch_page_by_title) is None

    def test_transclusions_are_expanded(self) -> None:
        """Transcluded chapter lists count towards the page."""
        source = FakePageSource(
            pages={
                "List of Foo chapters": "==Volumes==\n{{:List of Foo chapters (1–3)}}",
                "List of Foo chapters (1–3)": volumes_block([1, 2, 3]),
            }
        )
        result = probe_pages(["List of Foo chapters"], source.fetch_page_by_title)
        assert result is not None
        assert result.volume_count == 3
        assert result.sections[0].name == "Volumes"

    def test_fetch_error_propagates(self) -> None:
        """Transport errors are not swallowed and stop the probing loop."""
        source = FakePageSource(pages={"A": volumes_block([1])})

        def fetch(title: str) -> WikiPage | None:
            if title == "B":
                raise WikipediaError("timed out", title=title)
            return source.fetch_page_by_title(title)

        with pytest.raises(WikipediaError, match="timed out"):
            probe_pages(["A", "B", "C"], fetch)
        assert source.fetched == ["A"]
