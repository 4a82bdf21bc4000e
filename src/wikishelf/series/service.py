"""
Series lookup service.

Ties the page source (WikipediaClient or any PageSource), candidate
selection, section parsing and series assembly together, and caches the
parsed results under parser-versioned keys.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable

from pydantic import ValidationError as PydanticValidationError

from wikishelf.models import RelatedSeries, SearchCandidate, Series, Volume
from wikishelf.parsing.markup import canonical_series_title
from wikishelf.parsing.sections import parse_sections
from wikishelf.series.assembler import assemble_series, expand_related
from wikishelf.series.selector import (
    DEFAULT_EARLY_EXIT_VOLUMES,
    ProbeResult,
    build_probe_titles,
    probe_pages,
    rank_candidates,
)
from wikishelf.wiki.cache import KIND_ALL_SERIES, KIND_SERIES, JsonCache
from wikishelf.wiki.client import PageSource

logger = logging.getLogger(__name__)


class SeriesService:
    """Look up series bibliographies by free-text query.

    Example:
        >>> with WikipediaClient.from_settings(settings) as client:
        ...     service = SeriesService(client)
        ...     series = service.get_series("demon slayer")
    """

    def __init__(
        self,
        source: PageSource,
        *,
        cache: JsonCache | None = None,
        early_exit_volumes: int = DEFAULT_EARLY_EXIT_VOLUMES,
        extra_excluded_keywords: Iterable[str] = (),
    ) -> None:
        self.source = source
        self.cache = cache
        self.early_exit_volumes = early_exit_volumes
        self.extra_excluded_keywords = tuple(extra_excluded_keywords)

    # -------------------------------------------------------------------------
    # Cache helpers
    # -------------------------------------------------------------------------

    def _cached_series(self, kind: str, query: str) -> list[Series] | None:
        if self.cache is None:
            return None
        cached = self.cache.get(kind, query)
        if cached is None:
            return None
        try:
            return [Series.model_validate(item) for item in cached]
        except (PydanticValidationError, TypeError) as e:
            logger.debug(f"Discarding stale {kind} cache entry for '{query}': {e}")
            return None

    def _store_series(self, kind: str, query: str, series: list[Series]) -> None:
        if self.cache is not None:
            self.cache.set(kind, query, [s.to_json_dict() for s in series])

    # -------------------------------------------------------------------------
    # Lookup
    # -------------------------------------------------------------------------

    def find_candidates(self, query: str) -> list[SearchCandidate]:
        """Search and rank candidate pages for ``query``."""
        titles = self.source.search_titles(query)
        return rank_candidates(titles, query, self.extra_excluded_keywords)

    def find_page(self, query: str) -> ProbeResult | None:
        """
        Pick the page holding the series' volume list.

        Returns:
            ProbeResult for the chosen page, or None when the search has no
            results or no candidate page lists any volume
        """
        titles = self.source.search_titles(query)
        if not titles:
            logger.info(f"No search results for '{query}'")
            return None

        ranked = rank_candidates(titles, query, self.extra_excluded_keywords)
        top_title = ranked[0].title if ranked else None
        logger.info(f"Best search result for '{query}': {top_title}")

        probes = build_probe_titles(query, top_title, titles)
        result = probe_pages(probes, self.source.fetch_page_by_title, self.early_exit_volumes)
        if result is None:
            logger.info(f"No volume list found for '{query}'")
        return result

    def get_series(self, query: str) -> Series | None:
        """
        Main series bibliography for a query.

        Args:
            query: Series name as typed by the user

        Returns:
            Series, or None if nothing suitable was found

        Raises:
            WikipediaError: On transport failure (not caught here)
        """
        cached = self._cached_series(KIND_SERIES, query)
        if cached:
            logger.debug(f"Cache hit for series: '{query}'")
            return cached[0]

        result = self.find_page(query)
        if result is None:
            return None

        series = assemble_series(
            title=canonical_series_title(result.page.title),
            page_id=result.page.page_id,
            sections=list(result.sections),
            markup=result.markup,
        )
        self._store_series(KIND_SERIES, query, [series])
        return series

    def _query_page_related(self, query: str, series: Series) -> list[RelatedSeries]:
        """Related series from the page titled ``query`` that the series lacks."""
        page = self.source.fetch_page_by_title(query)
        if page is None or page.page_id == series.page_id:
            return []

        sections = parse_sections(page.markup, series.title)
        other = assemble_series(series.title, page.page_id, sections, page.markup)
        known = {r.title for r in series.related_series or ()}
        found = [r for r in other.related_series or () if r.title not in known]
        if found:
            logger.info(f"Found {len(found)} more related series on '{page.title}'")
        return found

    def get_all_series_from_page(self, query: str) -> list[Series]:
        """
        Main series followed by each related series as its own Series.

        Related series listed on the page titled exactly ``query`` are added
        when that page is not the one the series was read from.

        Returns:
            List of series (empty if nothing was found)
        """
        cached = self._cached_series(KIND_ALL_SERIES, query)
        if cached:
            logger.debug(f"Cache hit for all series: '{query}'")
            return cached

        series = self.get_series(query)
        if series is None:
            return []

        extra = self._query_page_related(query, series)
        if extra:
            related = (*(series.related_series or ()), *extra)
            series = series.model_copy(update={"related_series": related})

        expanded = expand_related(series)
        self._store_series(KIND_ALL_SERIES, query, expanded)
        return expanded

    def get_series_volumes(self, query: str) -> list[Volume]:
        """Volumes of the main series (empty if not found)."""
        series = self.get_series(query)
        return list(series.volumes) if series is not None else []

    def get_series_isbns(self, query: str) -> list[str]:
        """English ISBNs of the main series' volumes, in volume order."""
        return [v.english_isbn for v in self.get_series_volumes(query) if v.english_isbn]
