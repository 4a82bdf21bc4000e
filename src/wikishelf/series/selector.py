"""
Candidate page selection.

Two stages:

1. **Scoring** - OpenSearch results are scored against the query and
   ranked (stable sort, highest first). Movie/TV/episode style titles are
   excluded outright.
2. **Probing** - an ordered, de-duplicated list of page-title variants is
   derived from the query and the top result. Each variant is fetched and
   parsed in turn; the page yielding the most volumes wins, and probing stops
   early once a page yields "enough" volumes.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass

from wikishelf.models import SearchCandidate, Section, WikiPage
from wikishelf.parsing.markup import inline_transclusions
from wikishelf.parsing.sections import count_volumes, parse_sections

logger = logging.getLogger(__name__)

# Substrings that mark a result as some other kind of work
EXCLUDED_KEYWORDS: tuple[str, ...] = (
    "movie",
    "film",
    " tv ",
    "tv series",
    "season ",
    "episode",
    "ova",
    "special",
)

# Known titles that outrank the real series page but hold no volume list
NON_CANONICAL_KEYWORDS: tuple[str, ...] = ("stampede",)

# Looser filter for the "everything was excluded" fallback
_FALLBACK_EXCLUDED: tuple[str, ...] = ("movie", "film", " tv ", "season")

DEFAULT_EARLY_EXIT_VOLUMES = 10

_QUOTE_VARIANTS = str.maketrans({"‘": "'", "’": "'", "“": '"', "”": '"'})
_WHITESPACE = re.compile(r"\s+")
_MANGA_SUFFIX = re.compile(r"\s*\((?:japanese )?manga\)\s*$", re.IGNORECASE)


# =============================================================================
# Scoring
# =============================================================================


def normalize_for_compare(text: str) -> str:
    """
    Normalize a title for comparison.

    Example:
        >>> normalize_for_compare("Spy × Family:  Code White")
        'spy x family code white'
    """
    lowered = text.lower().replace("×", "x").translate(_QUOTE_VARIANTS)
    return _WHITESPACE.sub(" ", lowered.replace(":", " ")).strip()


def is_excluded(title: str, extra_keywords: Iterable[str] = ()) -> bool:
    """True if the title looks like a film/TV/episode page or a known decoy."""
    normalized = normalize_for_compare(title)
    keywords = (*EXCLUDED_KEYWORDS, *NON_CANONICAL_KEYWORDS, *extra_keywords)
    return any(keyword in normalized for keyword in keywords)


def score_candidate(title: str, query: str) -> int:
    """
    Score one search result title against the query.

    Args:
        title: Search result title
        query: User query

    Returns:
        Integer score (higher is more likely the series page)
    """
    normalized_title = normalize_for_compare(title)
    normalized_query = normalize_for_compare(query)
    score = 0

    if normalized_title.startswith("list of") and (
        "volumes" in normalized_title or "chapters" in normalized_title
    ):
        score += 500

    if "(manga)" in normalized_title:
        score += 300

    if normalized_title == normalized_query:
        # Bare title is often a disambiguation or franchise page
        score -= 50
    elif normalized_title == f"{normalized_query} (manga)":
        score += 200

    if normalized_query in normalized_title:
        score += 50

    if ":" in title and not normalized_title.startswith(normalized_query):
        score -= 100

    if len(title) > len(query) * 2:
        score -= 30

    if 5 < len(title) < 40:
        score += 10

    if len(title) < 15 and "(manga)" not in normalized_title:
        score -= 50

    return score


def rank_candidates(
    titles: Sequence[str],
    query: str,
    extra_excluded: Iterable[str] = (),
) -> list[SearchCandidate]:
    """
    Score and rank search results, best first.

    Excluded titles are dropped. The sort is stable, so ties keep search
    order. If every title is excluded, a single fallback candidate is
    returned: the first title without movie/film/TV/season markers, else the
    first title.

    Args:
        titles: OpenSearch result titles in search order
        query: User query
        extra_excluded: Additional exclusion keywords from configuration

    Returns:
        Ranked candidates (empty only when ``titles`` is empty)
    """
    extra = tuple(k.lower() for k in extra_excluded)
    candidates = [
        SearchCandidate(title=title, score=score_candidate(title, query))
        for title in titles
        if not is_excluded(title, extra)
    ]
    for candidate in candidates:
        logger.debug(f"Candidate '{candidate.title}' scored {candidate.score}")

    if candidates:
        return sorted(candidates, key=lambda c: -c.score)

    if not titles:
        return []

    fallback = next(
        (t for t in titles if not any(k in t.lower() for k in _FALLBACK_EXCLUDED)),
        titles[0],
    )
    logger.debug(f"All results excluded, falling back to '{fallback}'")
    return [SearchCandidate(title=fallback, score=score_candidate(fallback, query))]


def select_best_candidate(titles: Sequence[str], query: str) -> str | None:
    """Title of the highest-scoring search result, or None."""
    ranked = rank_candidates(titles, query)
    return ranked[0].title if ranked else None


# =============================================================================
# Probing
# =============================================================================


def _strip_manga_suffix(title: str) -> str:
    return _MANGA_SUFFIX.sub("", title).strip()


def _is_list_title(title: str) -> bool:
    lower = title.lower()
    return "chapters" in lower or "volumes" in lower


def build_probe_titles(
    query: str,
    top_title: str | None,
    other_titles: Sequence[str] = (),
) -> list[str]:
    """
    Ordered, de-duplicated page titles to try.

    Order:
        1. ``List of <query> chapters``, ``List of <query> manga volumes``
        2. Variants of the top result (itself if already a list page,
           list pages for its base title, the base title, ``<base> (manga)``)
        3. The same variants for the text before a ``:`` subtitle
        4. Other search results that already look like list pages
        5. The bare query, then ``<query> (manga)``

    Args:
        query: User query
        top_title: Best-ranked search result, if any
        other_titles: Remaining search results in search order

    Returns:
        Titles to fetch in order
    """
    probes: list[str] = [f"List of {query} chapters", f"List of {query} manga volumes"]

    if top_title:
        clean = _strip_manga_suffix(top_title)
        if _is_list_title(top_title):
            probes.append(top_title)
        probes += [
            f"List of {clean} manga volumes",
            f"List of {clean} chapters",
            clean,
            f"{clean} (manga)",
            top_title,
        ]

        if ":" in clean:
            base = clean.split(":", 1)[0].strip()
            if base:
                probes += [
                    f"List of {base} manga volumes",
                    f"List of {base} chapters",
                    base,
                    f"{base} (manga)",
                ]

    probes += [t for t in other_titles if _is_list_title(t)]
    probes += [query, f"{query} (manga)"]

    seen: set[str] = set()
    ordered: list[str] = []
    for title in probes:
        if title not in seen:
            seen.add(title)
            ordered.append(title)
    return ordered


@dataclass(frozen=True)
class ProbeResult:
    """Page chosen by probing, with its expanded markup and parsed sections."""

    page: WikiPage
    markup: str
    sections: tuple[Section, ...]

    @property
    def volume_count(self) -> int:
        return count_volumes(list(self.sections))


def probe_pages(
    titles: Iterable[str],
    fetch_page: Callable[[str], WikiPage | None],
    early_exit_volumes: int = DEFAULT_EARLY_EXIT_VOLUMES,
) -> ProbeResult | None:
    """
    Fetch and parse candidate pages, keeping the one with the most volumes.

    Candidates are evaluated strictly in order; no further page is fetched
    once one yields at least ``early_exit_volumes`` volumes. Transport
    errors from ``fetch_page`` propagate.

    Args:
        titles: Candidate titles in priority order
        fetch_page: Returns a page by title, or None if missing
        early_exit_volumes: Volume count that ends probing

    Returns:
        Best ProbeResult, or None if no candidate yields any volume
    """

    def fetch_markup(title: str) -> str | None:
        sub_page = fetch_page(title)
        return sub_page.markup if sub_page is not None else None

    best: ProbeResult | None = None
    for title in titles:
        page = fetch_page(title)
        if page is None:
            continue

        markup = inline_transclusions(page.markup, fetch_markup)
        sections = tuple(parse_sections(markup, page.title))
        result = ProbeResult(page=page, markup=markup, sections=sections)
        logger.debug(f"Page '{page.title}' has {result.volume_count} volume(s)")

        if result.volume_count > (best.volume_count if best else 0):
            best = result

        if result.volume_count >= early_exit_volumes:
            break

    if best is not None:
        logger.info(f"Selected page '{best.page.title}' ({best.volume_count} volumes)")
    return best
