"""Series lookup: candidate selection, assembly and the lookup service."""

from wikishelf.series.assembler import assemble_series, expand_related
from wikishelf.series.selector import (
    ProbeResult,
    build_probe_titles,
    normalize_for_compare,
    probe_pages,
    rank_candidates,
    score_candidate,
    select_best_candidate,
)
from wikishelf.series.service import SeriesService

__all__ = [
    "ProbeResult",
    "SeriesService",
    "assemble_series",
    "build_probe_titles",
    "expand_related",
    "normalize_for_compare",
    "probe_pages",
    "rank_candidates",
    "score_candidate",
    "select_best_candidate",
]
