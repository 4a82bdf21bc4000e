"""Table formatting components for wikishelf UI.

Rich tables for series bibliographies, search candidates, parsed sections and
cache statistics.
"""

from __future__ import annotations

from collections.abc import Sequence

from rich.markup import escape
from rich.table import Table

from wikishelf.models import RelatedSeries, SearchCandidate, Section, Series, Volume
from wikishelf.ui.core import console
from wikishelf.wiki.cache import CacheStats


def _volume_table(title: str, volumes: Sequence[Volume]) -> Table:
    table = Table(title=title, show_header=True, header_style="bold")
    table.add_column("#", style="dim", justify="right", width=4)
    table.add_column("Title")
    table.add_column("JP ISBN", style="isbn")
    table.add_column("EN ISBN", style="isbn")
    table.add_column("JP Release", style="date")
    table.add_column("EN Release", style="date")
    table.add_column("Type", style="dim")

    for volume in volumes:
        table.add_row(
            str(volume.volume_number),
            escape(volume.title or "-"),
            volume.japanese_isbn or "-",
            volume.english_isbn or "-",
            escape(volume.japanese_release_date or "-"),
            escape(volume.english_release_date or "-"),
            volume.media_type.value,
        )
    return table


def print_series_table(series: Series) -> None:
    """Print a series header line and its volume table.

    Example:
        >>> print_series_table(series)
        Demon Slayer  manga · 23 volumes · complete · Koyoharu Gotouge
        ┏━━━━┳━━━━━━━┳━━━━━━━━━━━━━━━┳━━━━━━━━━━━━━━━┳ ...
    """
    status = "complete" if series.is_complete else "ongoing"
    parts = [series.media_type.value, f"{series.total_volumes} volumes", status]
    if series.author:
        parts.append(f"[author]{escape(series.author)}[/]")
    console.print(f"[series]{escape(series.title)}[/]  [dim]{' · '.join(parts)}[/]")

    if not series.volumes:
        console.print("[dim]No volumes found[/]")
        return
    console.print(_volume_table(f"{series.title} volumes", series.volumes))


def print_related_series_table(related: Sequence[RelatedSeries]) -> None:
    """Print a summary table of related series."""
    if not related:
        return

    table = Table(title="Related Series", show_header=True, header_style="bold")
    table.add_column("Title", style="series")
    table.add_column("Relationship", style="relationship")
    table.add_column("Type", style="dim")
    table.add_column("Volumes", justify="right")

    for entry in related:
        table.add_row(
            escape(entry.title),
            entry.relationship.value,
            entry.media_type.value,
            str(len(entry.volumes)),
        )
    console.print(table)


def print_candidates_table(candidates: Sequence[SearchCandidate], query: str) -> None:
    """Print ranked search candidates with their scores."""
    if not candidates:
        console.print(f"[dim]No search results for '{escape(query)}'[/]")
        return

    table = Table(title=f"Candidates for '{escape(query)}'", show_header=True, header_style="bold")
    table.add_column("#", style="dim", width=4)
    table.add_column("Title")
    table.add_column("Score", justify="right", style="highlight")

    for i, candidate in enumerate(candidates, 1):
        table.add_row(str(i), escape(candidate.title), str(candidate.score))
    console.print(table)


def print_sections_table(sections: Sequence[Section]) -> None:
    """Print parsed sections, one row per section."""
    if not sections:
        console.print("[dim]No volume sections found[/]")
        return

    table = Table(title="Sections", show_header=True, header_style="bold")
    table.add_column("Heading")
    table.add_column("Level", justify="right", style="dim")
    table.add_column("Type", style="dim")
    table.add_column("Relationship", style="relationship")
    table.add_column("Volumes", justify="right")

    for section in sections:
        numbers = [v.volume_number for v in section.volumes]
        span = f"{min(numbers)}-{max(numbers)}" if len(numbers) > 1 else str(numbers[0])
        table.add_row(
            escape(section.name),
            str(section.heading_level),
            section.media_type.value,
            section.relationship.value,
            f"{len(numbers)} ({span})",
        )
    console.print(table)


def print_cache_stats(stats: CacheStats) -> None:
    """Print cache location, entry count and size."""
    table = Table(title="Cache", show_header=False)
    table.add_column("Key", style="dim")
    table.add_column("Value")
    table.add_row("Directory", f"[path]{escape(str(stats.directory))}[/]")
    table.add_row("Entries", str(stats.entry_count))
    table.add_row("Size", f"{stats.total_size_bytes / 1024:.1f} KiB")
    console.print(table)
