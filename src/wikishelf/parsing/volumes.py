"""Volume deduplication, ordering and spin-off filtering."""

from __future__ import annotations

from collections.abc import Iterable

from wikishelf.models import MEDIA_TYPE_ORDER, MediaType, Volume
from wikishelf.parsing.classifier import is_spinoff_title


def volume_sort_key(volume: Volume) -> tuple[int, int]:
    """Manga before light novels before unknown, then by volume number."""
    return MEDIA_TYPE_ORDER[volume.media_type], volume.volume_number


def dedupe_volumes(volumes: Iterable[Volume]) -> list[Volume]:
    """
    Deduplicate volumes by (media type, volume number) and order them.

    On a collision the first record is kept, unless the newcomer carries an
    English ISBN and the kept record does not. The result is sorted with
    volume_sort_key(); the sort is stable.

    Args:
        volumes: Volumes in page order, possibly from several sections

    Returns:
        New list of unique, ordered volumes
    """
    kept: dict[tuple[MediaType, int], Volume] = {}
    for volume in volumes:
        key = (volume.media_type, volume.volume_number)
        existing = kept.get(key)
        if existing is None:
            kept[key] = volume
        elif volume.english_isbn and not existing.english_isbn:
            kept[key] = volume
    return sorted(kept.values(), key=volume_sort_key)


def filter_spinoff_volumes(volumes: Iterable[Volume]) -> list[Volume]:
    """Drop volumes whose own title marks them as spin-off material."""
    return [v for v in volumes if not is_spinoff_title(v.title)]


def merge_volume_lists(*volume_lists: Iterable[Volume]) -> list[Volume]:
    """Merge per-type or per-section lists into one deduplicated, ordered list."""
    return dedupe_volumes(v for volumes in volume_lists for v in volumes)
