"""Markup parsing: ISBNs, media types, section classification and volume lists."""

from wikishelf.parsing.classifier import classify_section, is_spinoff_title, main_series_key_word
from wikishelf.parsing.isbn import clean_isbn, convert_isbn10_to_13
from wikishelf.parsing.markup import (
    canonical_series_title,
    check_series_complete,
    clean_field_value,
    extract_author,
    inline_transclusions,
)
from wikishelf.parsing.media_type import detect_media_type, is_media_heading
from wikishelf.parsing.sections import count_volumes, parse_sections
from wikishelf.parsing.volumes import dedupe_volumes, filter_spinoff_volumes, merge_volume_lists

__all__ = [
    "canonical_series_title",
    "check_series_complete",
    "classify_section",
    "clean_field_value",
    "clean_isbn",
    "convert_isbn10_to_13",
    "count_volumes",
    "dedupe_volumes",
    "detect_media_type",
    "extract_author",
    "filter_spinoff_volumes",
    "inline_transclusions",
    "is_media_heading",
    "is_spinoff_title",
    "main_series_key_word",
    "merge_volume_lists",
    "parse_sections",
]
