"""Tests for config.yaml schema validation."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from wikishelf.schemas.config import validate_config


class TestConfigSchema:
    """Tests for validate_config()."""

    def test_empty_config(self) -> None:
        """An empty mapping yields all defaults."""
        schema = validate_config({})
        assert schema.wikipedia.api_url == "https://en.wikipedia.org/w/api.php"
        assert schema.cache.enabled is True
        assert schema.selection.early_exit_volumes == 10
        assert schema.logging.level == "INFO"

    def test_unknown_key_rejected(self) -> None:
        """Typos in section keys are caught."""
        with pytest.raises(ValidationError):
            validate_config({"cache": {"ttl": 5}})

    def test_unknown_section_rejected(self) -> None:
        """Unknown top-level sections are caught."""
        with pytest.raises(ValidationError):
            validate_config({"qbittorrent": {}})

    def test_api_url_validated(self) -> None:
        """The API URL must be absolute and loses any trailing slash."""
        with pytest.raises(ValidationError):
            validate_config({"wikipedia": {"api_url": "en.wikipedia.org/w/api.php"}})
        schema = validate_config({"wikipedia": {"api_url": "https://example.org/w/api.php/"}})
        assert schema.wikipedia.api_url == "https://example.org/w/api.php"

    @pytest.mark.parametrize(
        "data",
        [
            {"wikipedia": {"timeout_seconds": 0}},
            {"wikipedia": {"search_limit": 100}},
            {"cache": {"ttl_hours": -1}},
            {"selection": {"early_exit_volumes": 0}},
            {"logging": {"level": "LOUD"}},
        ],
    )
    def test_out_of_range_values(self, data: dict) -> None:
        """Out-of-range values are rejected."""
        with pytest.raises(ValidationError):
            validate_config(data)

    def test_keywords_lowercased(self) -> None:
        """Excluded keywords are lower-cased and blanks dropped."""
        schema = validate_config({"selection": {"extra_excluded_keywords": ["Soundtrack", " "]}})
        assert schema.selection.extra_excluded_keywords == ["soundtrack"]

    def test_log_level_normalized(self) -> None:
        """Log level is upper-cased."""
        assert validate_config({"logging": {"level": "debug"}}).logging.level == "DEBUG"
