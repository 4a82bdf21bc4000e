"""Shared pytest fixtures and helpers for wikishelf tests."""

from __future__ import annotations

from collections.abc import Iterator
from pathlib import Path

import pytest

from wikishelf.config import clear_settings
from wikishelf.env_settings import clear_env_settings_cache
from wikishelf.models import WikiPage
from wikishelf.utils.circuit_breaker import reset_all_breakers


def volume_template(
    number: int | str | None,
    *,
    title: str | None = None,
    isbn: str | None = None,
    licensed_isbn: str | None = None,
    reldate: str | None = None,
    licensed_reldate: str | None = None,
) -> str:
    """Render one ``{{Graphic novel list`` block.

    Args:
        number: VolumeNumber value (None omits the field)
        title: Optional LicensedTitle
        isbn: Optional (Japanese) ISBN
        licensed_isbn: Optional English ISBN
        reldate: Optional Japanese release date
        licensed_reldate: Optional English release date

    Returns:
        Markup lines for the template
    """
    lines = ["{{Graphic novel list"]
    if number is not None:
        lines.append(f" | VolumeNumber    = {number}")
    if title is not None:
        lines.append(f" | LicensedTitle   = {title}")
    if reldate is not None:
        lines.append(f" | OriginalRelDate = {reldate}")
    if isbn is not None:
        lines.append(f" | OriginalISBN    = {isbn}")
    if licensed_reldate is not None:
        lines.append(f" | LicensedRelDate = {licensed_reldate}")
    if licensed_isbn is not None:
        lines.append(f" | LicensedISBN    = {licensed_isbn}")
    lines.append("}}")
    return "\n".join(lines)


def volumes_block(numbers: range | list[int], **kwargs: str) -> str:
    """Several volume templates wrapped in the list header/footer."""
    body = "\n".join(volume_template(n, **kwargs) for n in numbers)
    return "{{Graphic novel list/header\n | Language = Japanese\n}}\n" + body + "\n{{Graphic novel list/footer}}"


class FakePageSource:
    """In-memory PageSource: search results plus pages keyed by title."""

    def __init__(
        self,
        pages: dict[str, str] | None = None,
        search_results: dict[str, list[str]] | None = None,
    ) -> None:
        self.pages = pages or {}
        self.search_results = search_results or {}
        self.fetched: list[str] = []
        self.searched: list[str] = []

    def search_titles(self, query: str, limit: int | None = None) -> list[str]:
        self.searched.append(query)
        return list(self.search_results.get(query, []))[: limit or None]

    def fetch_page_by_title(self, title: str) -> WikiPage | None:
        self.fetched.append(title)
        markup = self.pages.get(title)
        if markup is None:
            return None
        page_id = list(self.pages).index(title) + 1
        return WikiPage(page_id=page_id, title=title, markup=markup)


@pytest.fixture(autouse=True)
def isolated_environment(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> Iterator[None]:
    """Point config/cache at tmp_path and reset global state between tests."""
    for var in (
        "WIKISHELF_API_URL",
        "WIKISHELF_USER_AGENT",
        "WIKISHELF_TIMEOUT",
        "WIKISHELF_ENV",
        "LOG_LEVEL",
    ):
        monkeypatch.delenv(var, raising=False)
    monkeypatch.setenv("WIKISHELF_CONFIG", str(tmp_path / "missing-config.yaml"))
    monkeypatch.setenv("WIKISHELF_CACHE_DIR", str(tmp_path / "cache"))

    clear_settings()
    clear_env_settings_cache()
    reset_all_breakers()
    yield
    clear_settings()
    clear_env_settings_cache()
    reset_all_breakers()


@pytest.fixture
def fake_source() -> FakePageSource:
    """Empty FakePageSource; tests fill in pages and search results."""
    return FakePageSource()
