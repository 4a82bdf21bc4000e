"""Pydantic schemas for MediaWiki API response validation.

Only the fields wikishelf reads are modelled; everything else is ignored so
API additions never break parsing. Page content requests use
``formatversion=2``, which returns ``pages`` as a list and revision content
under ``slots.main.content``.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field, model_validator


class OpenSearchResponse(BaseModel):
    """
    Response from ``action=opensearch``.

    The API returns a positional array ``[query, titles, descriptions, urls]``;
    the before-validator maps it onto named fields.
    """

    query: str
    titles: list[str] = Field(default_factory=list)
    descriptions: list[str] = Field(default_factory=list)
    urls: list[str] = Field(default_factory=list)

    model_config = {"extra": "ignore"}

    @model_validator(mode="before")
    @classmethod
    def from_positional(cls, data: Any) -> Any:
        """Accept the raw positional array form."""
        if isinstance(data, list | tuple):
            if not data:
                raise ValueError("OpenSearch response is empty")
            padded = list(data) + [[], [], []]
            return {
                "query": padded[0],
                "titles": padded[1] or [],
                "descriptions": padded[2] or [],
                "urls": padded[3] or [],
            }
        return data


class RevisionSlot(BaseModel):
    """Main content slot of a revision."""

    content: str = ""
    contentmodel: str | None = None

    model_config = {"extra": "ignore"}


class Revision(BaseModel):
    """Single page revision."""

    slots: dict[str, RevisionSlot] = Field(default_factory=dict)

    model_config = {"extra": "ignore"}

    @property
    def main_content(self) -> str | None:
        slot = self.slots.get("main")
        return slot.content if slot is not None else None


class QueryPage(BaseModel):
    """Page entry from ``action=query&prop=revisions``."""

    title: str
    pageid: int | None = None
    ns: int = 0
    missing: bool = False
    invalid: bool = False
    revisions: list[Revision] = Field(default_factory=list)

    model_config = {"extra": "ignore"}

    @property
    def wikitext(self) -> str | None:
        """Wikitext of the latest revision, or None for missing pages."""
        if self.missing or self.invalid or not self.revisions:
            return None
        return self.revisions[0].main_content


class TitleMapping(BaseModel):
    """Redirect or normalization mapping."""

    from_: str = Field(alias="from")
    to: str

    model_config = {"extra": "ignore", "populate_by_name": True}


class QueryBody(BaseModel):
    """``query`` member of the response."""

    pages: list[QueryPage] = Field(default_factory=list)
    redirects: list[TitleMapping] = Field(default_factory=list)
    normalized: list[TitleMapping] = Field(default_factory=list)

    model_config = {"extra": "ignore"}


class ApiError(BaseModel):
    """``error`` member returned instead of ``query`` on failure."""

    code: str
    info: str = ""

    model_config = {"extra": "ignore"}


class QueryResponse(BaseModel):
    """
    Validated response from ``action=query`` (formatversion=2).

    Uses extra="ignore" to allow new fields from API without breaking.
    """

    query: QueryBody | None = None
    error: ApiError | None = None

    model_config = {"extra": "ignore"}

    @property
    def first_page(self) -> QueryPage | None:
        if self.query is None or not self.query.pages:
            return None
        return self.query.pages[0]


def validate_opensearch_response(data: Any) -> OpenSearchResponse:
    """
    Validate OpenSearch API response.

    Args:
        data: Raw JSON response from ``action=opensearch``

    Returns:
        Validated OpenSearchResponse instance

    Raises:
        pydantic.ValidationError: If the payload is not the expected array shape
    """
    return OpenSearchResponse.model_validate(data)


def validate_query_response(data: dict[str, Any]) -> QueryResponse:
    """
    Validate page content API response.

    Args:
        data: Raw JSON response from ``action=query&prop=revisions``

    Returns:
        Validated QueryResponse instance

    Raises:
        pydantic.ValidationError: If required fields missing or wrong type
    """
    return QueryResponse.model_validate(data)
