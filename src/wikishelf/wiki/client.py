"""HTTP client for the MediaWiki Action API.

Two operations are used:
- ``action=opensearch`` - title search (handles typos and alternate names)
- ``action=query&prop=revisions`` - page markup by title, following redirects

Transient failures (timeouts, connection errors, HTTP 429/5xx) are retried
with exponential backoff; once retries are exhausted a WikipediaError is
raised. Responses can be cached on disk through a JsonCache.
"""

from __future__ import annotations

import logging
import threading
import time
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

import httpx
from pydantic import ValidationError as PydanticValidationError

from wikishelf.exceptions import WikipediaError
from wikishelf.models import WikiPage
from wikishelf.schemas.wikipedia import validate_opensearch_response, validate_query_response
from wikishelf.utils.circuit_breaker import CircuitOpenError, wikipedia_breaker
from wikishelf.utils.retry import NETWORK_EXCEPTIONS, RetryableError, retry_with_backoff
from wikishelf.wiki.cache import KIND_PAGE, KIND_SEARCH, JsonCache

if TYPE_CHECKING:
    from wikishelf.config import Settings

logger = logging.getLogger(__name__)


@runtime_checkable
class PageSource(Protocol):
    """What the series layer needs from a page provider."""

    def search_titles(self, query: str, limit: int | None = None) -> list[str]: ...

    def fetch_page_by_title(self, title: str) -> WikiPage | None: ...


class WikipediaClient:
    """MediaWiki API client.

    Example:
        >>> with WikipediaClient() as client:
        ...     titles = client.search_titles("demon slayer")
        ...     page = client.fetch_page_by_title(titles[0])
    """

    def __init__(
        self,
        api_url: str = "https://en.wikipedia.org/w/api.php",
        user_agent: str = "wikishelf/0.1 (https://github.com/wikishelf/wikishelf)",
        timeout: float = 30.0,
        *,
        search_limit: int = 10,
        max_retries: int = 3,
        retry_base_delay: float = 1.0,
        min_request_interval: float = 0.2,
        cache: JsonCache | None = None,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        """Initialize the client.

        Args:
            api_url: Full URL of api.php
            user_agent: User-Agent header (Wikimedia policy requires a descriptive one)
            timeout: Request timeout in seconds
            search_limit: Default number of OpenSearch results
            max_retries: Retries after the first attempt for transient failures
            retry_base_delay: Initial backoff delay in seconds
            min_request_interval: Minimum seconds between consecutive requests
            cache: Optional on-disk cache for search results and pages
            transport: Custom httpx transport (tests use httpx.MockTransport)
        """
        self.api_url = api_url
        self.user_agent = user_agent
        self.timeout = timeout
        self.search_limit = search_limit
        self.max_retries = max_retries
        self.retry_base_delay = retry_base_delay
        self.min_request_interval = min_request_interval
        self.cache = cache
        self._transport = transport
        self._client: httpx.Client | None = None
        self._last_request: float | None = None
        self._throttle_lock = threading.Lock()

    @classmethod
    def from_settings(cls, settings: Settings, *, use_cache: bool = True) -> WikipediaClient:
        """Create a client from loaded Settings.

        Args:
            settings: Application settings
            use_cache: Set False to bypass the on-disk cache (e.g. ``--no-cache``)

        Returns:
            Configured WikipediaClient instance
        """
        cache = None
        if use_cache and settings.cache.enabled:
            cache = JsonCache(settings.resolved_cache_dir(), settings.cache.ttl_seconds)
        wiki = settings.wikipedia
        return cls(
            api_url=wiki.api_url,
            user_agent=wiki.user_agent,
            timeout=wiki.timeout_seconds,
            search_limit=wiki.search_limit,
            max_retries=wiki.max_retries,
            min_request_interval=wiki.min_request_interval,
            cache=cache,
        )

    def _get_client(self) -> httpx.Client:
        """Get or create the httpx client."""
        if self._client is None:
            kwargs: dict[str, Any] = {
                "headers": {"User-Agent": self.user_agent, "Accept": "application/json"},
                "timeout": self.timeout,
                "follow_redirects": True,
            }
            if self._transport is not None:
                kwargs["transport"] = self._transport
            else:
                kwargs["http2"] = True
            self._client = httpx.Client(**kwargs)
        return self._client

    def close(self) -> None:
        """Close the HTTP client connection."""
        if self._client is not None:
            self._client.close()
            self._client = None

    def __enter__(self) -> WikipediaClient:
        """Context manager entry."""
        return self

    def __exit__(self, *args: object) -> None:
        """Context manager exit."""
        self.close()

    # -------------------------------------------------------------------------
    # Transport
    # -------------------------------------------------------------------------

    def _throttle(self) -> None:
        """Sleep so consecutive requests are at least min_request_interval apart."""
        with self._throttle_lock:
            now = time.monotonic()
            if self._last_request is not None:
                wait = self.min_request_interval - (now - self._last_request)
                if wait > 0:
                    time.sleep(wait)
            self._last_request = time.monotonic()

    def _request_once(self, params: dict[str, str]) -> Any:
        self._throttle()
        with wikipedia_breaker:
            response = self._get_client().get(self.api_url, params=params)

        if response.status_code == 429 or response.status_code >= 500:
            logger.warning(f"Wikipedia API returned {response.status_code}, will retry")
            raise RetryableError(
                f"Wikipedia API returned {response.status_code}",
                status_code=response.status_code,
            )

        response.raise_for_status()
        return response.json()

    def _get_json(self, params: dict[str, str], *, title: str | None = None) -> Any:
        """GET api.php with retries; every failure surfaces as WikipediaError."""
        request = retry_with_backoff(
            max_retries=self.max_retries,
            base_delay=self.retry_base_delay,
            retry_exceptions=NETWORK_EXCEPTIONS,
            logger_instance=logger,
        )(self._request_once)

        try:
            return request({**params, "format": "json"})
        except CircuitOpenError as e:
            raise WikipediaError(str(e), title=title, url=self.api_url) from e
        except RetryableError as e:
            raise WikipediaError(
                f"Wikipedia API unavailable after {self.max_retries + 1} attempts: {e}",
                title=title,
                url=self.api_url,
                status_code=e.status_code,
            ) from e
        except httpx.HTTPStatusError as e:
            raise WikipediaError(
                f"Wikipedia API error: {e.response.status_code}",
                title=title,
                url=self.api_url,
                status_code=e.response.status_code,
            ) from e
        except (httpx.HTTPError, ConnectionError, TimeoutError) as e:
            raise WikipediaError(
                f"Failed to reach Wikipedia API: {e}", title=title, url=self.api_url
            ) from e
        except ValueError as e:
            # JSON decode failure
            raise WikipediaError(
                f"Invalid JSON from Wikipedia API: {e}", title=title, url=self.api_url
            ) from e

    # -------------------------------------------------------------------------
    # Operations
    # -------------------------------------------------------------------------

    def search_titles(self, query: str, limit: int | None = None) -> list[str]:
        """Search page titles with OpenSearch.

        Args:
            query: Free-text query (typos and alternate names are tolerated)
            limit: Maximum number of results (default: search_limit)

        Returns:
            Matching page titles in relevance order (possibly empty)

        Raises:
            WikipediaError: On transport failure or an unexpected payload
        """
        if self.cache is not None:
            cached = self.cache.get(KIND_SEARCH, query)
            if cached is not None:
                logger.debug(f"Cache hit for search: '{query}'")
                return [str(t) for t in cached]

        logger.debug(f"OpenSearch: {query}")
        data = self._get_json(
            {
                "action": "opensearch",
                "search": query,
                "limit": str(limit or self.search_limit),
                "namespace": "0",
            }
        )
        try:
            titles = [t for t in validate_opensearch_response(data).titles if t]
        except PydanticValidationError as e:
            raise WikipediaError(f"Unexpected OpenSearch response: {e}", url=self.api_url) from e

        if self.cache is not None:
            self.cache.set(KIND_SEARCH, query, titles)
        return titles

    def fetch_page_by_title(self, title: str) -> WikiPage | None:
        """Fetch page markup by title, following redirects.

        Args:
            title: Page title

        Returns:
            WikiPage (with the title after redirects) or None if the page
            does not exist

        Raises:
            WikipediaError: On transport failure or an API error payload
        """
        if self.cache is not None:
            cached = self.cache.get(KIND_PAGE, title)
            if cached is not None:
                logger.debug(f"Cache hit for page: '{title}'")
                return WikiPage.model_validate(cached)

        logger.debug(f"Fetching page: {title}")
        data = self._get_json(
            {
                "action": "query",
                "titles": title,
                "prop": "revisions",
                "rvprop": "content",
                "rvslots": "main",
                "redirects": "1",
                "formatversion": "2",
            },
            title=title,
        )
        try:
            response = validate_query_response(data)
        except PydanticValidationError as e:
            raise WikipediaError(
                f"Unexpected query response: {e}", title=title, url=self.api_url
            ) from e

        if response.error is not None:
            raise WikipediaError(
                f"Wikipedia API error {response.error.code}: {response.error.info}",
                title=title,
                url=self.api_url,
            )

        if response.query is not None:
            for redirect in response.query.redirects:
                logger.debug(f"Followed redirect: {redirect.from_} -> {redirect.to}")

        page = response.first_page
        markup = page.wikitext if page is not None else None
        if page is None or page.pageid is None or markup is None:
            logger.debug(f"Page not found: {title}")
            return None

        result = WikiPage(page_id=page.pageid, title=page.title, markup=markup)
        if self.cache is not None:
            self.cache.set(KIND_PAGE, title, result.model_dump(mode="json", by_alias=True))
        return result
