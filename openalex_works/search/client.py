"""OpenAlex works-search client: single-page and cursor-paginated search."""

import logging
from datetime import date
from typing import Callable, Iterator

import requests
from pydantic import ValidationError

from openalex_works.core.config import SearchConfig, SearchMode
from openalex_works.core.errors import DecodeFailed, RequestFailed, TransportFailed
from openalex_works.search.models import ResultPage, Work
from openalex_works.search.query import (
    MAX_PER_PAGE,
    START_CURSOR,
    build_request,
    build_works_url,
)

logger = logging.getLogger(__name__)

CONNECT_TIMEOUT = 10  # seconds
READ_TIMEOUT = 30  # seconds
USER_AGENT = "openalex-works/1.0 (python-requests)"

_HEADERS = {
    "Accept": "application/json",
    "User-Agent": USER_AGENT,
}


class WorksClient:
    """Read-only client for the OpenAlex /works endpoint.

    A client never changes after construction; the ``with_*`` methods return
    a new client that shares the same HTTP session. Requests are issued one
    at a time and are never retried. Use as a context manager, or call
    ``close()``, to release the session.
    """

    def __init__(
        self,
        config: SearchConfig | None = None,
        session: requests.Session | None = None,
        today: Callable[[], date] = date.today,
    ):
        self._config = config or SearchConfig()
        self._session = session or requests.Session()
        self._today = today

    @property
    def config(self) -> SearchConfig:
        return self._config

    def close(self) -> None:
        """Close the HTTP session, which is shared with every derived client."""
        self._session.close()

    def __enter__(self) -> "WorksClient":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    # ── Reconfiguration ──────────────────────────────────────────

    def with_config(self, config: SearchConfig) -> "WorksClient":
        return WorksClient(config, self._session, self._today)

    def with_allowed_languages(self, languages: list[str] | None) -> "WorksClient":
        return self.with_config(self._config.with_languages(languages))

    def with_concepts(self, concepts: list[str] | None) -> "WorksClient":
        return self.with_config(self._config.with_concepts(concepts))

    def with_search_mode(self, mode: SearchMode | str | None) -> "WorksClient":
        return self.with_config(self._config.with_search_mode(mode))

    def with_created_since(self, since: date | int) -> "WorksClient":
        """Filter on creation date; an int is read as 'N days ago'."""
        if isinstance(since, date):
            return self.with_config(self._config.with_created_since(since))
        return self.with_config(self._config.with_created_since_days(since, self._today))

    def with_publication_date_since(self, since: date | int) -> "WorksClient":
        """Filter on publication date; an int is read as 'N days ago'."""
        if isinstance(since, date):
            return self.with_config(self._config.with_published_since(since))
        return self.with_config(
            self._config.with_published_since_days(since, self._today)
        )

    # ── Public API ───────────────────────────────────────────────

    def search_works(self, query: str, per_page: int = MAX_PER_PAGE) -> list[Work]:
        """Fetch a single page of works matching ``query``."""
        request = build_request(query, self._config, per_page)
        logger.info("OpenAlex query: %s (%s)", request.query, request.config.search_mode.value)
        page = self.fetch_page(build_works_url(request))
        return page.results

    def search_all_works(self, query: str) -> list[Work]:
        """Fetch every page of works matching ``query`` via cursor pagination."""
        works: list[Work] = []
        for page in self.iter_pages(query):
            works.extend(page.results)
            logger.info("Fetched %d works from OpenAlex so far...", len(works))

        logger.info("OpenAlex total: %d works", len(works))
        return works

    def iter_pages(self, query: str) -> Iterator[ResultPage[Work]]:
        """Yield result pages in order, starting from the first cursor.

        Stops when ``next_cursor`` is missing, empty, or repeats the cursor
        that produced the page.
        """
        request = build_request(query, self._config, MAX_PER_PAGE, START_CURSOR)
        logger.info("OpenAlex query: %s (%s)", request.query, request.config.search_mode.value)

        cursor = START_CURSOR
        while cursor:
            page = self.fetch_page(build_works_url(request.model_copy(update={"cursor": cursor})))
            yield page

            next_cursor = page.meta.next_cursor
            if next_cursor and next_cursor == cursor:
                logger.warning("OpenAlex returned a non-advancing cursor; stopping pagination")
                break
            cursor = next_cursor

    def fetch_page(self, url: str) -> ResultPage[Work]:
        """GET one works page and decode it."""
        logger.debug("GET %s", url)
        try:
            response = self._session.get(
                url,
                headers=_HEADERS,
                timeout=(CONNECT_TIMEOUT, READ_TIMEOUT),
            )
        except requests.RequestException as exc:
            raise TransportFailed(f"Error executing search request to OpenAlex API: {exc}") from exc

        status = response.status_code
        body = response.text
        if status < 200 or status >= 300:
            raise RequestFailed(status, body, url)

        try:
            return ResultPage[Work].model_validate_json(body)
        except ValidationError as exc:
            raise DecodeFailed(f"Could not decode OpenAlex response from {url}: {exc}") from exc
