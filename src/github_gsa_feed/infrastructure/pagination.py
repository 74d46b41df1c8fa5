"""Paginated collection fetcher for the GitHub v3 REST API.

List endpoints answer with at most one page and point to the following page
through a ``Link: <...>; rel="next"`` header.  :meth:`PaginatedFetcher.fetch_all`
walks that chain iteratively and is fail-open: when a page cannot be fetched
the pages already retrieved are kept and returned.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any

import httpx

from github_gsa_feed.domain.exceptions import SourceApiError

logger = logging.getLogger(__name__)

_HTTP_OK = 200
_HTTP_NOT_FOUND = 404


@dataclass(slots=True)
class FetchResult:
    """Aggregated elements of a paginated list.

    ``complete`` is false when traversal stopped before the last page;
    ``error`` then describes why.
    """

    items: list[Any] = field(default_factory=list)
    pages: int = 0
    complete: bool = True
    error: str | None = None

    def stop(self, reason: str) -> None:
        self.complete = False
        self.error = reason


class PaginatedFetcher:
    """Issues GET requests and follows ``rel="next"`` continuations."""

    def __init__(
        self,
        client: httpx.Client,
        headers: dict[str, str] | None = None,
        max_pages: int | None = 1000,
    ) -> None:
        self._client = client
        self._headers = dict(headers or {})
        self._max_pages = max_pages

    # ── Public API ──────────────────────────────────────────────────────

    def fetch_all(self, url: str) -> FetchResult:
        """Return every element of the list at *url*, in page order."""
        result = FetchResult()
        visited: set[str] = set()
        next_url: str | None = url

        while next_url is not None:
            if next_url in visited:
                logger.warning(
                    "Pagination of %s revisits %s; stopping after %d pages",
                    url, next_url, result.pages,
                )
                result.stop(f"continuation loop at {next_url}")
                break
            if self._max_pages is not None and result.pages >= self._max_pages:
                logger.warning(
                    "Pagination of %s reached the %d page limit; stopping", url, self._max_pages
                )
                result.stop(f"page limit {self._max_pages} reached")
                break
            visited.add(next_url)

            try:
                response = self._get(next_url)
                page = self._decode(response, list)
            except SourceApiError as exc:
                logger.error("%s (keeping %d elements already fetched)", exc, len(result.items))
                result.stop(str(exc))
                break

            result.items.extend(page)
            result.pages += 1
            logger.debug("Page %d of %s: %d elements", result.pages, url, len(page))
            next_url = self.next_page_url(response)

        return result

    def fetch_object(self, url: str) -> dict[str, Any] | None:
        """Return the JSON object at *url*, or ``None`` on any failure."""
        try:
            return self._decode(self._get(url), dict)
        except SourceApiError as exc:
            if exc.status_code == _HTTP_NOT_FOUND:
                logger.debug("%s", exc)
            else:
                logger.error("%s", exc)
            return None

    @staticmethod
    def next_page_url(response: httpx.Response) -> str | None:
        """URL of the ``rel="next"`` relation of the ``Link`` header, if any."""
        return response.links.get("next", {}).get("url") or None

    # ── Helpers ─────────────────────────────────────────────────────────

    def _get(self, url: str) -> httpx.Response:
        """Perform a GET; an unusable URL or any status other than 200 is an error."""
        try:
            response = self._client.get(url, headers=self._headers)
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            raise SourceApiError(f"Request to {url} failed: {exc}", url=url) from exc

        if response.status_code != _HTTP_OK:
            raise SourceApiError(
                f"GitHub API ({url}) returned HTTP {response.status_code}",
                url=url,
                status_code=response.status_code,
            )
        return response

    @staticmethod
    def _decode(response: httpx.Response, expected: type) -> Any:
        url = str(response.request.url)
        try:
            body = response.json()
        except ValueError as exc:
            raise SourceApiError(f"Invalid JSON from {url}: {exc}", url=url) from exc
        if not isinstance(body, expected):
            raise SourceApiError(
                f"Expected a JSON {'array' if expected is list else 'object'} from {url}, "
                f"got {type(body).__name__}",
                url=url,
            )
        return body
