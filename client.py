"""
client.py – Client for the ``/api/watchlist`` endpoint.

Drives a :class:`crawler.WatchlistCrawl` through a running instance of this
service instead of talking to Letterboxd directly, page by page, exactly as a
browser front end would.
"""

from __future__ import annotations

from typing import Any, Callable

import requests

from crawler import MAX_PAGES, CrawlProgress, WatchlistCrawl
from letterboxd import LetterboxdConnectionError, LetterboxdHTTPError, WatchlistPage


class WatchlistApiClient:
    """Thin wrapper around ``GET /api/watchlist``.

    Args:
        base_url: Root URL of the service, e.g. ``"http://localhost:5000"``.
        session: Optional session to reuse.
        timeout: Request timeout in seconds.
    """

    def __init__(
        self,
        base_url: str,
        *,
        session: requests.Session | None = None,
        timeout: float = 30,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.session = session or requests.Session()
        self.timeout = timeout

    def fetch_page(self, username: str, page: int) -> WatchlistPage:
        """Fetch one page of titles through the service.

        Raises:
            LetterboxdHTTPError: If the service answered with an error.
            LetterboxdConnectionError: If the service could not be reached.
        """
        try:
            resp = self.session.get(
                f"{self.base_url}/api/watchlist",
                params={"username": username, "page": str(page)},
                timeout=self.timeout,
            )
        except requests.exceptions.RequestException as exc:
            raise LetterboxdConnectionError(f"Failed to reach watchlist service: {exc}") from exc

        try:
            data: Any = resp.json()
        except ValueError:
            data = {}
        if not isinstance(data, dict):
            data = {}

        if not resp.ok:
            message = data.get("error") or f"Failed to fetch watchlist (Status: {resp.status_code})"
            raise LetterboxdHTTPError(resp.status_code, resp.reason, message)
        if data.get("error"):
            raise LetterboxdHTTPError(resp.status_code, resp.reason, data["error"])

        movies = data.get("movies") or []
        return WatchlistPage([str(m) for m in movies])

    def crawl(
        self,
        username: str,
        on_progress: Callable[[CrawlProgress], None] | None = None,
        *,
        max_pages: int = MAX_PAGES,
    ) -> WatchlistCrawl:
        """Crawl *username*'s whole watchlist and return the finished crawl.

        Raises:
            ValueError: If *username* is empty.
            LetterboxdError: If the first page failed.
        """
        crawl = WatchlistCrawl(username, self.fetch_page, max_pages=max_pages)
        crawl.run(on_progress)
        return crawl
