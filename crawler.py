"""
crawler.py – Sequential watchlist crawl.

Walks a watchlist page by page, accumulating titles until Letterboxd runs out
of pages, something goes wrong, or the page ceiling is reached.  A failure on
the first page is fatal; a failure on a later page ends the crawl with
whatever was collected so far.
"""

from __future__ import annotations

import enum
import logging
import threading
from dataclasses import dataclass
from typing import Callable, Iterator, Sequence, Union

import requests

from letterboxd import LetterboxdError, WatchlistPage, fetch_watchlist_titles

logger = logging.getLogger(__name__)

# Hard stop in case a server never signals the end of a watchlist
MAX_PAGES: int = 500

PageFetcher = Callable[[str, int], Union[WatchlistPage, Sequence[str]]]


class CrawlState(enum.Enum):
    IDLE = "idle"
    FETCHING = "fetching"
    END_OF_DATA = "end_of_data"
    PARTIAL = "partial"
    FAILED = "failed"
    CANCELLED = "cancelled"


TERMINAL_STATES = frozenset(
    {CrawlState.END_OF_DATA, CrawlState.PARTIAL, CrawlState.FAILED, CrawlState.CANCELLED}
)


@dataclass(frozen=True)
class CrawlProgress:
    """Emitted after every page that contributed titles."""

    page: int
    added: int
    total: int


def default_page_fetcher(**kwargs) -> PageFetcher:
    """Return a fetcher hitting Letterboxd directly over one shared session.

    Keyword arguments are forwarded to :func:`letterboxd.fetch_watchlist_page`.
    """
    session = requests.Session()

    def fetch(username: str, page: int) -> WatchlistPage:
        return fetch_watchlist_titles(username, page, session=session, **kwargs)

    return fetch


class WatchlistCrawl:
    """One crawl of one user's watchlist.

    Iterating the crawl performs the page requests, strictly one after the
    other, and yields a :class:`CrawlProgress` for every page that added
    titles.  The accumulated list is available as :attr:`titles` at any
    point and only ever grows.  A crawl object can be run once.
    """

    def __init__(
        self,
        username: str,
        fetch_page: PageFetcher | None = None,
        *,
        max_pages: int = MAX_PAGES,
    ) -> None:
        username = (username or "").strip()
        if not username:
            raise ValueError("Username is required")
        if max_pages < 1:
            raise ValueError(f"max_pages must be at least 1, got {max_pages!r}")

        self.username = username
        self.max_pages = max_pages
        self.titles: list[str] = []
        self.page: int = 1
        self.pages_fetched: int = 0
        self.state: CrawlState = CrawlState.IDLE
        self.error: LetterboxdError | None = None
        self._fetch_page = fetch_page or default_page_fetcher()
        self._cancelled = threading.Event()

    # -- public API ---------------------------------------------------------

    @property
    def done(self) -> bool:
        return self.state in TERMINAL_STATES

    @property
    def complete(self) -> bool:
        """``True`` when the crawl reached the end of the watchlist."""
        return self.state is CrawlState.END_OF_DATA

    def cancel(self) -> None:
        """Ask the crawl to stop before requesting the next page."""
        self._cancelled.set()

    def run(self, on_progress: Callable[[CrawlProgress], None] | None = None) -> list[str]:
        """Run the crawl to its end and return the accumulated titles.

        Raises:
            LetterboxdError: If the first page could not be fetched.
        """
        for progress in self:
            if on_progress is not None:
                on_progress(progress)
        return self.titles

    def __iter__(self) -> Iterator[CrawlProgress]:
        if self.state is not CrawlState.IDLE:
            raise RuntimeError(f"Crawl for {self.username!r} has already been started")
        return self._crawl()

    # -- state machine ------------------------------------------------------

    def _stop(self, state: CrawlState) -> None:
        self.state = state
        logger.info(
            "Crawl of %r stopped (%s) after %d page(s), %d title(s)",
            self.username,
            state.value,
            self.pages_fetched,
            len(self.titles),
        )

    def _crawl(self) -> Iterator[CrawlProgress]:
        self.state = CrawlState.FETCHING
        while True:
            if self._cancelled.is_set():
                self._stop(CrawlState.CANCELLED)
                return
            if self.page > self.max_pages:
                logger.warning(
                    "Crawl of %r hit the %d page ceiling", self.username, self.max_pages
                )
                self._stop(CrawlState.END_OF_DATA)
                return

            logger.debug("Fetching page %d of %r's watchlist", self.page, self.username)
            try:
                result = self._fetch_page(self.username, self.page)
            except LetterboxdError as exc:
                if self.page == 1:
                    self.error = exc
                    self._stop(CrawlState.FAILED)
                    raise
                logger.warning(
                    "Page %d of %r's watchlist failed, keeping %d title(s): %s",
                    self.page,
                    self.username,
                    len(self.titles),
                    exc,
                )
                self.error = exc
                self._stop(CrawlState.PARTIAL)
                return

            titles = result.titles if isinstance(result, WatchlistPage) else list(result)
            if not titles:
                self._stop(CrawlState.END_OF_DATA)
                return

            self.titles.extend(titles)
            self.pages_fetched += 1
            yield CrawlProgress(page=self.page, added=len(titles), total=len(self.titles))
            self.page += 1


def crawl_watchlist(
    username: str,
    fetch_page: PageFetcher | None = None,
    *,
    on_progress: Callable[[CrawlProgress], None] | None = None,
    max_pages: int = MAX_PAGES,
) -> list[str]:
    """Crawl *username*'s whole watchlist and return every title in order.

    Args:
        username: Letterboxd profile name.
        fetch_page: ``(username, page) -> titles`` callable; defaults to
            fetching from Letterboxd directly.
        on_progress: Called with a :class:`CrawlProgress` after every page.
        max_pages: Page ceiling.

    Returns:
        The titles of all pages, in page order then document order.

    Raises:
        ValueError: If *username* is empty.
        LetterboxdError: If the first page could not be fetched.
    """
    return WatchlistCrawl(username, fetch_page, max_pages=max_pages).run(on_progress)
