"""
letterboxd.py – Letterboxd watchlist page fetching and title extraction.

Provides the two leaf operations of a watchlist crawl: downloading one page of
a public watchlist and pulling the display titles out of its poster markup.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable
from urllib.parse import quote

import requests
from bs4 import BeautifulSoup
from bs4.element import Tag

LETTERBOXD_BASE_URL: str = "https://letterboxd.com"

DEFAULT_USER_AGENT: str = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/122.0.0.0 Safari/537.36"
)

# Poster tiles are rendered as LazyPoster react components; nothing else on the
# page carries this marker.
POSTER_SELECTOR: str = 'div.react-component[data-component-class="LazyPoster"]'

# Tried in order, first non-empty value wins.
TITLE_ATTRIBUTES: tuple[str, ...] = (
    "data-item-full-display-name",
    "itemFullDisplayName",
)


# ---------------------------------------------------------------------------
# Errors
# ---------------------------------------------------------------------------


class LetterboxdError(RuntimeError):
    """Base class for failures while fetching a watchlist page."""


class LetterboxdHTTPError(LetterboxdError):
    """Letterboxd answered with a non-2xx status other than 404."""

    def __init__(
        self, status_code: int, reason: str = "", message: str | None = None
    ) -> None:
        self.status_code = status_code
        self.reason = reason or f"HTTP {status_code}"
        super().__init__(message or f"Failed to fetch from Letterboxd: {self.reason}")


class LetterboxdConnectionError(LetterboxdError):
    """The request never produced an HTTP response (DNS, connect, timeout)."""


# ---------------------------------------------------------------------------
# Page model
# ---------------------------------------------------------------------------


@dataclass
class WatchlistPage:
    """Titles found on a single watchlist page, in document order."""

    titles: list[str] = field(default_factory=list)

    @property
    def has_next_page(self) -> bool:
        # Mirrors emptiness only; Letterboxd pagination links are not read.
        return bool(self.titles)


# ---------------------------------------------------------------------------
# Fetching
# ---------------------------------------------------------------------------


def build_watchlist_url(
    username: str, page: int, base_url: str = LETTERBOXD_BASE_URL
) -> str:
    """Return the URL of *page* of *username*'s watchlist.

    Raises:
        ValueError: If *username* is empty or *page* is not a positive integer.
    """
    if not username:
        raise ValueError("Username is required")
    if page < 1:
        raise ValueError(f"Page must be a positive integer, got {page!r}")
    return f"{base_url.rstrip('/')}/{quote(username, safe='')}/watchlist/page/{page}/"


def fetch_watchlist_page(
    username: str,
    page: int,
    *,
    session: requests.Session | None = None,
    base_url: str = LETTERBOXD_BASE_URL,
    user_agent: str = DEFAULT_USER_AGENT,
    timeout: float = 15,
) -> str | None:
    """Download one page of a public Letterboxd watchlist.

    Letterboxd answers 404 both for pages past the end of a watchlist and for
    unknown users, so a 404 is reported as ``None`` rather than raised.

    Args:
        username: Letterboxd profile name, used verbatim (percent-encoded).
        page: 1-based page number.
        session: Optional session to reuse across the pages of one crawl.
        base_url: Site root, overridable for testing.
        user_agent: Browser-like User-Agent sent with the request.
        timeout: Request timeout in seconds.

    Returns:
        The response body, or ``None`` when the page does not exist.

    Raises:
        ValueError: If the arguments cannot form a valid URL.
        LetterboxdHTTPError: On any other non-2xx response.
        LetterboxdConnectionError: If the request could not be completed.
    """
    url = build_watchlist_url(username, page, base_url)
    headers = {
        "User-Agent": user_agent,
        "Accept-Language": "en-US,en;q=0.9",
    }
    http = session if session is not None else requests

    try:
        resp = http.get(url, headers=headers, timeout=timeout)
    except requests.exceptions.RequestException as exc:
        raise LetterboxdConnectionError(
            f"Failed to reach Letterboxd for page {page}: {exc}"
        ) from exc

    if resp.status_code == 404:
        return None
    if not 200 <= resp.status_code < 300:
        raise LetterboxdHTTPError(resp.status_code, resp.reason)
    return resp.text


# ---------------------------------------------------------------------------
# Extraction
# ---------------------------------------------------------------------------


def _first_attribute(element: Tag, names: Iterable[str]) -> str | None:
    """Return the first non-empty attribute of *element* among *names*."""
    for name in names:
        # html.parser folds attribute names to lower case
        value = element.get(name) or element.get(name.lower())
        if isinstance(value, list):
            value = " ".join(value)
        if value:
            return value
    return None


def extract_titles(html: str) -> list[str]:
    """Return the film titles of every poster tile in *html*, in page order.

    Tiles without any title attribute are skipped.  Duplicates are kept.
    """
    soup = BeautifulSoup(html, "html.parser")
    titles: list[str] = []
    for element in soup.select(POSTER_SELECTOR):
        title = _first_attribute(element, TITLE_ATTRIBUTES)
        if title:
            titles.append(title)
    return titles


def parse_watchlist_page(html: str) -> WatchlistPage:
    return WatchlistPage(extract_titles(html))


def fetch_watchlist_titles(username: str, page: int, **kwargs) -> WatchlistPage:
    """Fetch and parse one watchlist page.

    Keyword arguments are passed to :func:`fetch_watchlist_page`.  A missing
    page yields an empty :class:`WatchlistPage`.
    """
    html = fetch_watchlist_page(username, page, **kwargs)
    if html is None:
        return WatchlistPage()
    return parse_watchlist_page(html)
