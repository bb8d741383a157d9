"""
selector.py – Random pick over a crawled watchlist.

Filtering is a case-insensitive substring match.  Picking avoids handing back
the previous pick when another candidate exists, giving up after a fixed
number of draws.
"""

from __future__ import annotations

import random
from typing import Sequence

# Total draws made while trying to avoid repeating the previous pick
MAX_PICK_ATTEMPTS: int = 10


def filter_titles(titles: Sequence[str], query: str = "") -> list[str]:
    """Return the titles containing *query*, ignoring case, in list order."""
    if not query:
        return list(titles)
    needle = query.lower()
    return [title for title in titles if needle in title.lower()]


def pick_random(
    titles: Sequence[str],
    query: str = "",
    previous: str | None = None,
    *,
    rng: random.Random | None = None,
) -> str | None:
    """Pick a random title matching *query*.

    When more than one title matches, draws are repeated (up to
    :data:`MAX_PICK_ATTEMPTS` in total) until one differs from *previous*.
    If every draw still lands on *previous* it is returned anyway.

    Args:
        titles: The watchlist; never modified.
        query: Optional filter text.
        previous: The title picked last time, if any.
        rng: Random source, defaults to the :mod:`random` module.

    Returns:
        The picked title, or ``None`` if nothing matches.
    """
    candidates = filter_titles(titles, query)
    if not candidates:
        return None

    rand = rng or random
    pick = rand.choice(candidates)
    if len(candidates) > 1:
        attempts = 1
        while pick == previous and attempts < MAX_PICK_ATTEMPTS:
            pick = rand.choice(candidates)
            attempts += 1
    return pick


class Selection:
    """Filter text and current pick for one watchlist.

    The watchlist is held by reference and only read.
    """

    def __init__(
        self,
        titles: Sequence[str],
        *,
        query: str = "",
        rng: random.Random | None = None,
    ) -> None:
        self.titles = titles
        self.query = query
        self.current: str | None = None
        self._rng = rng

    @property
    def candidates(self) -> list[str]:
        return filter_titles(self.titles, self.query)

    def set_filter(self, query: str) -> list[str]:
        """Change the filter text; the current pick is kept."""
        self.query = query or ""
        return self.candidates

    def pick(self) -> str | None:
        """Pick a new title, or return ``None`` (keeping the old pick) if nothing matches."""
        choice = pick_random(self.titles, self.query, self.current, rng=self._rng)
        if choice is not None:
            self.current = choice
        return choice
