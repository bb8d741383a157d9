"""
routes.py – Flask Blueprint containing all HTTP route handlers.

Every route is registered on the ``bp`` Blueprint which is imported and
registered with the Flask application in ``app.py``.  Route handlers are
intentionally thin: they validate inputs, delegate to the scraping, crawling
and selection modules, and serialise results back to JSON.
"""

from __future__ import annotations

import logging
from typing import Any

from flask import Blueprint, jsonify, request
from flask.typing import ResponseReturnValue

from config import fetch_options, load_config, save_config
from crawler import MAX_PAGES, CrawlProgress, WatchlistCrawl, default_page_fetcher
from letterboxd import LetterboxdHTTPError, fetch_watchlist_titles
from selector import pick_random

bp = Blueprint("main", __name__)
logger = logging.getLogger(__name__)


def _error(message: str, status: int) -> ResponseReturnValue:
    return jsonify({"error": message}), status


def _parse_page(raw: str) -> int | None:
    """Return *raw* as a page number, or ``None`` if it is not a positive integer."""
    try:
        page = int(raw)
    except (TypeError, ValueError):
        return None
    return page if page >= 1 else None


# ---------------------------------------------------------------------------
# Watchlist
# ---------------------------------------------------------------------------


@bp.route("/api/watchlist", methods=["GET"])
def get_watchlist_page() -> ResponseReturnValue:
    """Return the titles on one page of a user's Letterboxd watchlist.

    Query parameters:
        username: Letterboxd profile name (required).
        page: 1-based page number, defaults to ``1``.

    Returns:
        ``{"movies": [...], "hasNextPage": bool}``.  A page Letterboxd does not
        have yields an empty list rather than an error.  Upstream failures are
        reported as ``{"error": ...}`` with the upstream status code.
    """
    username = request.args.get("username", "").strip()
    if not username:
        return _error("Username is required", 400)

    page = _parse_page(request.args.get("page") or "1")
    if page is None:
        return _error("Page must be a positive integer", 400)

    try:
        result = fetch_watchlist_titles(username, page, **fetch_options(load_config()))
    except LetterboxdHTTPError as exc:
        logger.info("Letterboxd returned %s for %r page %d", exc.status_code, username, page)
        return _error(str(exc), exc.status_code)
    except Exception:
        logger.exception("Scraping error for %r page %d", username, page)
        return _error("Internal Server Error", 500)

    return jsonify({"movies": result.titles, "hasNextPage": result.has_next_page})


@bp.route("/api/watchlist/all", methods=["GET"])
def get_full_watchlist() -> ResponseReturnValue:
    """Crawl a user's whole watchlist server-side.

    Query parameters:
        username: Letterboxd profile name (required).

    Returns:
        JSON with ``movies``, ``count``, ``pages`` and ``complete``.
        ``complete`` is ``False`` when a later page failed and the crawl
        stopped early with the titles gathered so far.
    """
    username = request.args.get("username", "").strip()
    if not username:
        return _error("Username is required", 400)

    config: dict[str, Any] = load_config()
    try:
        max_pages = int(config.get("max_pages") or MAX_PAGES)
    except (TypeError, ValueError):
        max_pages = MAX_PAGES

    def log_progress(progress: CrawlProgress) -> None:
        logger.info("Found %d movies for %r (page %d)", progress.total, username, progress.page)

    try:
        crawl = WatchlistCrawl(
            username,
            default_page_fetcher(**fetch_options(config)),
            max_pages=max(1, min(max_pages, MAX_PAGES)),
        )
        crawl.run(log_progress)
    except LetterboxdHTTPError as exc:
        return _error(str(exc), exc.status_code)
    except Exception:
        logger.exception("Crawl error for %r", username)
        return _error("Internal Server Error", 500)

    return jsonify(
        {
            "movies": crawl.titles,
            "count": len(crawl.titles),
            "pages": crawl.pages_fetched,
            "complete": crawl.complete,
        }
    )


# ---------------------------------------------------------------------------
# Random pick
# ---------------------------------------------------------------------------


@bp.route("/api/random", methods=["POST"])
def random_movie() -> ResponseReturnValue:
    """Pick a random movie from a watchlist supplied in the request body.

    Expects ``{"movies": [...], "filter": "...", "previous": "..."}``; only
    ``movies`` is required.

    Returns:
        ``{"movie": title}``, or ``{"movie": null, "message": ...}`` when no
        movie matches the filter.
    """
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        return _error("Request body must be a JSON object", 400)

    movies = data.get("movies")
    if not isinstance(movies, list) or not all(isinstance(m, str) for m in movies):
        return _error("movies must be a list of strings", 400)

    query = data.get("filter") or ""
    previous = data.get("previous")
    if not isinstance(query, str) or (previous is not None and not isinstance(previous, str)):
        return _error("filter and previous must be strings", 400)

    movie = pick_random(movies, query, previous)
    if movie is None:
        return jsonify({"movie": None, "message": "No movies match your filter"})
    return jsonify({"movie": movie})


# ---------------------------------------------------------------------------
# Config routes
# ---------------------------------------------------------------------------


@bp.route("/api/config", methods=["GET"])
def get_config() -> ResponseReturnValue:
    """Return the current application configuration as JSON."""
    return jsonify(load_config())


@bp.route("/api/config", methods=["POST"])
def update_config() -> ResponseReturnValue:
    """Persist a new application configuration supplied in the request body.

    The entire configuration object is replaced with the POSTed JSON.

    Returns:
        JSON with ``status`` and the saved ``config``, or a 500 error if the
        config file could not be written.
    """
    new_config = request.get_json(silent=True)
    if not isinstance(new_config, dict):
        return (
            jsonify({"status": "error", "message": "Request body must be a JSON object"}),
            400,
        )
    try:
        save_config(new_config)
    except OSError as exc:
        logger.exception("Failed to write config file")
        return (
            jsonify({"status": "error", "message": f"Config file write failed: {exc}"}),
            500,
        )

    return jsonify({"status": "success", "config": new_config})
