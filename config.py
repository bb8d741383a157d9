"""
config.py – Configuration persistence helpers.

Handles loading and saving the application's ``config.json`` file, filling in
defaults for keys the file does not (yet) contain and creating the file on
first run.
"""

from __future__ import annotations

import copy
import json
import os
from typing import Any

from crawler import MAX_PAGES
from letterboxd import DEFAULT_USER_AGENT, LETTERBOXD_BASE_URL

# ---------------------------------------------------------------------------
# Paths
# ---------------------------------------------------------------------------

CONFIG_DIR: str = os.path.join(os.path.dirname(__file__), "config")
CONFIG_FILE: str = os.path.join(CONFIG_DIR, "config.json")

# ---------------------------------------------------------------------------
# Defaults
# ---------------------------------------------------------------------------

DEFAULT_CONFIG: dict[str, Any] = {
    "letterboxd_base_url": LETTERBOXD_BASE_URL,
    "user_agent": DEFAULT_USER_AGENT,
    "request_timeout": 15,
    "max_pages": MAX_PAGES,
    "server": {
        "host": "0.0.0.0",
        "port": 5000,
        "debug": False,
    },
}

# ---------------------------------------------------------------------------
# Public helpers
# ---------------------------------------------------------------------------


def load_config() -> dict[str, Any]:
    """Load configuration from disk.

    If the config file does not exist it is created from :data:`DEFAULT_CONFIG`
    and a copy of that default dict is returned.  Keys missing from an
    existing file, including keys of nested sections such as ``server``, are
    filled in from :data:`DEFAULT_CONFIG`.

    Returns:
        The configuration dictionary.
    """
    if not os.path.exists(CONFIG_FILE):
        save_config(copy.deepcopy(DEFAULT_CONFIG))
        return copy.deepcopy(DEFAULT_CONFIG)

    try:
        with open(CONFIG_FILE, "r") as fh:
            cfg = json.load(fh)
    except (OSError, ValueError):
        # If the file is corrupt or unreadable, fall back to safe defaults
        return copy.deepcopy(DEFAULT_CONFIG)

    if not isinstance(cfg, dict):
        return copy.deepcopy(DEFAULT_CONFIG)

    for key, default_value in DEFAULT_CONFIG.items():
        cfg.setdefault(key, copy.deepcopy(default_value))
        if isinstance(default_value, dict) and isinstance(cfg[key], dict):
            for sub_key, sub_val in default_value.items():
                cfg[key].setdefault(sub_key, sub_val)

    return cfg


def save_config(config: dict[str, Any]) -> None:
    """Persist *config* to :data:`CONFIG_FILE` as pretty-printed JSON.

    Args:
        config: The configuration dictionary to write.
    """
    os.makedirs(CONFIG_DIR, exist_ok=True)
    with open(CONFIG_FILE, "w") as fh:
        json.dump(config, fh, indent=4)


def fetch_options(config: dict[str, Any]) -> dict[str, Any]:
    """Return the keyword arguments for :func:`letterboxd.fetch_watchlist_page`."""
    return {
        "base_url": str(config.get("letterboxd_base_url") or LETTERBOXD_BASE_URL),
        "user_agent": str(config.get("user_agent") or DEFAULT_USER_AGENT),
        "timeout": float(config.get("request_timeout") or 15),
    }
