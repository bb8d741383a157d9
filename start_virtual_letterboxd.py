#!/usr/bin/env python3
"""
Helper script to run the virtual Letterboxd mock site for development and testing.
Point ``letterboxd_base_url`` in config.json at http://localhost:8097 to use it.
"""

from tests.virtual_letterboxd import app

if __name__ == "__main__":
    print("Starting Virtual Letterboxd Mock Site...")
    print("Try: http://localhost:8097/alice/watchlist/page/1/")
    print("Press Ctrl+C to stop.")
    app.run(host="0.0.0.0", port=8097, debug=True)
