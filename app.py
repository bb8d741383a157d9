"""
app.py – Flask application entry point.

Creates the Flask app, registers the route Blueprint and, when run directly,
starts the development server using the host/port from ``config.json``.
"""

from __future__ import annotations

import logging

from flask import Flask

from config import load_config
from routes import bp

app = Flask(__name__)
app.register_blueprint(bp)


if __name__ == "__main__":
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    server = load_config().get("server", {})
    app.run(
        host=server.get("host", "0.0.0.0"),
        port=int(server.get("port", 5000)),
        debug=bool(server.get("debug", False)),
    )
