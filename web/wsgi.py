"""
WSGI entrypoint for production (gunicorn/systemd).

This module should have no side effects beyond configuring logging and creating the Flask app.
"""
import logging

from web.app import create_app

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

app = create_app()
