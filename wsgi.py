"""
WSGI Entry Point for Gunicorn

Gunicorn can be configured to use either:
  - wsgi:app
  - application:app

The Flask application is created in application.py.
"""

from application import app  # noqa: F401
