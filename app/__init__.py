"""
KenyonCore Job Tracker - Application Package

This package contains the HTTP layer:
- api/: HTTP route handlers (Flask Blueprints)
- utils/: Shared request helpers

The app factory and core Flask setup remain in app_init.py at the project root.
"""

import logging

logger = logging.getLogger(__name__)

# Import blueprints
from app.api.jobs import jobs_bp
from app.api.materials import materials_bp
from app.api.invoices import invoices_bp
from app.api.catalog import catalog_bp
from app.api.reports import reports_bp
from app.api.notifications import notifications_bp
from app.api.users import users_bp

BLUEPRINTS = (
    jobs_bp,
    materials_bp,
    invoices_bp,
    catalog_bp,
    reports_bp,
    notifications_bp,
    users_bp,
)


def register_blueprints(app):
    """
    Register all API blueprints with the Flask app.
    Called from app_init.create_app after security and health checks are set up.

    Args:
        app: Flask application instance
    """
    for blueprint in BLUEPRINTS:
        app.register_blueprint(blueprint)
    logger.info(f"Registered {len(BLUEPRINTS)} API blueprints")


__all__ = ['register_blueprints', 'jobs_bp', 'materials_bp', 'invoices_bp',
           'catalog_bp', 'reports_bp', 'notifications_bp', 'users_bp']
