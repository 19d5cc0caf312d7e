"""
Application Initialization Module
Initializes the Flask app with configuration, logging, database, security and routes
"""
import os
from flask import Flask
from config import get_config
from logging_config import setup_logging
from ai_service import AIService
from security import setup_security
from health_checks import register_health_checks
from database.connection import init_engine, init_db
import logging

logger = logging.getLogger(__name__)


def create_app(config_class=None):
    """
    Application factory that creates and configures the Flask app

    Args:
        config_class: Configuration class; chosen from FLASK_ENV when omitted

    Returns:
        Configured Flask application instance
    """
    app = Flask(__name__)

    app.config.from_object(config_class or get_config())

    setup_logging(app)

    logger.info("=" * 60)
    logger.info("🚀 Initializing KenyonCore Job Tracker")
    logger.info("=" * 60)
    logger.info(f"Environment: {os.environ.get('FLASK_ENV', 'development')}")
    logger.info(f"Debug mode: {app.debug}")

    initialize_database(app)

    # Setup security (CORS, headers, error handlers)
    setup_security(app, app.config)

    app.ai_service = initialize_ai_service(app)

    register_health_checks(app)

    from app import register_blueprints
    register_blueprints(app)

    logger.info("✅ Application initialization complete")
    logger.info("=" * 60)

    return app


def initialize_database(app):
    """
    Bind the engine to DATABASE_URL, create missing tables and optionally seed

    Args:
        app: Flask application instance
    """
    init_engine(app.config['DATABASE_URL'], **app.config.get('SQLALCHEMY_ENGINE_OPTIONS', {}))
    init_db()

    if app.config.get('SEED_DATABASE'):
        from database.seed import seed_database
        seed_database()


def initialize_ai_service(app):
    """
    Initialize the AI service used for invoice extraction

    Args:
        app: Flask application instance

    Returns:
        AIService instance
    """
    ai_service = AIService(app.config)

    if ai_service.is_available('claude'):
        logger.info("✅ AI Services initialized: Claude")
    else:
        logger.warning("⚠️  No AI services configured - check ANTHROPIC_API_KEY")

    return ai_service
