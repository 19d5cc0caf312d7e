"""
Health Check & Monitoring Endpoints
Provides endpoints for deployment health checks and monitoring
"""
import os
import sys
import time
import psutil
from datetime import datetime
from typing import Dict, Any
from flask import Blueprint, jsonify, current_app
import logging

from database.connection import check_db_connection

logger = logging.getLogger(__name__)

SERVICE_NAME = 'kenyoncore-job-tracker'
SERVICE_VERSION = '1.0.0'

# Create Blueprint for health check routes
health_bp = Blueprint('health', __name__)

# Track application start time
START_TIME = time.time()


def get_system_metrics() -> Dict[str, Any]:
    """
    Get basic process metrics

    Returns:
        Dictionary of system metrics (empty if psutil cannot read them)
    """
    try:
        process = psutil.Process()

        return {
            'cpu_percent': process.cpu_percent(interval=0.1),
            'memory_mb': process.memory_info().rss / 1024 / 1024,
            'memory_percent': process.memory_percent(),
            'threads': process.num_threads(),
        }
    except psutil.Error as e:
        logger.warning(f"Failed to get system metrics: {e}")
        return {}


def get_uptime() -> Dict[str, Any]:
    """
    Get application uptime

    Returns:
        Dictionary with uptime information
    """
    uptime_seconds = time.time() - START_TIME

    return {
        'uptime_seconds': round(uptime_seconds, 2),
        'uptime_minutes': round(uptime_seconds / 60, 2),
        'uptime_hours': round(uptime_seconds / 3600, 2),
        'started_at': datetime.fromtimestamp(START_TIME).isoformat()
    }


def check_ai_services(app) -> Dict[str, bool]:
    """
    Check if AI services are configured

    Args:
        app: Flask application instance

    Returns:
        Dictionary of service availability
    """
    ai_service = getattr(app, 'ai_service', None)
    return {
        'anthropic_claude': bool(ai_service and ai_service.is_available('claude')),
    }


def check_database() -> Dict[str, Any]:
    """
    Check the database answers a trivial query

    Returns:
        Dictionary with 'healthy' and, on failure, 'error'
    """
    try:
        check_db_connection()
        return {'healthy': True}
    except RuntimeError as e:
        return {'healthy': False, 'error': str(e)}


@health_bp.route('/health', methods=['GET'])
def health_check():
    """
    Basic health check endpoint
    Returns 200 if application is running
    """
    return jsonify({
        'status': 'healthy',
        'timestamp': datetime.utcnow().isoformat(),
        'service': SERVICE_NAME
    }), 200


@health_bp.route('/ready', methods=['GET'])
def readiness_check():
    """
    Readiness probe endpoint
    Returns 200 when the database is reachable. AI extraction is optional
    and only reported.
    """
    database = check_database()
    is_ready = database['healthy']

    response = {
        'status': 'ready' if is_ready else 'not_ready',
        'timestamp': datetime.utcnow().isoformat(),
        'checks': {
            'database': database,
            'ai_services': check_ai_services(current_app),
        }
    }

    return jsonify(response), 200 if is_ready else 503


@health_bp.route('/metrics', methods=['GET'])
def metrics():
    """
    Basic metrics endpoint
    Returns system metrics and application statistics
    """
    response = {
        'timestamp': datetime.utcnow().isoformat(),
        'service': SERVICE_NAME,
        'version': SERVICE_VERSION,
        'environment': os.environ.get('FLASK_ENV', 'production'),
        'uptime': get_uptime(),
        'system': get_system_metrics(),
        'services': check_ai_services(current_app),
        'python_version': sys.version.split()[0]
    }

    return jsonify(response), 200


@health_bp.route('/ping', methods=['GET'])
def ping():
    """Simple ping endpoint"""
    return 'pong', 200


def register_health_checks(app):
    """
    Register health check blueprint with Flask app

    Args:
        app: Flask application instance
    """
    app.register_blueprint(health_bp, url_prefix='/api')
    logger.info("Health check endpoints registered")
    logger.info("Available endpoints: /api/health, /api/ready, /api/metrics, /api/ping")
