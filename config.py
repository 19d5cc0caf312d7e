"""
Centralized Configuration for KenyonCore Job Tracker
Manages environment-specific settings, secrets, and service configurations.
"""
import os
from datetime import timedelta

from dotenv import load_dotenv

load_dotenv()


def normalize_database_url(url):
    """Handle Render's postgres:// vs postgresql:// URL format"""
    if url and url.startswith('postgres://'):
        return url.replace('postgres://', 'postgresql://', 1)
    return url


class Config:
    """Base configuration with defaults"""

    # Flask Settings
    SECRET_KEY = os.environ.get('SECRET_KEY') or os.urandom(32).hex()
    MAX_CONTENT_LENGTH = 10 * 1024 * 1024  # 10MB max file upload

    # CORS Settings
    CORS_ORIGINS = os.environ.get('CORS_ORIGINS', '*').split(',')
    CORS_METHODS = ['GET', 'POST', 'PATCH', 'DELETE', 'OPTIONS']
    CORS_ALLOW_HEADERS = ['Content-Type', 'Authorization', 'X-Requested-With', 'X-User-Id']

    # Database Settings
    DATABASE_URL = normalize_database_url(
        os.environ.get('DATABASE_URL', 'postgresql://localhost/kenyoncore')
    )
    SQLALCHEMY_ENGINE_OPTIONS = {
        'pool_pre_ping': True,
        'pool_recycle': 300,
    }
    SEED_DATABASE = os.environ.get('SEED_DATABASE', 'false').lower() == 'true'

    # AI Service API Keys
    ANTHROPIC_API_KEY = os.environ.get('ANTHROPIC_API_KEY')

    # AI Model Configuration
    AI_MODELS = {
        'claude': {
            'model': 'claude-sonnet-4-20250514',
            'max_tokens': 2048,
            'temperature': 0.0,
        },
    }

    # AI Retry Configuration
    AI_RETRY_ATTEMPTS = int(os.environ.get('AI_RETRY_ATTEMPTS', '1'))
    AI_RETRY_DELAY = int(os.environ.get('AI_RETRY_DELAY', '2'))  # seconds
    AI_TIMEOUT = int(os.environ.get('AI_TIMEOUT', '120'))  # seconds

    # Job numbering
    JOB_NUMBER_PREFIX = os.environ.get('JOB_NUMBER_PREFIX', 'KC')

    # Material import
    ALLOWED_IMPORT_EXTENSIONS = {'csv', 'txt'}

    # Logging Configuration
    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO')
    LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    LOG_FILE = os.environ.get('LOG_FILE', 'app.log')
    LOG_DIR = os.environ.get('LOG_DIR', 'logs')

    # Session Configuration
    SESSION_PERMANENT = False
    PERMANENT_SESSION_LIFETIME = timedelta(days=7)


class DevelopmentConfig(Config):
    """Development-specific configuration"""
    DEBUG = True
    TESTING = False
    LOG_LEVEL = 'DEBUG'
    # Allow all CORS in development
    CORS_ORIGINS = ['*']


class ProductionConfig(Config):
    """Production-specific configuration"""
    DEBUG = False
    TESTING = False
    # Strict CORS in production
    CORS_ORIGINS = os.environ.get('CORS_ORIGINS', 'https://kenyoncore.onrender.com').split(',')
    # Force HTTPS
    PREFERRED_URL_SCHEME = 'https'
    SESSION_COOKIE_SECURE = True
    SESSION_COOKIE_HTTPONLY = True
    SESSION_COOKIE_SAMESITE = 'Lax'


class TestingConfig(Config):
    """Testing-specific configuration"""
    DEBUG = True
    TESTING = True
    DATABASE_URL = 'sqlite://'
    SQLALCHEMY_ENGINE_OPTIONS = {}
    SEED_DATABASE = False
    ANTHROPIC_API_KEY = None
    LOG_FILE = 'test.log'


# Configuration selector
config_by_name = {
    'development': DevelopmentConfig,
    'production': ProductionConfig,
    'testing': TestingConfig,
    'default': DevelopmentConfig,
}


def get_config():
    """Get configuration based on FLASK_ENV environment variable"""
    env = os.environ.get('FLASK_ENV', 'development')
    return config_by_name.get(env, DevelopmentConfig)
