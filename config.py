"""
Flask application configuration classes.
Provides configuration for development, production, and testing environments.
"""

import os
from datetime import timedelta


class Config:
    """Base configuration class with common settings."""

    # Secret key for session management and CSRF protection
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'dev-secret-key-change-in-production'

    # Database configuration
    DATABASE_PATH = os.environ.get('DATABASE_PATH') or 'instance/bookings.db'
    # Seconds a query waits on a locked database before failing
    DATABASE_TIMEOUT = float(os.environ.get('DATABASE_TIMEOUT', 3))

    # Reservation store: 'sqlite' or 'memory'
    REPOSITORY_BACKEND = os.environ.get('REPOSITORY_BACKEND', 'sqlite')

    # restrictions.id recorded for reservation-derived room blocks
    RESERVATION_RESTRICTION_ID = 1
    # restrictions.id used by the block-room command
    OWNER_BLOCK_RESTRICTION_ID = 2

    # Security settings
    WTF_CSRF_ENABLED = True
    WTF_CSRF_TIME_LIMIT = 3600  # CSRF token expires after 1 hour
    SESSION_COOKIE_HTTPONLY = True
    SESSION_COOKIE_SAMESITE = 'Lax'
    SESSION_COOKIE_SECURE = False  # Set to True in production with HTTPS
    PERMANENT_SESSION_LIFETIME = timedelta(
        hours=int(os.environ.get('SESSION_TIMEOUT_HOURS', 24))
    )

    # Mail
    MAIL_SERVER = os.environ.get('MAIL_SERVER', 'localhost')
    MAIL_PORT = int(os.environ.get('MAIL_PORT', 1025))
    MAIL_USERNAME = os.environ.get('MAIL_USERNAME')
    MAIL_PASSWORD = os.environ.get('MAIL_PASSWORD')
    MAIL_USE_TLS = os.environ.get('MAIL_USE_TLS', 'false').lower() == 'true'
    MAIL_TIMEOUT = 10
    MAIL_DEFAULT_SENDER = os.environ.get('MAIL_DEFAULT_SENDER', 'reservations@bookings.local')
    # Owner copy of every new reservation (disabled when empty)
    MAIL_OWNER_ADDRESS = os.environ.get('MAIL_OWNER_ADDRESS', '')
    MAIL_SUPPRESS_SEND = False

    # Application settings
    APP_NAME = 'Fort Smythe Bed & Breakfast'
    APP_VERSION = '1.0.0'


class DevelopmentConfig(Config):
    """Development environment configuration."""

    DEBUG = True
    TESTING = False
    TEMPLATES_AUTO_RELOAD = True
    SESSION_COOKIE_SECURE = False
    WTF_CSRF_SSL_STRICT = False
    MAIL_SUPPRESS_SEND = os.environ.get('MAIL_SUPPRESS_SEND', 'false').lower() == 'true'


class ProductionConfig(Config):
    """Production environment configuration."""

    DEBUG = False
    TESTING = False
    SESSION_COOKIE_SECURE = os.environ.get('SESSION_COOKIE_SECURE', 'true').lower() == 'true'
    WTF_CSRF_SSL_STRICT = SESSION_COOKIE_SECURE

    SECRET_KEY = os.environ.get('SECRET_KEY') or Config.SECRET_KEY
    DATABASE_PATH = os.environ.get('DATABASE_PATH') or Config.DATABASE_PATH

    # URL scheme preference (follows SESSION_COOKIE_SECURE setting)
    PREFERRED_URL_SCHEME = 'https' if SESSION_COOKIE_SECURE else 'http'

    @classmethod
    def validate(cls) -> None:
        """Validate that required production environment variables are set."""
        secret_key = os.environ.get('SECRET_KEY')
        if not secret_key:
            raise ValueError("SECRET_KEY environment variable must be set in production")
        if len(secret_key) < 32:
            raise ValueError("SECRET_KEY must be at least 32 characters in production")
        if not os.environ.get('DATABASE_PATH'):
            raise ValueError("DATABASE_PATH environment variable must be set in production")


class TestConfig(Config):
    """Testing environment configuration."""

    TESTING = True
    DEBUG = True
    WTF_CSRF_ENABLED = False  # Disable CSRF for tests
    DATABASE_PATH = os.environ.get('DATABASE_PATH', ':memory:')
    SECRET_KEY = 'test-secret-key'
    MAIL_SUPPRESS_SEND = True


# Configuration dictionary
config = {
    'development': DevelopmentConfig,
    'production': ProductionConfig,
    'test': TestConfig,
    'default': DevelopmentConfig
}
