"""
Configuration - environment-driven settings per deployment

Pick a class with FLASK_ENV (development, production, testing) or pass its
name to create_app().
"""

import os
from datetime import timedelta

PG_PARTS = ('PGUSER', 'PGPASSWORD', 'PGHOST', 'PGPORT', 'PGDATABASE')


def database_url(default='sqlite:///portfolio.db'):
    """DATABASE_URL, else a postgres URL built from PG* variables, else default"""
    url = os.environ.get('DATABASE_URL')
    if not url:
        user, password, host, port, name = (os.environ.get(part) for part in PG_PARTS)
        if all([user, password, host, port, name]):
            url = f"postgresql://{user}:{password}@{host}:{port}/{name}"
    if url and url.startswith('postgres://'):
        # SQLAlchemy only accepts the postgresql:// scheme
        url = 'postgresql://' + url[len('postgres://'):]
    return url or default


class Config:
    """Base configuration"""

    # Flask Settings
    SECRET_KEY = os.environ.get('SESSION_SECRET', 'CHANGE-THIS-SECRET-KEY-IN-PRODUCTION')
    PERMANENT_SESSION_LIFETIME = timedelta(days=7)
    SESSION_COOKIE_SECURE = False
    SESSION_COOKIE_HTTPONLY = True
    SESSION_COOKIE_SAMESITE = 'Lax'
    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO')

    # Database Settings
    SQLALCHEMY_DATABASE_URI = database_url()
    SQLALCHEMY_ENGINE_OPTIONS = {
        'pool_recycle': 3600,
        'pool_pre_ping': True,
    }
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # Upload / Storage Settings
    MAX_CONTENT_LENGTH = 16 * 1024 * 1024  # 16MB request ceiling
    UPLOAD_FOLDER = os.environ.get('UPLOAD_FOLDER', 'static/uploads')
    STORAGE_BUCKET = 'content-images'
    STORAGE_PUBLIC_URL = os.environ.get('STORAGE_PUBLIC_URL', '/static/uploads')
    MAX_IMAGE_SIZE = 5 * 1024 * 1024  # 5MB per thumbnail
    ALLOWED_IMAGE_TYPES = {'image/jpeg', 'image/png', 'image/gif', 'image/webp'}

    # JSON Settings
    JSON_AS_ASCII = False

    # Analytics
    ANALYTICS_ASYNC = True
    ANALYTICS_REFRESH_SECONDS = 30

    # Submissions stream: keep-alive interval and how many before the stream
    # ends and the browser reconnects
    STREAM_KEEPALIVE_SECONDS = 15
    STREAM_MAX_KEEPALIVES = 8

    # Security
    RATE_LIMIT_ENABLED = True
    API_TOKEN_MAX_AGE = 24 * 3600
    PASSWORD_RESET_MAX_AGE = 3600
    SECURITY_LOG_FILE = 'security/ip_log.json'

    # Site
    SITE_NAME = os.environ.get('SITE_NAME', 'Radsting Dev')
    OWNER_EMAIL = os.environ.get('OWNER_EMAIL', 'hello@radsting.dev')
    OWNER_INSTAGRAM = os.environ.get('OWNER_INSTAGRAM', 'radsting.dev')
    ENABLE_VISUAL_EFFECTS = os.environ.get('ENABLE_VISUAL_EFFECTS', '1') == '1'

    # Owner Notification Settings
    ADMIN_TELEGRAM_BOT_TOKEN = os.environ.get('ADMIN_TELEGRAM_BOT_TOKEN')
    ADMIN_TELEGRAM_CHAT_ID = os.environ.get('ADMIN_TELEGRAM_CHAT_ID')
    ADMIN_SMTP_HOST = os.environ.get('ADMIN_SMTP_HOST')
    ADMIN_SMTP_PORT = os.environ.get('ADMIN_SMTP_PORT', '587')
    ADMIN_SMTP_EMAIL = os.environ.get('ADMIN_SMTP_EMAIL')
    ADMIN_SMTP_PASSWORD = os.environ.get('ADMIN_SMTP_PASSWORD')


class DevelopmentConfig(Config):
    """Development configuration"""
    DEBUG = True
    TESTING = False


class ProductionConfig(Config):
    """Production configuration"""
    DEBUG = False
    TESTING = False
    SESSION_COOKIE_SECURE = True


class TestingConfig(Config):
    """Testing configuration"""
    DEBUG = True
    TESTING = True
    SQLALCHEMY_DATABASE_URI = 'sqlite:///:memory:'
    # In-memory SQLite runs on a StaticPool, which rejects pool options.
    SQLALCHEMY_ENGINE_OPTIONS = {}
    ANALYTICS_ASYNC = False
    RATE_LIMIT_ENABLED = False
    SECURITY_LOG_FILE = None
    ENABLE_VISUAL_EFFECTS = False


# Select configuration based on environment
config = {
    'development': DevelopmentConfig,
    'production': ProductionConfig,
    'testing': TestingConfig,
    'default': DevelopmentConfig
}

def get_config(config_name=None):
    """Get configuration by name, falling back to FLASK_ENV"""
    env = config_name or os.environ.get('FLASK_ENV', 'development')
    return config.get(env, config['default'])
