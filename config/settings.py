# config/settings.py
"""
Application configuration

Values come from environment variables at import time. Email credentials
have no defaults: senders fail when they are used without them.
"""

import os
import secrets


def _env_flag(name: str, default: bool = False) -> bool:
    value = os.environ.get(name)
    if value is None:
        return default
    return value.strip().lower() in ('1', 'true', 'yes', 'on')


class BaseConfig:
    """Settings shared by every environment"""

    SECRET_KEY = os.environ.get('SECRET_KEY') or secrets.token_urlsafe(32)
    VERSION = os.environ.get('APP_VERSION', '1.0.0')

    # Logging
    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO')
    LOG_TO_JOURNAL = _env_flag('LOG_TO_JOURNAL')
    SLOW_REQUEST_THRESHOLD = 1000  # ms

    # Site builder REST API
    API_BASE_URL = os.environ.get('API_BASE_URL', 'http://localhost:5000')
    TOKEN_STORAGE_PATH = os.environ.get('TOKEN_STORAGE_PATH')

    # Email delivery: 'resend' or 'ses'
    EMAIL_PROVIDER = os.environ.get('EMAIL_PROVIDER', 'resend')
    EMAIL_FROM_NAME = os.environ.get('EMAIL_FROM_NAME', 'Tart')
    EMAIL_FROM_ADDRESS = os.environ.get('EMAIL_FROM_ADDRESS')
    RESEND_API_KEY = os.environ.get('RESEND_API_KEY')
    AWS_REGION = os.environ.get('AWS_REGION', 'us-east-1')
    SES_SENDER = os.environ.get('SES_SENDER')
    SES_FROM_NAME = os.environ.get('SES_FROM_NAME', 'Tart')

    # Celery
    CELERY_BROKER_URL = os.environ.get('CELERY_BROKER_URL', 'redis://localhost:6379/0')
    CELERY_RESULT_BACKEND = os.environ.get('CELERY_RESULT_BACKEND', CELERY_BROKER_URL)

    # Session cookies
    SESSION_COOKIE_SECURE = True
    SESSION_COOKIE_HTTPONLY = True
    SESSION_COOKIE_SAMESITE = 'Lax'

    # Published sites boot from an inline SITE_CONFIG script
    CSP_POLICY = {
        'default-src': "'self'",
        'script-src': "'self' 'unsafe-inline'",
        'style-src': "'self' 'unsafe-inline'",
        'img-src': "'self' data: https:",
        'connect-src': "'self'",
        'object-src': "'none'",
        'base-uri': "'self'",
    }

    SECURITY_HEADERS = {
        'X-Content-Type-Options': 'nosniff',
        'X-Frame-Options': 'DENY',
        'Strict-Transport-Security': 'max-age=31536000; includeSubDomains',
        'Referrer-Policy': 'strict-origin-when-cross-origin',
        'Permissions-Policy': 'camera=(), microphone=(), geolocation=()'
    }


class DevelopmentConfig(BaseConfig):
    DEBUG = True
    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'DEBUG')
    SESSION_COOKIE_SECURE = False


class TestingConfig(BaseConfig):
    TESTING = True
    SECRET_KEY = 'testing-secret-key'
    API_BASE_URL = 'http://api.test'
    EMAIL_PROVIDER = 'resend'
    EMAIL_FROM_ADDRESS = 'noreply@example.com'
    RESEND_API_KEY = 'test-key'
    SESSION_COOKIE_SECURE = False


class ProductionConfig(BaseConfig):
    LOG_TO_JOURNAL = _env_flag('LOG_TO_JOURNAL', default=True)


CONFIGS = {
    'development': DevelopmentConfig,
    'testing': TestingConfig,
    'production': ProductionConfig,
}


def get_config(name: str = None):
    name = name or os.environ.get('FLASK_ENV', 'production')
    return CONFIGS.get(name.lower(), ProductionConfig)


def config_mapping(config_class) -> dict:
    """Upper-case settings of a config class as a plain dict"""
    return {name: getattr(config_class, name) for name in dir(config_class) if name.isupper()}
