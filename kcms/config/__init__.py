import os
from dotenv import load_dotenv

load_dotenv()


class ConfigurationError(RuntimeError):
    """Raised at startup when required settings are missing."""


class Config:
    SECRET_KEY = os.getenv('SECRET_KEY')
    DATABASE_URL = os.getenv('DATABASE_URL')
    SQLALCHEMY_DATABASE_URI = DATABASE_URL
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    SESSION_COOKIE_SECURE = True
    SESSION_COOKIE_HTTPONLY = True
    SESSION_COOKIE_SAMESITE = 'Lax'
    REMEMBER_COOKIE_SECURE = True
    REMEMBER_COOKIE_HTTPONLY = True
    RATELIMIT_ENABLED = os.getenv('RATELIMIT_ENABLED', 'true').lower() in ('1', 'true', 'yes')

    # Header line printed on exported documents
    ORGANIZATION_TITLE = os.getenv('KCMS_ORGANIZATION_TITLE', 'منطقة الإسكندرية للكاراتيه')


REQUIRED_SETTINGS = ('SECRET_KEY', 'SQLALCHEMY_DATABASE_URI')


def validate_config(config) -> None:
    """Fail fast when the database URL or secret key is not configured."""
    missing = [key for key in REQUIRED_SETTINGS if not config.get(key)]
    if missing:
        raise ConfigurationError(
            f"Missing required configuration: {', '.join(missing)}"
        )


__all__ = ['Config', 'ConfigurationError', 'validate_config']
