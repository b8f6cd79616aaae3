"""
Environment-aware configuration.
Secrets and token lifetimes come from the environment (.env is read if present).
"""
import os
import re
from datetime import timedelta

from dotenv import load_dotenv

load_dotenv()  # Read .env if present

_DURATION_RE = re.compile(r"^\s*(\d+)\s*([smhd]?)\s*$")
_UNITS = {"": "seconds", "s": "seconds", "m": "minutes", "h": "hours", "d": "days"}


def parse_duration(value: str) -> timedelta:
    """
    Parse "900", "30s", "15m", "12h" or "7d" into a timedelta.
    A bare number means seconds.
    """
    match = _DURATION_RE.match(str(value))
    if not match:
        raise ValueError(f"Invalid duration: {value!r}")
    amount, unit = match.groups()
    return timedelta(**{_UNITS[unit]: int(amount)})


class BaseConfig:
    SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-key")  # Set a strong key in production
    DEBUG = False
    TESTING = False
    APP_ENV = os.getenv("APP_ENV", "dev")
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

    DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///sociala.db")

    # Front-end origin allowed to send the refresh cookie cross-site
    CORS_ORIGINS = os.getenv("CORS_ORIGINS", "http://localhost:5173")

    # Token settings; the two secrets must differ
    JWT_ACCESS_SECRET = os.getenv("JWT_ACCESS_SECRET")
    JWT_REFRESH_SECRET = os.getenv("JWT_REFRESH_SECRET")
    JWT_ALGORITHM = os.getenv("JWT_ALGORITHM", "HS256")
    JWT_ISSUER = os.getenv("JWT_ISSUER", "sociala")
    ACCESS_TOKEN_EXPIRES = parse_duration(os.getenv("ACCESS_TOKEN_EXPIRES_IN", "15m"))
    REFRESH_TOKEN_EXPIRES = parse_duration(os.getenv("REFRESH_TOKEN_EXPIRES_IN", "7d"))

    # Argon2id cost for password and refresh-credential hashes (None = library default)
    ARGON2_TIME_COST = None
    ARGON2_MEMORY_COST = None
    ARGON2_PARALLELISM = None

    REFRESH_COOKIE_NAME = "refresh_token"
    REFRESH_COOKIE_PATH = "/auth/refresh"
    REFRESH_COOKIE_SECURE = False
    REFRESH_COOKIE_SAMESITE = "Lax"

    UPLOAD_FOLDER = os.getenv("UPLOAD_FOLDER", os.path.join(os.getcwd(), "uploads"))
    MAX_CONTENT_LENGTH = 5 * 1024 * 1024  # 5MB
    ALLOWED_IMAGE_TYPES = {"image/jpeg": ".jpg", "image/png": ".png", "image/webp": ".webp"}


class DevelopmentConfig(BaseConfig):
    DEBUG = True
    # Fallback secrets so `python -m api` works without a .env
    JWT_ACCESS_SECRET = BaseConfig.JWT_ACCESS_SECRET or "dev-access-secret-change-me"
    JWT_REFRESH_SECRET = BaseConfig.JWT_REFRESH_SECRET or "dev-refresh-secret-change-me"


class TestingConfig(BaseConfig):
    TESTING = True
    APP_ENV = "test"
    DATABASE_URL = "sqlite:///:memory:"
    JWT_ACCESS_SECRET = "test-access-secret"
    JWT_REFRESH_SECRET = "test-refresh-secret"
    # Cheap hashes keep the suite fast
    ARGON2_TIME_COST = 1
    ARGON2_MEMORY_COST = 1024
    ARGON2_PARALLELISM = 1


class ProductionConfig(BaseConfig):
    DEBUG = False
    APP_ENV = "production"
    # Cross-site SPA: the cookie needs SameSite=None, which browsers only accept with Secure
    REFRESH_COOKIE_SECURE = True
    REFRESH_COOKIE_SAMESITE = "None"


def get_config(name: str | None):
    """
    Select config class.
    - If name is provided, choose by name.
    - Else choose based on APP_ENV (dev/test/prod).
    """
    env = (name or os.getenv("APP_ENV", "dev")).lower()
    if env in ["prod", "production"]:
        return ProductionConfig
    if env in ["test", "testing"]:
        return TestingConfig
    return DevelopmentConfig
