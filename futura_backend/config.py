import os
from datetime import timedelta


class Config:
    # Secret key for sessions / JWT
    SECRET_KEY = os.environ.get("SECRET_KEY", "dev-secret")

    # Database connection
    SQLALCHEMY_DATABASE_URI = os.environ.get("DATABASE_URL", "sqlite:///futura.db")
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # JWT Configuration
    JWT_SECRET_KEY = os.environ.get("JWT_SECRET_KEY", SECRET_KEY)
    JWT_ACCESS_TOKEN_EXPIRES = timedelta(hours=int(os.environ.get("JWT_EXPIRES_HOURS", 12)))

    # Real-time broadcast (Redis pub/sub)
    REDIS_URL = os.environ.get("REDIS_URL", "redis://localhost:6379/0")
    BROADCAST_CHANNEL = os.environ.get("BROADCAST_CHANNEL", "user-registrations")

    # Branding used on receipts and reports
    COMPANY_NAME = os.environ.get("COMPANY_NAME", "FUTURA HOMES")
    COMPANY_TAGLINE = os.environ.get("COMPANY_TAGLINE", "Property Management & Sales")

    API_PREFIX = "/api"
    JSON_SORT_KEYS = False

    # Flask Configuration
    FLASK_ENV = os.environ.get("FLASK_ENV", "production")
    FLASK_DEBUG = os.environ.get("FLASK_DEBUG", "False").lower() == "true"


class TestingConfig(Config):
    TESTING = True
    SECRET_KEY = "test-secret"
    JWT_SECRET_KEY = "test-jwt-secret-with-enough-length-for-hs256"
    SQLALCHEMY_DATABASE_URI = "sqlite://"
    REDIS_URL = "redis://localhost:6379/15"
