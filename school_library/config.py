import os
from datetime import timedelta


def _flag(name: str, default: str = "0") -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


class Config:
    SECRET_KEY = os.getenv("SECRET_KEY", "super-secret-key")

    SQLALCHEMY_DATABASE_URI = os.getenv(
        "SQLALCHEMY_DATABASE_URI",
        "sqlite:///school_library.db",
    )

    SQLALCHEMY_TRACK_MODIFICATIONS = False
    SQLALCHEMY_ENGINE_OPTIONS = {"pool_pre_ping": True}

    JWT_SECRET_KEY = os.getenv("JWT_SECRET_KEY", "jwt-super-secret")
    JWT_ACCESS_TOKEN_EXPIRES = timedelta(hours=int(os.getenv("JWT_ACCESS_TOKEN_EXPIRES_HOURS", "12")))

    MAIL_SERVER = os.getenv("MAIL_SERVER", "smtp.gmail.com")
    MAIL_PORT = int(os.getenv("MAIL_PORT", "587"))
    MAIL_USE_TLS = _flag("MAIL_USE_TLS", "1")
    MAIL_USERNAME = os.getenv("MAIL_USERNAME", "")
    MAIL_PASSWORD = os.getenv("MAIL_PASSWORD", "")
    MAIL_DEFAULT_SENDER = os.getenv("MAIL_DEFAULT_SENDER", "noreply@library.local")

    # Circulation policy
    LIBRARY_LOAN_DAYS = int(os.getenv("LIBRARY_LOAN_DAYS", "14"))
    LIBRARY_RENEWAL_DAYS = int(os.getenv("LIBRARY_RENEWAL_DAYS", "14"))
    LIBRARY_MAX_RENEWALS = int(os.getenv("LIBRARY_MAX_RENEWALS", "2"))
    LIBRARY_RESERVATION_DAYS = int(os.getenv("LIBRARY_RESERVATION_DAYS", "7"))
    # 0 leaves fines to the librarian (amount sent with the return request)
    LIBRARY_FINE_PER_DAY = os.getenv("LIBRARY_FINE_PER_DAY", "0")

    SCHEDULER_ENABLED = _flag("SCHEDULER_ENABLED", "1")
    LATE_CHECK_INTERVAL_MINUTES = int(os.getenv("LATE_CHECK_INTERVAL_MINUTES", "10"))

    EXPOSE_INTERNAL_ERRORS = _flag("EXPOSE_INTERNAL_ERRORS", "0")


class TestingConfig(Config):
    TESTING = True
    SQLALCHEMY_DATABASE_URI = "sqlite://"
    SQLALCHEMY_ENGINE_OPTIONS = {}
    JWT_SECRET_KEY = "test-jwt-secret-key-with-enough-length"
    MAIL_SUPPRESS_SEND = True
    SCHEDULER_ENABLED = False
    LIBRARY_FINE_PER_DAY = "0"
