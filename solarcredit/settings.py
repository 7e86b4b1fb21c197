"""
Django settings for the SolarCredit ledger service.

Every value that differs between environments is read from a
SOLARCREDIT_* environment variable. The defaults give a self-contained
SQLite setup for local runs and the test suite; production deployments
point the database at PostgreSQL, where select_for_update() takes real
row locks.
"""

import os
from pathlib import Path

BASE_DIR = Path(__file__).resolve().parent.parent


def _env_bool(name, default=False):
    value = os.environ.get(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


SECRET_KEY = os.environ.get("SOLARCREDIT_SECRET_KEY", "insecure-dev-key-change-me")

DEBUG = _env_bool("SOLARCREDIT_DEBUG", default=False)

ALLOWED_HOSTS = [
    host.strip()
    for host in os.environ.get("SOLARCREDIT_ALLOWED_HOSTS", "localhost,127.0.0.1,testserver").split(",")
    if host.strip()
]

INSTALLED_APPS = [
    "django.contrib.auth",
    "django.contrib.contenttypes",
    "django.contrib.sessions",
    "rest_framework",
    "ledger",
]

MIDDLEWARE = [
    "django.middleware.security.SecurityMiddleware",
    "django.contrib.sessions.middleware.SessionMiddleware",
    "django.middleware.common.CommonMiddleware",
    "django.middleware.csrf.CsrfViewMiddleware",
    "django.contrib.auth.middleware.AuthenticationMiddleware",
]

ROOT_URLCONF = "solarcredit.urls"

WSGI_APPLICATION = "solarcredit.wsgi.application"

DATABASES = {
    "default": {
        "ENGINE": os.environ.get("SOLARCREDIT_DB_ENGINE", "django.db.backends.sqlite3"),
        "NAME": os.environ.get("SOLARCREDIT_DB_NAME", str(BASE_DIR / "db.sqlite3")),
        "USER": os.environ.get("SOLARCREDIT_DB_USER", ""),
        "PASSWORD": os.environ.get("SOLARCREDIT_DB_PASSWORD", ""),
        "HOST": os.environ.get("SOLARCREDIT_DB_HOST", ""),
        "PORT": os.environ.get("SOLARCREDIT_DB_PORT", ""),
    }
}

if DATABASES["default"]["ENGINE"] == "django.db.backends.sqlite3":
    # SQLite has no row locks: every atomic block takes the write lock at
    # BEGIN, so concurrent writers queue instead of failing on upgrade.
    DATABASES["default"]["OPTIONS"] = {"transaction_mode": "IMMEDIATE", "timeout": 20}
    # File-backed so threaded tests share one database.
    DATABASES["default"]["TEST"] = {"NAME": str(BASE_DIR / "test_db.sqlite3")}

DEFAULT_AUTO_FIELD = "django.db.models.BigAutoField"

USE_TZ = True
TIME_ZONE = os.environ.get("SOLARCREDIT_TIME_ZONE", "Asia/Kolkata")

REST_FRAMEWORK = {
    "DEFAULT_AUTHENTICATION_CLASSES": [
        "rest_framework.authentication.SessionAuthentication",
        "rest_framework.authentication.BasicAuthentication",
    ],
    "DEFAULT_PERMISSION_CLASSES": [
        "rest_framework.permissions.IsAuthenticated",
    ],
    "DEFAULT_RENDERER_CLASSES": [
        "rest_framework.renderers.JSONRenderer",
    ],
}

# Ledger parameters. SAVINGS_RATE is the one value every bill, redemption
# and savings projection uses.
SOLAR_LEDGER = {
    "SAVINGS_RATE": os.environ.get("SOLARCREDIT_SAVINGS_RATE", "2.00"),
    "MIN_PRICE_PER_CREDIT": os.environ.get("SOLARCREDIT_MIN_PRICE", "0.50"),
    "MAX_PRICE_PER_CREDIT": os.environ.get("SOLARCREDIT_MAX_PRICE", "2.50"),
    "CO2_KG_PER_KWH": os.environ.get("SOLARCREDIT_CO2_KG_PER_KWH", "0.82"),
    "STARTING_CASH": os.environ.get("SOLARCREDIT_STARTING_CASH", "0.00"),
}

LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "standard": {
            "format": "%(asctime)s %(levelname)s %(name)s: %(message)s",
        },
    },
    "handlers": {
        "console": {
            "class": "logging.StreamHandler",
            "formatter": "standard",
        },
    },
    "loggers": {
        "ledger": {
            "handlers": ["console"],
            "level": os.environ.get("SOLARCREDIT_LOG_LEVEL", "INFO"),
            "propagate": False,
        },
    },
}
