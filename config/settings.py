"""
Move Masters – Django Settings (Infrastructure Only)
======================================================
Django serves as the framework container for the HTTP adapter.
The relocation engines are the authority — Django does not dictate
structure.

Tariff and payout configuration lives in MOVEMASTERS and is read once
when the adapter wires its job desk.
"""

import os
from pathlib import Path

# ── Paths ─────────────────────────────────────────────────────
BASE_DIR = Path(__file__).resolve().parent.parent

# ── Security ──────────────────────────────────────────────────
SECRET_KEY = os.environ.get(
    "MOVEMASTERS_SECRET_KEY", "movemasters-dev-key-replace-before-deployment"
)

DEBUG = os.environ.get("MOVEMASTERS_DEBUG", "1") == "1"

ALLOWED_HOSTS = ["localhost", "127.0.0.1", "testserver"]

# ── Installed Apps ────────────────────────────────────────────
# Django infrastructure only. The job desk is in-memory; there are
# no models to migrate.
INSTALLED_APPS = [
    "django.contrib.contenttypes",
]

# ── Middleware ────────────────────────────────────────────────
MIDDLEWARE = [
    "django.middleware.security.SecurityMiddleware",
    "django.middleware.common.CommonMiddleware",
]

# ── URL routing ───────────────────────────────────────────────
ROOT_URLCONF = "config.urls"

# ── Database ──────────────────────────────────────────────────
# Unused by the engines; required by Django's test runner.
DATABASES = {
    "default": {
        "ENGINE": "django.db.backends.sqlite3",
        "NAME": BASE_DIR / "db.sqlite3",
    }
}

# ── Internationalization ──────────────────────────────────────
LANGUAGE_CODE = "en-us"
TIME_ZONE = "UTC"
USE_I18N = True
USE_TZ = True

DEFAULT_AUTO_FIELD = "django.db.models.BigAutoField"

# ── Logging ───────────────────────────────────────────────────
LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "plain": {"format": "%(asctime)s %(levelname)s %(name)s %(message)s"},
    },
    "handlers": {
        "console": {"class": "logging.StreamHandler", "formatter": "plain"},
    },
    "loggers": {
        "movemasters": {
            "handlers": ["console"],
            "level": os.environ.get("MOVEMASTERS_LOG_LEVEL", "INFO"),
        },
    },
}

# ── Move Masters tariff / payout configuration ────────────────
# Admin-configurable. Omitted keys fall back to PayScale /
# TariffPolicy defaults.
MOVEMASTERS = {
    "PAY_SCALE": {
        "driver_daily_base": "250.00",
        "driver_overage_commission_rate": "0.12",
        "helper_hourly_rate": "22.50",
        "helper_default_hours": "6.75",
        "helper_bonuses": {
            "Field Tips": "40.00",
            "On-Time Bonus": "15.00",
        },
        "tax_reserve_rate": "0.25",
    },
    "TARIFF_POLICY": {
        "bill_hourly_by_duration": False,
        "require_zero_balance_for_clearance": True,
    },
}
