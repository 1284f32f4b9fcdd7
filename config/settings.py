"""
Event Bus - Django Settings (Host / Test Process)
===================================================
Django is the container for configuration and background tasks.
The bus itself never reads settings on its own; the composition root
calls BusConfig.from_settings() and eventbus.background.attach().
"""

import os

# ── Security ──────────────────────────────────────────────────
SECRET_KEY = os.environ.get("EVENTBUS_SECRET_KEY", "eventbus-dev-key")

DEBUG = os.environ.get("EVENTBUS_DEBUG", "1") == "1"

ALLOWED_HOSTS = []

# ── Installed Apps ────────────────────────────────────────────
# The bus needs no models, migrations or app registry hooks.
INSTALLED_APPS = []

# ── Background Tasks ──────────────────────────────────────────
# "default" runs tasks inline on enqueue (development, tests).
# "deferred" only records them; a test plays the worker by hand.
# Production points "default" at a real worker backend.
TASKS = {
    "default": {
        "BACKEND": "django.tasks.backends.immediate.ImmediateBackend",
    },
    "deferred": {
        "BACKEND": "django.tasks.backends.dummy.DummyBackend",
    },
}

# ── Event Bus ─────────────────────────────────────────────────
EVENT_BUS = {
    "ISOLATE_PAYLOADS": False,
    "TASK_BACKEND": "default",
    "TASK_QUEUE": "default",
    "BUS_ALIAS": "default",
}

# ── Logging ───────────────────────────────────────────────────
LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "plain": {
            "format": "%(asctime)s %(levelname)s %(name)s: %(message)s",
        },
    },
    "handlers": {
        "console": {
            "class": "logging.StreamHandler",
            "formatter": "plain",
        },
    },
    "loggers": {
        "eventbus": {
            "handlers": ["console"],
            "level": os.environ.get("EVENTBUS_LOG_LEVEL", "INFO"),
        },
    },
}

# ── Internationalization ──────────────────────────────────────
USE_TZ = True
TIME_ZONE = "UTC"
