import os

# Mock SECRET_KEY for tests BEFORE importing settings
os.environ.setdefault("SECRET_KEY", "django-insecure-test-key-for-unit-tests-only")

from .settings import *  # noqa: F403

# In-memory SQLite keeps the suite hermetic
DATABASES = {
    "default": {
        "ENGINE": "django.db.backends.sqlite3",
        "NAME": ":memory:",
    }
}

# Keep every provider in-process
STORAGE_BACKEND = "memory"
PERSISTENCE_BACKEND = "django"
PAYMENT_PROVIDER = "simulated"
PAYMENT_SIMULATED_SUCCESS_RATE = 1.0
PAYMENT_SIMULATED_LATENCY_SECONDS = 0

CELERY_TASK_ALWAYS_EAGER = True
CELERY_TASK_EAGER_PROPAGATES = True
CELERY_BROKER_URL = "memory://"
CELERY_RESULT_BACKEND = "cache+memory://"

OTEL_TRACING_ENABLED = False

PASSWORD_HASHERS = ["django.contrib.auth.hashers.MD5PasswordHasher"]
