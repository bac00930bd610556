"""
Django settings for shoplinkBackend project.

Every tunable is read from the environment (a local .env file is loaded first),
so the same module serves development, CI and production.
"""

import os
from decimal import Decimal
from pathlib import Path

from dotenv import load_dotenv


BASE_DIR = Path(__file__).resolve().parent.parent

load_dotenv(BASE_DIR / ".env")


def _env_bool(name: str, default: bool = False) -> bool:
    return os.getenv(name, str(default)).strip().lower() in ("1", "true", "yes", "on")


SECRET_KEY = os.getenv("SECRET_KEY", "django-insecure-shoplink-development-key")

DEBUG = _env_bool("DEBUG", False)

ALLOWED_HOSTS = [host.strip() for host in os.getenv("ALLOWED_HOSTS", "localhost,127.0.0.1").split(",") if host.strip()]


# Application definition

INSTALLED_APPS = [
    "django.contrib.admin",
    "django.contrib.auth",
    "django.contrib.contenttypes",
    "django.contrib.sessions",
    "django.contrib.messages",
    "django.contrib.staticfiles",
    "rest_framework",
    "drf_spectacular",
    "marketplace",
    "payment_system",
]

MIDDLEWARE = [
    "django.middleware.security.SecurityMiddleware",
    "django.contrib.sessions.middleware.SessionMiddleware",
    "django.middleware.common.CommonMiddleware",
    "django.middleware.csrf.CsrfViewMiddleware",
    "django.contrib.auth.middleware.AuthenticationMiddleware",
    "django.contrib.messages.middleware.MessageMiddleware",
    "django.middleware.clickjacking.XFrameOptionsMiddleware",
]

ROOT_URLCONF = "shoplinkBackend.urls"

TEMPLATES = [
    {
        "BACKEND": "django.template.backends.django.DjangoTemplates",
        "DIRS": [],
        "APP_DIRS": True,
        "OPTIONS": {
            "context_processors": [
                "django.template.context_processors.request",
                "django.contrib.auth.context_processors.auth",
                "django.contrib.messages.context_processors.messages",
            ],
        },
    },
]

WSGI_APPLICATION = "shoplinkBackend.wsgi.application"
ASGI_APPLICATION = "shoplinkBackend.asgi.application"


# Database

DATABASES = {
    "default": {
        "ENGINE": os.getenv("DB_ENGINE", "django.db.backends.sqlite3"),
        "NAME": os.getenv("DB_NAME", str(BASE_DIR / "db.sqlite3")),
        "USER": os.getenv("DB_USER", ""),
        "PASSWORD": os.getenv("DB_PASSWORD", ""),
        "HOST": os.getenv("DB_HOST", ""),
        "PORT": os.getenv("DB_PORT", ""),
    }
}

DEFAULT_AUTO_FIELD = "django.db.models.BigAutoField"

AUTH_PASSWORD_VALIDATORS = [
    {"NAME": "django.contrib.auth.password_validation.UserAttributeSimilarityValidator"},
    {"NAME": "django.contrib.auth.password_validation.MinimumLengthValidator"},
]

LANGUAGE_CODE = "en-us"
TIME_ZONE = "UTC"
USE_I18N = True
USE_TZ = True

STATIC_URL = "static/"
STATIC_ROOT = BASE_DIR / "staticfiles"
MEDIA_URL = "media/"
MEDIA_ROOT = BASE_DIR / "media"


# REST framework

REST_FRAMEWORK = {
    "DEFAULT_AUTHENTICATION_CLASSES": [
        "rest_framework.authentication.SessionAuthentication",
        "rest_framework.authentication.BasicAuthentication",
    ],
    "DEFAULT_PERMISSION_CLASSES": [
        "rest_framework.permissions.IsAuthenticated",
    ],
    "DEFAULT_SCHEMA_CLASS": "drf_spectacular.openapi.AutoSchema",
    "COERCE_DECIMAL_TO_STRING": True,
}

SPECTACULAR_SETTINGS = {
    "TITLE": "Shoplink Marketplace API",
    "DESCRIPTION": "Cart, checkout, payment verification and seller settlement endpoints",
    "VERSION": "1.0.0",
    "SERVE_INCLUDE_SCHEMA": False,
}


# Marketplace business rules

MARKETPLACE_CURRENCY = os.getenv("MARKETPLACE_CURRENCY", "NAD")
MARKETPLACE_CURRENCY_SYMBOL = os.getenv("MARKETPLACE_CURRENCY_SYMBOL", "N$")

# Share of every order total retained by the platform
PLATFORM_COMMISSION_RATE = Decimal(os.getenv("PLATFORM_COMMISSION_RATE", "0.05"))

# Flat shipping shown on the checkout review screen
CHECKOUT_SHIPPING_FEE = Decimal(os.getenv("CHECKOUT_SHIPPING_FEE", "50.00"))

# Share of on-order value collected up front in deposit mode
DEPOSIT_RATE = Decimal(os.getenv("DEPOSIT_RATE", "0.5"))

# Addresses allowed to trigger settlement endpoints without a staff login
INTERNAL_SERVICE_IPS = [ip.strip() for ip in os.getenv("INTERNAL_SERVICE_IPS", "").split(",") if ip.strip()]


# Infrastructure providers

# 'django' writes through the ORM, 'memory' keeps rows in-process
PERSISTENCE_BACKEND = os.getenv("PERSISTENCE_BACKEND", "django")

# 'simulated' is the only payment provider shipped
PAYMENT_PROVIDER = os.getenv("PAYMENT_PROVIDER", "simulated")
PAYMENT_SIMULATED_SUCCESS_RATE = float(os.getenv("PAYMENT_SIMULATED_SUCCESS_RATE", "0.95"))
PAYMENT_SIMULATED_LATENCY_SECONDS = float(os.getenv("PAYMENT_SIMULATED_LATENCY_SECONDS", "0"))

# 's3' uses django-storages, 'memory' keeps blobs in-process
STORAGE_BACKEND = os.getenv("STORAGE_BACKEND", "s3")
PAYMENT_PROOF_BUCKET = os.getenv("PAYMENT_PROOF_BUCKET", "payment-proofs")

AWS_ACCESS_KEY_ID = os.getenv("AWS_ACCESS_KEY_ID", "")
AWS_SECRET_ACCESS_KEY = os.getenv("AWS_SECRET_ACCESS_KEY", "")
AWS_STORAGE_BUCKET_NAME = os.getenv("AWS_STORAGE_BUCKET_NAME", PAYMENT_PROOF_BUCKET)
AWS_S3_REGION_NAME = os.getenv("AWS_S3_REGION_NAME", "af-south-1")
AWS_S3_ENDPOINT_URL = os.getenv("AWS_S3_ENDPOINT_URL") or None
AWS_S3_CUSTOM_DOMAIN = os.getenv("AWS_S3_CUSTOM_DOMAIN") or None
AWS_QUERYSTRING_AUTH = _env_bool("AWS_QUERYSTRING_AUTH", False)
AWS_DEFAULT_ACL = None


# Celery

CELERY_BROKER_URL = os.getenv("CELERY_BROKER_URL", "redis://localhost:6379/0")
CELERY_RESULT_BACKEND = os.getenv("CELERY_RESULT_BACKEND", "redis://localhost:6379/1")
CELERY_TASK_ALWAYS_EAGER = _env_bool("CELERY_TASK_ALWAYS_EAGER", False)


# Observability

OTEL_TRACING_ENABLED = _env_bool("OTEL_TRACING_ENABLED", False)
OTEL_SERVICE_NAME = os.getenv("OTEL_SERVICE_NAME", "shoplink-backend")
OTEL_CONSOLE_EXPORT = _env_bool("OTEL_CONSOLE_EXPORT", False)

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "verbose": {
            "format": "{asctime} [{levelname}] {name}: {message}",
            "style": "{",
        },
    },
    "handlers": {
        "console": {
            "class": "logging.StreamHandler",
            "formatter": "verbose",
        },
    },
    "root": {
        "handlers": ["console"],
        "level": LOG_LEVEL,
    },
    "loggers": {
        "django.db.backends": {"level": "WARNING"},
        "marketplace": {"level": LOG_LEVEL, "propagate": True},
        "payment_system": {"level": LOG_LEVEL, "propagate": True},
        "infrastructure": {"level": LOG_LEVEL, "propagate": True},
    },
}
