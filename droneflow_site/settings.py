"""
Django settings.py — DroneFlow back-office (closing & partner split),
Supabase PostgREST as ledger store, optional Redis cache and Sentry.
"""

from __future__ import annotations
import os
from pathlib import Path
from dotenv import load_dotenv
import dj_database_url
import sentry_sdk
from sentry_sdk.integrations.django import DjangoIntegration

# ────────────────────────────────────────────────────
# Paths & .env
# ────────────────────────────────────────────────────
BASE_DIR = Path(__file__).resolve().parent.parent
load_dotenv(BASE_DIR / ".env")
ENV = os.getenv


def env_bool(key: str, default: str = "false") -> bool:
    return ENV(key, default).lower() in {"1", "true", "yes", "on"}


# ────────────────────────────────────────────────────
# Core flags & secret
# ────────────────────────────────────────────────────
DEBUG: bool = env_bool("DEBUG")

SECRET_KEY = ENV("SECRET_KEY")
if not SECRET_KEY:
    raise RuntimeError("SECRET_KEY environment variable is required")

# ────────────────────────────────────────────────────
# Sentry (error monitoring)
# ────────────────────────────────────────────────────
SENTRY_DSN = ENV("SENTRY_DSN", "")
if SENTRY_DSN:
    sentry_sdk.init(
        dsn=SENTRY_DSN,
        integrations=[DjangoIntegration()],
        traces_sample_rate=float(ENV("SENTRY_TRACES_SAMPLE_RATE", "0.0")),
        sample_rate=float(ENV("SENTRY_SAMPLE_RATE", "1.0")),
        send_default_pii=False,
    )

# ────────────────────────────────────────────────────
# Hosts
# ────────────────────────────────────────────────────
ALLOWED_HOSTS = ["localhost", "127.0.0.1"]
ALLOWED_HOSTS += [h.strip() for h in ENV("EXTRA_ALLOWED_HOSTS", "").split(",") if h.strip()]

# ────────────────────────────────────────────────────
# Apps & Middleware
# ────────────────────────────────────────────────────
INSTALLED_APPS = [
    "django.contrib.auth",
    "django.contrib.contenttypes",
    "django.contrib.sessions",
    "django.contrib.messages",
    # Project
    "finance",
]

MIDDLEWARE = [
    "django.middleware.security.SecurityMiddleware",
    "django.contrib.sessions.middleware.SessionMiddleware",
    "django.middleware.common.CommonMiddleware",
    "django.middleware.csrf.CsrfViewMiddleware",
    "django.contrib.auth.middleware.AuthenticationMiddleware",
    "django.contrib.messages.middleware.MessageMiddleware",
    "django.middleware.clickjacking.XFrameOptionsMiddleware",
    "finance.middleware.log_filter.SuppressJsonLogMiddleware",
]

ROOT_URLCONF = "droneflow_site.urls"
WSGI_APPLICATION = "droneflow_site.wsgi.application"

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
    }
]

# ────────────────────────────────────────────────────
# Database (sessions/auth only; ledger data lives in Supabase tables)
# ────────────────────────────────────────────────────
DB_URL = ENV("DATABASE_URL")
if DB_URL:
    DATABASES = {
        "default": dj_database_url.parse(
            DB_URL,
            conn_max_age=int(ENV("DB_CONN_MAX_AGE", "600")),
            ssl_require=not DEBUG,
        )
    }
else:
    DATABASES = {
        "default": {"ENGINE": "django.db.backends.sqlite3", "NAME": BASE_DIR / "db.sqlite3"}
    }

# ────────────────────────────────────────────────────
# Cache (optional Redis)
# ────────────────────────────────────────────────────
if ENV("REDIS_URL"):
    CACHES = {
        "default": {
            "BACKEND": "django_redis.cache.RedisCache",
            "LOCATION": ENV("REDIS_URL"),
            "OPTIONS": {"CLIENT_CLASS": "django_redis.client.DefaultClient"},
            "KEY_PREFIX": "droneflow",
            "TIMEOUT": 300,
        }
    }
else:
    CACHES = {"default": {"BACKEND": "django.core.cache.backends.locmem.LocMemCache", "LOCATION": "droneflow-cache"}}

# ────────────────────────────────────────────────────
# I18N
# ────────────────────────────────────────────────────
LANGUAGE_CODE = "pt-br"
TIME_ZONE = ENV("TIME_ZONE", "America/Sao_Paulo")
USE_I18N = True
USE_TZ = True

STATIC_URL = "/static/"

# ────────────────────────────────────────────────────
# Auth / misc
# ────────────────────────────────────────────────────
LOGIN_URL = "/accounts/login/"
DEFAULT_AUTO_FIELD = "django.db.models.BigAutoField"

if not DEBUG:
    SECURE_PROXY_SSL_HEADER = ("HTTP_X_FORWARDED_PROTO", "https")
    SESSION_COOKIE_SECURE = True
    CSRF_COOKIE_SECURE = True
    SECURE_CONTENT_TYPE_NOSNIFF = True
    X_FRAME_OPTIONS = "DENY"

# ────────────────────────────────────────────────────
# Logging (simple and sufficient)
# ────────────────────────────────────────────────────
LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "simple": {"format": "%(asctime)s %(levelname)s %(name)s: %(message)s"},
    },
    "handlers": {
        "console": {"class": "logging.StreamHandler", "level": "DEBUG", "formatter": "simple"},
        "null": {"class": "logging.NullHandler"},
    },
    "root": {"handlers": ["console"] if DEBUG else ["null"], "level": "DEBUG" if DEBUG else "INFO"},
    "loggers": {
        "finance": {
            "handlers": ["console"],
            "level": ENV("FINANCE_LOG_LEVEL", "DEBUG" if DEBUG else "INFO"),
            "propagate": False,
        },
        "django.request": {
            "handlers": ["console"] if DEBUG else ["null"],
            "level": "WARNING",
            "propagate": False,
        },
    },
}

# ────────────────────────────────────────────────────
# Supabase (PostgREST ledger store)
# ────────────────────────────────────────────────────
SUPABASE_REST_URL = ENV("SUPABASE_REST_URL")
SUPABASE_API_KEY = ENV("SUPABASE_API_KEY")
SUPABASE_JWT_SECRET = ENV("SUPABASE_JWT_SECRET")
SUPABASE_TIMEOUT = float(ENV("SUPABASE_TIMEOUT", "15"))

# ────────────────────────────────────────────────────
# DroneFlow business constants
# ────────────────────────────────────────────────────
DRONEFLOW = {
    "PARTNER_SERVICE_RATE": ENV("DRONEFLOW_PARTNER_SERVICE_RATE", "100"),  # R$ / ha
    "FIXED_MONTHLY_SALARY": ENV("DRONEFLOW_FIXED_MONTHLY_SALARY", "5000"),  # R$ / month
    "PARTNERS": [
        {"slot": "Geraldo", "full_name": "Geraldo Júnior", "role": "technical"},
        {"slot": "Kaká", "full_name": "Kaká Cardoso", "role": "client_partner"},
        {"slot": "Patrick", "full_name": "Patrick Brauner", "role": "client_partner"},
        {"slot": "Reserva", "full_name": "Fundo de Reserva", "role": "reserve"},
    ],
    "TABLES": {
        "clients": "clients",
        "services": "services",
        "expenses": "expenses",
        "closed_months": "closed_months",
    },
    "DASHBOARD_CACHE_TIMEOUT": int(ENV("DRONEFLOW_DASHBOARD_CACHE_TIMEOUT", "300")),
}
