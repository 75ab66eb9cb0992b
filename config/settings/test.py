# config/settings/test.py
from .base import *  # noqa

SECRET_KEY = "test-secret-key-not-for-production-use-only"
SIMPLE_JWT["SIGNING_KEY"] = SECRET_KEY  # noqa: F405

DATABASES = {
    "default": {
        "ENGINE": "django.db.backends.sqlite3",
        "NAME": ":memory:",
    }
}

PASSWORD_HASHERS = [
    "django.contrib.auth.hashers.MD5PasswordHasher",
]


# Build the schema straight from models; no migration files are needed for tests.
class DisableMigrations:
    def __contains__(self, item):
        return True

    def __getitem__(self, item):
        return None


MIGRATION_MODULES = DisableMigrations()

LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "handlers": {
        "console": {
            "class": "logging.StreamHandler",
        },
    },
    "loggers": {
        "django": {
            "handlers": ["console"],
            "level": "CRITICAL",
        },
        "he_core": {
            "handlers": ["console"],
            "level": "WARNING",
            "propagate": True,
        },
    },
}
