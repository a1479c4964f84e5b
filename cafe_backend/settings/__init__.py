# cafe_backend/settings/__init__.py
"""
Django settings package for the cafe scheduling backend.

This package provides environment-specific settings:
- development: Local development with debug enabled
- production: Production environment with security hardening

The module is chosen by the ENVIRONMENT environment variable and
defaults to development.
"""

import os

ENVIRONMENT = os.getenv("ENVIRONMENT", "development").lower()

VALID_ENVIRONMENTS = ["development", "production"]
if ENVIRONMENT not in VALID_ENVIRONMENTS:
    raise ValueError(
        f"Invalid ENVIRONMENT '{ENVIRONMENT}'. "
        f"Must be one of: {', '.join(VALID_ENVIRONMENTS)}"
    )

if ENVIRONMENT == "production":
    from .production import *  # noqa: F401,F403
else:
    from .development import *  # noqa: F401,F403

ENVIRONMENT_INFO = {
    "name": ENVIRONMENT,
    "debug": DEBUG,  # noqa: F405
    "allowed_hosts": ALLOWED_HOSTS,  # noqa: F405
    "database_engine": DATABASES["default"]["ENGINE"],  # noqa: F405
}
