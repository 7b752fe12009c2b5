import os

# Database configuration
DATABASE_URL = os.getenv("SIGNUP_DATABASE_URL", "sqlite:///./signup.db")

# Upper bound on how long a registration may wait for the event row lock
LOCK_TIMEOUT_MS = int(os.getenv("SIGNUP_LOCK_TIMEOUT_MS", "5000"))

# Logging configuration
LOG_LEVEL = os.getenv("SIGNUP_LOG_LEVEL", "INFO")
LOG_JSON = os.getenv("SIGNUP_LOG_JSON", "false").lower() in {"1", "true", "yes"}

CORS_ORIGINS = [o.strip() for o in os.getenv("SIGNUP_CORS_ORIGINS", "*").split(",") if o.strip()]


def get_database_url():
    return DATABASE_URL


def get_lock_timeout_ms():
    return LOCK_TIMEOUT_MS
