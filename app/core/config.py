import os

# Database configuration
DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./events.db")

# Redis configuration
REDIS_URL = os.getenv("REDIS_URL", "redis://localhost:6379/0")

# Per-event registration lock (seconds)
EVENT_LOCK_TIMEOUT = float(os.getenv("EVENT_LOCK_TIMEOUT", "10"))
EVENT_LOCK_BLOCKING_TIMEOUT = float(os.getenv("EVENT_LOCK_BLOCKING_TIMEOUT", "5"))

# Event capacity bounds
MIN_CAPACITY = 1
MAX_CAPACITY = 1000

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
CORS_ORIGINS = [o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()]


def get_database_url():
    return DATABASE_URL


def get_redis_url():
    return REDIS_URL
