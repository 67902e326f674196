# Shared Redis connection, opt-in through REDIS_ENABLED / REDIS_URL.
# Callers must treat a None client as "Redis not available" and carry on without it.
import logging
import os
from typing import Optional

_logger = logging.getLogger("studentnest.redis")

_TRUTHY = {"1", "true", "t", "yes", "y", "on"}


def _truthy(val: Optional[str]) -> bool:
    if val is None:
        return False
    return val.strip().lower() in _TRUTHY


def is_redis_enabled() -> bool:
    return _truthy(os.getenv("REDIS_ENABLED", "false"))


# Connected client, and whether a connection attempt has already been made in this process
_client = None
_initialized = False


def get_redis():
    """
    Return a connected Redis client, or None when disabled or unreachable.

    The first call connects and pings. A failed attempt is remembered so later
    calls return None immediately instead of paying the connect timeout again.
    """
    global _client, _initialized
    if not is_redis_enabled():
        return None
    if _client is not None:
        return _client
    if _initialized:
        return None

    url = os.getenv("REDIS_URL", "redis://localhost:6379/0")
    _initialized = True
    try:
        import redis

        client = redis.Redis.from_url(
            url,
            socket_timeout=0.25,
            socket_connect_timeout=0.25,
            retry_on_timeout=False,
        )
        client.ping()
    except Exception as exc:
        _logger.warning("Redis unavailable, continuing without it: %s", exc)
        return None

    _client = client
    _logger.info("Connected to Redis at %s", url)
    return _client


def reset_redis() -> None:
    """Forget the cached client so the next get_redis() reconnects."""
    global _client, _initialized
    _client = None
    _initialized = False
