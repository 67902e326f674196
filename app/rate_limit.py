# Redis-backed fixed-window counters keyed by client IP.
# - rate_limit(scope): FastAPI dependency that answers 429 once a scope's budget is spent
# - first_hit(...): de-duplication helper, True only for the first hit of a key in its window
# Both fail open when Redis is disabled or erroring so the API stays usable.
import os
import logging
from typing import Callable, Literal, Optional

from fastapi import Request, HTTPException, status

from .redis_client import get_redis

logger = logging.getLogger("studentnest.rate_limit")

Scope = Literal["login", "register"]


def _to_int(val: Optional[str], default: int) -> int:
    try:
        return int(val) if val is not None else default
    except ValueError:
        return default


# RATE_LIMIT_WINDOW_SECONDS (default 60)
def _window_seconds() -> int:
    return _to_int(os.getenv("RATE_LIMIT_WINDOW_SECONDS"), 60)


# RATE_LIMIT_LOGIN_PER_WINDOW (default 10), RATE_LIMIT_REGISTER_PER_WINDOW (default 5)
def _limit_for_scope(scope: Scope) -> int:
    if scope == "login":
        return _to_int(os.getenv("RATE_LIMIT_LOGIN_PER_WINDOW"), 10)
    return _to_int(os.getenv("RATE_LIMIT_REGISTER_PER_WINDOW"), 5)


def client_ip(request: Request) -> str:
    # Connection address only; X-Forwarded-For is not trusted here
    if request.client and request.client.host:
        return request.client.host
    return "unknown"


def _incr(key: str, window: int) -> Optional[int]:
    """Increment a window counter. Returns None when Redis is unavailable."""
    r = get_redis()
    if r is None:
        return None
    try:
        current = r.incr(key, amount=1)
        if current == 1:
            r.expire(key, window)
        return current
    except Exception as exc:
        logger.warning("Rate limit fail-open (key=%s): %s", key, exc)
        return None


def rate_limit(scope: Scope) -> Callable[[Request], None]:
    """
    Per-IP fixed-window limit for a scope.

    Keys: rl:v1:ip:{ip}:{scope}. The TTL is set on the first hit of a window;
    later hits share that expiry.
    """
    window = _window_seconds()
    limit = _limit_for_scope(scope)

    def _dependency(request: Request) -> None:
        ip = client_ip(request)
        key = f"rl:v1:ip:{ip}:{scope}"
        current = _incr(key, window)
        if current is None or current <= limit:
            return
        detail = {
            "error": "rate_limited",
            "scope": scope,
            "limit": limit,
            "window_seconds": window,
        }
        logger.info("rate_limit.exceeded", extra={"scope": scope, "ip": ip, "count": current})
        raise HTTPException(status_code=status.HTTP_429_TOO_MANY_REQUESTS, detail=detail)

    return _dependency


def first_hit(namespace: str, ip: str, subject: str, window_seconds: int) -> bool:
    """
    True when this is the first hit for (namespace, ip, subject) in the window.

    Used to count one property view per IP per hour. Without Redis every hit counts.
    """
    current = _incr(f"rl:v1:ip:{ip}:{namespace}:{subject}", window_seconds)
    return current is None or current == 1
