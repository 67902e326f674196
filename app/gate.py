# Request gate: cookie-based session decoding and prefix-based role routing for page requests.
# Runs before any handler, never touches the database, and never errors on a bad credential.
from __future__ import annotations

import enum
import logging
import re
from dataclasses import dataclass
from typing import Optional, Tuple
from urllib.parse import urlencode

from fastapi import Request
from fastapi.responses import RedirectResponse
from starlette.middleware.base import BaseHTTPMiddleware

from .security import AuthSession, Role, get_verifier

# Audit trail for role mismatches lands here
logger = logging.getLogger("studentnest.gate")

AUTH_COOKIE_NAME = "auth_token"

# Redirect targets
LOGIN_PATH = "/login"
HOME_PATH = "/"
ADMIN_LANDING_PATH = "/admin"
LANDLORD_LANDING_PATH = "/dashboard"
UNAUTHORIZED_PATH = "/unauthorized"

# Route prefix tables; anything not listed is public
ADMIN_PREFIXES: Tuple[str, ...] = ("/admin",)
LANDLORD_PREFIXES: Tuple[str, ...] = ("/dashboard",)
PROTECTED_PREFIXES: Tuple[str, ...] = ("/profile", "/settings")
AUTH_ONLY_PREFIXES: Tuple[str, ...] = ("/login", "/register")

# Never gated: the JSON API enforces auth with its own dependencies
EXCLUDED_PREFIXES: Tuple[str, ...] = (
    "/api",
    "/static",
    "/images",
    "/favicon.ico",
    "/healthz",
    "/docs",
    "/redoc",
    "/openapi.json",
)

SUPPORTED_LOCALES: Tuple[str, ...] = ("en", "fr", "ar")


class RouteClass(str, enum.Enum):
    PUBLIC = "public"
    AUTH_ONLY = "auth_only"
    PROTECTED_GENERIC = "protected_generic"
    PROTECTED_ADMIN = "protected_admin"
    PROTECTED_LANDLORD = "protected_landlord"


class GateAction(str, enum.Enum):
    ALLOW = "allow"
    REDIRECT_LANDING = "redirect_landing"
    REDIRECT_LOGIN = "redirect_login"
    REDIRECT_UNAUTHORIZED = "redirect_unauthorized"


@dataclass(frozen=True)
class GateDecision:
    action: GateAction
    location: Optional[str] = None

    @property
    def is_redirect(self) -> bool:
        return self.action is not GateAction.ALLOW


ALLOW = GateDecision(GateAction.ALLOW)


_REPEATED_SLASHES = re.compile(r"/{2,}")


def normalize_path(path: str) -> str:
    """Force a leading slash and collapse repeated slashes: '//fr//admin' -> '/fr/admin'."""
    if not path.startswith("/"):
        path = "/" + path
    return _REPEATED_SLASHES.sub("/", path)


def _matches(path: str, prefixes: Tuple[str, ...]) -> bool:
    return any(path == p or path.startswith(p + "/") for p in prefixes)


def split_locale(path: str) -> Tuple[str, str]:
    """
    Split a leading locale segment off a path.

    '/fr/dashboard' -> ('/fr', '/dashboard'); '/dashboard' -> ('', '/dashboard').
    """
    parts = path.split("/", 2)
    if len(parts) >= 2 and parts[1] in SUPPORTED_LOCALES:
        rest = parts[2] if len(parts) > 2 else ""
        return "/" + parts[1], "/" + rest
    return "", path


def classify(path: str) -> RouteClass:
    path = normalize_path(path)
    if _matches(path, EXCLUDED_PREFIXES):
        return RouteClass.PUBLIC
    _, bare = split_locale(path)
    if _matches(bare, ADMIN_PREFIXES):
        return RouteClass.PROTECTED_ADMIN
    if _matches(bare, LANDLORD_PREFIXES):
        return RouteClass.PROTECTED_LANDLORD
    if _matches(bare, PROTECTED_PREFIXES):
        return RouteClass.PROTECTED_GENERIC
    if _matches(bare, AUTH_ONLY_PREFIXES):
        return RouteClass.AUTH_ONLY
    return RouteClass.PUBLIC


def landing_path_for(role: Role, locale: str = "") -> str:
    if role is Role.LANDLORD:
        return f"{locale}{LANDLORD_LANDING_PATH}"
    if role is Role.ADMIN:
        return f"{locale}{ADMIN_LANDING_PATH}"
    return locale or HOME_PATH


def login_redirect_for(path: str, locale: str = "") -> str:
    return f"{locale}{LOGIN_PATH}?" + urlencode({"redirectedFrom": path}, safe="/")


def _deny(session: AuthSession, path: str, area: str, locale: str) -> GateDecision:
    logger.warning(
        "RBAC: user %s (role=%s) blocked from %s route %s",
        session.email or session.subject_id,
        session.role.value,
        area,
        path,
        extra={"user_id": session.subject_id, "role": session.role.value, "path": path},
    )
    return GateDecision(GateAction.REDIRECT_UNAUTHORIZED, f"{locale}{UNAUTHORIZED_PATH}")


def decide(path: str, session: Optional[AuthSession]) -> GateDecision:
    """
    Decision table, first match wins:

    - signed in on login/register     -> role landing page
    - anonymous on any protected path -> login, with redirectedFrom=<path>
    - non-admin on an admin path      -> unauthorized (audit logged)
    - non-landlord on a landlord path -> unauthorized (audit logged)
    - otherwise                       -> allow
    """
    path = normalize_path(path)
    route = classify(path)
    locale, _ = split_locale(path)

    if session is not None and route is RouteClass.AUTH_ONLY:
        return GateDecision(GateAction.REDIRECT_LANDING, landing_path_for(session.role, locale))

    if session is None:
        if route in (RouteClass.PUBLIC, RouteClass.AUTH_ONLY):
            return ALLOW
        return GateDecision(GateAction.REDIRECT_LOGIN, login_redirect_for(path, locale))

    if route is RouteClass.PROTECTED_ADMIN and session.role is not Role.ADMIN:
        return _deny(session, path, "admin", locale)
    if route is RouteClass.PROTECTED_LANDLORD and session.role is not Role.LANDLORD:
        return _deny(session, path, "landlord", locale)
    return ALLOW


def session_from_cookies(cookies) -> Optional[AuthSession]:
    token = cookies.get(AUTH_COOKIE_NAME)
    if not token:
        return None
    return get_verifier().verify(token)


class RequestGateMiddleware(BaseHTTPMiddleware):
    """Apply decide() to every request and short-circuit with a redirect when it says so."""

    async def dispatch(self, request: Request, call_next):
        path = request.url.path
        if classify(path) is RouteClass.PUBLIC:
            return await call_next(request)

        session = session_from_cookies(request.cookies)
        decision = decide(path, session)
        if decision.is_redirect:
            return RedirectResponse(decision.location, status_code=307)
        return await call_next(request)
