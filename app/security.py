# Credential primitives: password hashing and signed session tokens (HS256 JWT).
# Token verification fails closed; callers get either a complete AuthSession or None.
from __future__ import annotations

import enum
import logging
import os
import time
from dataclasses import dataclass
from typing import Optional

import jwt
from passlib.context import CryptContext

logger = logging.getLogger("studentnest.auth")

SECRET_ENV_VAR = "STUDENTNEST_JWT_SECRET"
JWT_ALG: str = "HS256"
JWT_TTL_SECONDS: int = 60 * 60 * 24 * 7  # 7 days, same as the auth cookie max-age
# bcrypt_sha256 sidesteps bcrypt's 72-byte password limit
pwd_context = CryptContext(schemes=["bcrypt_sha256"], deprecated="auto")


class Role(str, enum.Enum):
    STUDENT = "STUDENT"
    LANDLORD = "LANDLORD"
    ADMIN = "ADMIN"


@dataclass(frozen=True)
class AuthSession:
    """Identity decoded from a valid credential."""
    subject_id: int
    email: str
    role: Role


class SigningSecretMissing(RuntimeError):
    pass


def is_production() -> bool:
    return os.getenv("APP_ENV", "development").strip().lower() == "production"


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(password: str, password_hash: str) -> bool:
    return pwd_context.verify(password, password_hash)


class CredentialVerifier:
    """
    Issues and verifies session tokens with a process-wide signing secret.

    Without a secret the verifier is degraded: verify() rejects everything and
    issue() raises SigningSecretMissing. Unsigned tokens are never accepted.
    """

    def __init__(self, secret: Optional[str], ttl_seconds: int = JWT_TTL_SECONDS) -> None:
        self._secret = secret or None
        self._ttl_seconds = ttl_seconds

    @property
    def enabled(self) -> bool:
        return self._secret is not None

    def issue(self, *, subject_id: int, email: str, role: Role) -> str:
        if self._secret is None:
            raise SigningSecretMissing(f"{SECRET_ENV_VAR} is not configured")
        now = int(time.time())
        payload = {
            "sub": str(subject_id),
            "email": email,
            "role": Role(role).value,
            "iat": now,
            "exp": now + self._ttl_seconds,
        }
        return jwt.encode(payload, self._secret, algorithm=JWT_ALG)

    def verify(self, token: Optional[str]) -> Optional[AuthSession]:
        if self._secret is None or not token:
            return None
        try:
            payload = jwt.decode(
                token,
                self._secret,
                algorithms=[JWT_ALG],
                options={"require": ["exp", "sub"]},
            )
        except jwt.ExpiredSignatureError:
            logger.debug("Rejected expired token")
            return None
        except jwt.InvalidTokenError as exc:
            logger.debug("Rejected invalid token: %s", exc)
            return None

        sub = payload.get("sub")
        role = payload.get("role")
        if not sub or not role:
            return None
        try:
            subject_id = int(sub)
            role = Role(role)
        except (TypeError, ValueError):
            return None
        email = payload.get("email")
        return AuthSession(
            subject_id=subject_id,
            email=email if isinstance(email, str) else "",
            role=role,
        )


def load_verifier() -> CredentialVerifier:
    """
    Build a verifier from the environment.

    Raises RuntimeError in production when the secret is missing; elsewhere
    logs a warning and returns a degraded verifier so local development can run.
    """
    secret = os.getenv(SECRET_ENV_VAR)
    if not secret:
        if is_production():
            raise RuntimeError(f"{SECRET_ENV_VAR} must be set in production")
        logger.warning("%s is not set; authenticated routes are disabled", SECRET_ENV_VAR)
    return CredentialVerifier(secret)


_verifier: Optional[CredentialVerifier] = None


def init_verifier() -> CredentialVerifier:
    """(Re)load the process-wide verifier. Called from application startup."""
    global _verifier
    _verifier = load_verifier()
    return _verifier


def get_verifier() -> CredentialVerifier:
    if _verifier is None:
        return init_verifier()
    return _verifier
