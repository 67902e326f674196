# Credential verifier: issuing, fail-closed verification, and signing-secret configuration.
from __future__ import annotations

import time

import jwt
import pytest

from app.security import (
    JWT_ALG,
    CredentialVerifier,
    Role,
    SigningSecretMissing,
    load_verifier,
)

SECRET = "unit-test-secret"


def test_issue_then_verify_returns_full_session():
    v = CredentialVerifier(SECRET)
    token = v.issue(subject_id=42, email="student@example.com", role=Role.STUDENT)
    s = v.verify(token)
    assert s is not None
    assert s.subject_id == 42
    assert s.email == "student@example.com"
    assert s.role is Role.STUDENT


def test_wrong_signature_is_rejected():
    token = CredentialVerifier("other-secret").issue(subject_id=1, email="a@example.com", role=Role.ADMIN)
    assert CredentialVerifier(SECRET).verify(token) is None


def test_expired_token_is_rejected():
    token = CredentialVerifier(SECRET, ttl_seconds=-10).issue(subject_id=1, email="a@example.com", role=Role.ADMIN)
    assert CredentialVerifier(SECRET).verify(token) is None


@pytest.mark.parametrize(
    "payload",
    [
        {"email": "a@example.com", "role": "ADMIN"},  # no subject
        {"sub": "1", "email": "a@example.com"},  # no role
        {"sub": "1", "email": "a@example.com", "role": "SUPERUSER"},  # role outside the closed set
        {"sub": "abc", "email": "a@example.com", "role": "ADMIN"},  # non-numeric subject
    ],
)
def test_incomplete_claims_are_rejected(payload: dict):
    token = jwt.encode({**payload, "exp": int(time.time()) + 60}, SECRET, algorithm=JWT_ALG)
    assert CredentialVerifier(SECRET).verify(token) is None


def test_unsigned_token_is_never_accepted():
    token = jwt.encode({"sub": "1", "role": "ADMIN", "exp": int(time.time()) + 60}, "", algorithm="none")
    assert CredentialVerifier(SECRET).verify(token) is None
    assert CredentialVerifier(None).verify(token) is None


def test_garbage_and_empty_tokens_are_rejected():
    v = CredentialVerifier(SECRET)
    assert v.verify("definitely.not.jwt") is None
    assert v.verify("") is None
    assert v.verify(None) is None


def test_missing_secret_is_fatal_in_production(monkeypatch):
    monkeypatch.delenv("STUDENTNEST_JWT_SECRET", raising=False)
    monkeypatch.setenv("APP_ENV", "production")
    with pytest.raises(RuntimeError):
        load_verifier()


def test_missing_secret_degrades_outside_production(monkeypatch, caplog):
    monkeypatch.delenv("STUDENTNEST_JWT_SECRET", raising=False)
    monkeypatch.setenv("APP_ENV", "development")
    v = load_verifier()
    assert not v.enabled
    assert "STUDENTNEST_JWT_SECRET" in caplog.text
    with pytest.raises(SigningSecretMissing):
        v.issue(subject_id=1, email="a@example.com", role=Role.STUDENT)
    forged = jwt.encode({"sub": "1", "role": "ADMIN", "exp": int(time.time()) + 60}, "guess", algorithm=JWT_ALG)
    assert v.verify(forged) is None
