# Rate limiting test suite: fixed-window counters against an in-memory Redis stand-in, and fail-open behavior.
from __future__ import annotations

from typing import Dict

import pytest
from fastapi.testclient import TestClient

from app import rate_limit

from helpers import create_property


class FakeRedis:
    """Just enough of the redis-py surface for INCR/EXPIRE counters."""

    def __init__(self) -> None:
        self.counts: Dict[str, int] = {}
        self.ttls: Dict[str, int] = {}

    def incr(self, key: str, amount: int = 1) -> int:
        self.counts[key] = self.counts.get(key, 0) + amount
        return self.counts[key]

    def expire(self, key: str, seconds: int) -> bool:
        self.ttls[key] = seconds
        return True


class BrokenRedis:
    def incr(self, key: str, amount: int = 1) -> int:
        raise ConnectionError("redis went away")


@pytest.fixture()
def fake_redis(monkeypatch) -> FakeRedis:
    fake = FakeRedis()
    monkeypatch.setattr(rate_limit, "get_redis", lambda: fake)
    return fake


def test_login_is_limited_per_ip(client: TestClient, fake_redis: FakeRedis):
    body = {"email": "nobody@example.com", "password": "whatever1"}
    for _ in range(10):
        assert client.post("/api/auth/login", json=body).status_code == 401
    r = client.post("/api/auth/login", json=body)
    assert r.status_code == 429
    assert r.json()["detail"]["scope"] == "login"
    # TTL is set once, on the first hit of the window
    assert list(fake_redis.ttls.values()) == [60]


def test_repeat_views_from_same_ip_are_not_counted(client: TestClient, fake_redis: FakeRedis):
    pid = create_property("Viewed", 1000)
    assert client.post(f"/api/properties/{pid}/view").json()["counted"] is True
    assert client.post(f"/api/properties/{pid}/view").json()["counted"] is False
    assert any(ttl == 3600 for ttl in fake_redis.ttls.values())


def test_redis_errors_fail_open(client: TestClient, monkeypatch):
    monkeypatch.setattr(rate_limit, "get_redis", lambda: BrokenRedis())
    assert rate_limit.first_hit("view", "1.2.3.4", "1", 60) is True
    body = {"email": "nobody@example.com", "password": "whatever1"}
    for _ in range(15):
        assert client.post("/api/auth/login", json=body).status_code == 401
