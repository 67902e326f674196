# Admin moderation test suite: unverified queue and verification, admin role only.
from __future__ import annotations

from fastapi.testclient import TestClient

from app.security import Role

from helpers import auth_headers, create_property, create_user, token_for


def admin_token() -> str:
    uid = create_user("admin@example.com", Role.ADMIN)
    return token_for(uid, "admin@example.com", Role.ADMIN)


def test_unverified_queue_and_verify(client: TestClient):
    owner = create_user("host@example.com", Role.LANDLORD)
    pending = create_property("Pending", 1000, owner_id=owner, verified=False)
    create_property("Approved", 1000, owner_id=owner, verified=True)
    token = admin_token()

    r = client.get("/api/admin/properties/unverified", headers=auth_headers(token))
    assert r.status_code == 200, r.text
    queue = r.json()
    assert [p["id"] for p in queue] == [pending]
    assert queue[0]["owner_email"] == "host@example.com"

    r = client.patch(f"/api/admin/properties/verify/{pending}", headers=auth_headers(token))
    assert r.status_code == 200
    assert r.json() == {"id": pending, "verified": True}

    assert client.get("/api/admin/properties/unverified", headers=auth_headers(token)).json() == []
    assert client.get(f"/api/properties/{pending}").json()["verified"] is True


def test_verify_missing_property_is_404(client: TestClient):
    r = client.patch("/api/admin/properties/verify/9999", headers=auth_headers(admin_token()))
    assert r.status_code == 404


def test_admin_endpoints_require_admin_role(client: TestClient):
    pid = create_property("Pending", 1000, verified=False)
    for role in (Role.STUDENT, Role.LANDLORD):
        email = f"{role.value.lower()}@example.com"
        token = token_for(create_user(email, role), email, role)
        assert client.get("/api/admin/properties/unverified", headers=auth_headers(token)).status_code == 403
        assert client.patch(f"/api/admin/properties/verify/{pid}", headers=auth_headers(token)).status_code == 403
