# Shared fixtures-by-function for the API tests: direct DB inserts and session cookies.
from __future__ import annotations

from typing import Iterable, Optional

from fastapi.testclient import TestClient

from app import models
from app.db import SessionLocal
from app.gate import AUTH_COOKIE_NAME
from app.security import Role, get_verifier, hash_password

PASSWORD = "changeme123"


def create_user(email: str, role: Role = Role.STUDENT, password: str = PASSWORD, name: Optional[str] = None) -> int:
    db = SessionLocal()
    try:
        user = models.User(email=email, password_hash=hash_password(password), name=name, role=role.value)
        db.add(user)
        db.commit()
        return user.id
    finally:
        db.close()


def create_property(
    title: str,
    price: int,
    *,
    owner_id: Optional[int] = None,
    amenities: Iterable[str] = (),
    ratings: Iterable[int] = (),
    borough: Optional[str] = None,
    city: Optional[str] = "London",
    postcode: Optional[str] = None,
    beds: int = 1,
    verified: bool = True,
) -> int:
    """Insert a listing, creating amenities on demand and one reviewer account per rating."""
    db = SessionLocal()
    try:
        prop = models.Property(
            owner_id=owner_id,
            title=title,
            description=f"{title} description",
            price=price,
            address=f"1 {title} Street",
            city=city,
            borough=borough,
            postcode=postcode,
            property_type="Apartment",
            beds=beds,
            baths=1,
            verified=verified,
        )
        for name in amenities:
            amenity = db.query(models.Amenity).filter(models.Amenity.name == name).first()
            if amenity is None:
                amenity = models.Amenity(name=name)
            prop.amenities.append(amenity)
        db.add(prop)
        db.flush()
        for i, rating in enumerate(ratings):
            reviewer = models.User(
                email=f"reviewer{prop.id}-{i}@example.com",
                password_hash="x",
                role=Role.STUDENT.value,
            )
            db.add(reviewer)
            db.flush()
            db.add(models.Review(property_id=prop.id, user_id=reviewer.id, rating=rating, comment="ok"))
        db.commit()
        return prop.id
    finally:
        db.close()


def token_for(user_id: int, email: str, role: Role) -> str:
    return get_verifier().issue(subject_id=user_id, email=email, role=role)


def sign_in(client: TestClient, user_id: int, email: str, role: Role) -> str:
    """Attach a session cookie for the given identity to the client."""
    token = token_for(user_id, email, role)
    client.cookies.set(AUTH_COOKIE_NAME, token)
    return token


# Convenience header for authenticated API requests
def auth_headers(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}
