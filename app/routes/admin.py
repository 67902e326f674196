# Admin moderation endpoints: review and verify newly listed properties.
from typing import List
import logging

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session, joinedload

from ..db import get_db
from .. import models, schemas
from .auth import require_admin

router = APIRouter()
logger = logging.getLogger("studentnest.admin")


@router.get("/admin/properties/unverified", response_model=List[schemas.UnverifiedPropertyRead])
def list_unverified(
    db: Session = Depends(get_db),
    admin: models.User = Depends(require_admin),
) -> List[schemas.UnverifiedPropertyRead]:
    items = (
        db.query(models.Property)
        .options(joinedload(models.Property.owner))
        .filter(models.Property.verified == False)  # noqa: E712
        .order_by(models.Property.created_at.desc(), models.Property.id.desc())
        .all()
    )
    return [
        schemas.UnverifiedPropertyRead(
            id=p.id,
            title=p.title,
            address=p.address or "",
            owner_id=p.owner_id,
            owner_email=p.owner.email if p.owner else None,
            created_at=p.created_at,
        )
        for p in items
    ]


@router.patch("/admin/properties/verify/{property_id}", response_model=schemas.VerifyResponse)
def verify_property(
    property_id: int,
    db: Session = Depends(get_db),
    admin: models.User = Depends(require_admin),
) -> schemas.VerifyResponse:
    prop = db.get(models.Property, property_id)
    if not prop:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Property not found")

    prop.verified = True
    db.add(prop)
    db.commit()
    logger.info("admin.verify", extra={"property_id": property_id, "admin_id": admin.id})
    return schemas.VerifyResponse(id=prop.id, verified=True)
