# Inquiry endpoints: students contact landlords about a listing; landlords read and answer inquiries on their listings.
from typing import List, Literal
import logging

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session, joinedload

from ..db import get_db
from .. import models, schemas, stats
from ..security import Role
from .auth import get_current_user

router = APIRouter()
logger = logging.getLogger("studentnest.inquiries")


@router.post("/inquiries", response_model=schemas.InquiryRead, status_code=status.HTTP_201_CREATED)
def create_inquiry(
    payload: schemas.InquiryCreate,
    db: Session = Depends(get_db),
    user: models.User = Depends(get_current_user),
) -> models.Inquiry:
    """Create a PENDING inquiry and bump the listing's inquiry counter in the same transaction."""
    prop = db.get(models.Property, payload.property_id)
    if not prop:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Property not found")

    try:
        obj = models.Inquiry(
            property_id=prop.id,
            user_id=user.id,
            message=payload.message,
            email=payload.email,
            phone=payload.phone,
            move_in_date=payload.move_in_date,
            status="PENDING",
        )
        db.add(obj)
        stats.record_inquiry(db, prop.id)
        db.commit()
    except Exception:
        db.rollback()
        raise
    db.refresh(obj)

    logger.info("inquiries.create", extra={"inquiry_id": obj.id, "property_id": prop.id, "user_id": user.id})
    return obj


@router.get("/inquiries", response_model=List[schemas.InquiryRead])
def list_inquiries(
    role: Literal["user", "landlord"] = Query("user"),
    db: Session = Depends(get_db),
    user: models.User = Depends(get_current_user),
) -> List[models.Inquiry]:
    """
    List inquiries, newest first.

    - role=user (default): inquiries the caller sent
    - role=landlord: inquiries on listings the caller owns (landlords only)
    """
    q = db.query(models.Inquiry)
    if role == "landlord":
        if user.role != Role.LANDLORD.value:
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Landlord role required")
        q = q.join(models.Property, models.Property.id == models.Inquiry.property_id).filter(
            models.Property.owner_id == user.id
        )
    else:
        q = q.filter(models.Inquiry.user_id == user.id)
    return q.order_by(models.Inquiry.created_at.desc(), models.Inquiry.id.desc()).all()


def _load_inquiry(db: Session, inquiry_id: int) -> models.Inquiry:
    inquiry = (
        db.query(models.Inquiry)
        .options(joinedload(models.Inquiry.property))
        .filter(models.Inquiry.id == inquiry_id)
        .first()
    )
    if not inquiry:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Inquiry not found")
    return inquiry


def _is_property_owner(inquiry: models.Inquiry, user: models.User) -> bool:
    return inquiry.property is not None and inquiry.property.owner_id == user.id


def _is_admin(user: models.User) -> bool:
    return user.role == Role.ADMIN.value


@router.get("/inquiries/{inquiry_id}", response_model=schemas.InquiryRead)
def get_inquiry(
    inquiry_id: int,
    db: Session = Depends(get_db),
    user: models.User = Depends(get_current_user),
) -> models.Inquiry:
    """Readable by the sender, the listing owner, or an admin."""
    inquiry = _load_inquiry(db, inquiry_id)
    if inquiry.user_id != user.id and not _is_property_owner(inquiry, user) and not _is_admin(user):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Not authorized to view this inquiry")
    return inquiry


@router.patch("/inquiries/{inquiry_id}", response_model=schemas.InquiryRead)
def update_inquiry_status(
    inquiry_id: int,
    payload: schemas.InquiryStatusUpdate,
    db: Session = Depends(get_db),
    user: models.User = Depends(get_current_user),
) -> models.Inquiry:
    """Only the listing owner or an admin may move an inquiry between PENDING, RESPONDED and CLOSED."""
    inquiry = _load_inquiry(db, inquiry_id)
    if not _is_property_owner(inquiry, user) and not _is_admin(user):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Not authorized to update this inquiry")

    previous = inquiry.status
    inquiry.status = payload.status
    db.add(inquiry)
    db.commit()
    db.refresh(inquiry)
    logger.info(
        "inquiries.status",
        extra={"inquiry_id": inquiry.id, "from_status": previous, "to_status": inquiry.status, "user_id": user.id},
    )
    return inquiry


@router.delete("/inquiries/{inquiry_id}")
def delete_inquiry(
    inquiry_id: int,
    db: Session = Depends(get_db),
    user: models.User = Depends(get_current_user),
) -> dict:
    inquiry = _load_inquiry(db, inquiry_id)
    if inquiry.user_id != user.id and not _is_property_owner(inquiry, user) and not _is_admin(user):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Not authorized to delete this inquiry")

    # inquiry_count on property_stats is cumulative and is not decremented
    db.delete(inquiry)
    db.commit()
    logger.info("inquiries.delete", extra={"inquiry_id": inquiry_id, "user_id": user.id})
    return {"success": True}
