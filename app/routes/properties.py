# Public listing endpoints: search, amenity catalogue, detail, and view tracking.
from typing import List
import logging
import os

from fastapi import APIRouter, Depends, HTTPException, Request, status
from sqlalchemy.orm import Session, selectinload

from ..db import get_db
from .. import listing_query, models, schemas, stats
from ..rate_limit import client_ip, first_hit

router = APIRouter()
logger = logging.getLogger("studentnest.properties")

DEFAULT_TAKE = 20
FEATURED_COUNT = 6
# One counted view per IP per listing within this window; RATE_LIMIT_VIEW_WINDOW_SECONDS
VIEW_WINDOW_SECONDS = int(os.getenv("RATE_LIMIT_VIEW_WINDOW_SECONDS", "3600"))


def to_property_read(annotated: listing_query.ListingWithRating) -> schemas.PropertyRead:
    prop = annotated.listing
    return schemas.PropertyRead(
        id=prop.id,
        owner_id=prop.owner_id,
        title=prop.title,
        description=prop.description or "",
        price=prop.price,
        address=prop.address or "",
        city=prop.city,
        borough=prop.borough,
        postcode=prop.postcode,
        property_type=prop.property_type,
        beds=prop.beds,
        baths=prop.baths,
        verified=bool(prop.verified),
        amenities=prop.amenity_names,
        average_rating=annotated.average_rating,
        review_count=annotated.review_count,
        created_at=prop.created_at,
    )


def _with_relations(db: Session):
    return db.query(models.Property).options(
        selectinload(models.Property.amenities),
        selectinload(models.Property.reviews),
    )


@router.get("/properties", response_model=schemas.PropertySearchResponse)
def search_properties(request: Request, db: Session = Depends(get_db)) -> schemas.PropertySearchResponse:
    """
    Search listings.

    Query parameters: minPrice, maxPrice, amenity (repeatable, any-of), location,
    beds (4 = four or more), take, skip, featured=true (first six only).
    Malformed values are ignored. Newest listings first.
    """
    listing_filter = listing_query.build(request.query_params)
    clauses = listing_query.to_clauses(listing_filter)

    q = _with_relations(db).filter(*clauses)
    total = q.count()

    take = listing_filter.take if listing_filter.take is not None else DEFAULT_TAKE
    if request.query_params.get("featured") == "true":
        take = min(take, FEATURED_COUNT)
    items = (
        q.order_by(models.Property.created_at.desc(), models.Property.id.desc())
        .offset(listing_filter.skip or 0)
        .limit(take)
        .all()
    )

    logger.info(
        "properties.search",
        extra={
            "min_price": listing_filter.min_price,
            "max_price": listing_filter.max_price,
            "amenities": sorted(listing_filter.amenity_names),
            "count": len(items),
            "total": total,
        },
    )
    return schemas.PropertySearchResponse(
        properties=[to_property_read(listing_query.annotate(p)) for p in items],
        total_count=total,
    )


@router.get("/properties/amenities", response_model=List[schemas.AmenityRead])
def list_amenities(db: Session = Depends(get_db)):
    return db.query(models.Amenity).order_by(models.Amenity.name.asc()).all()


@router.get("/properties/{property_id}", response_model=schemas.PropertyRead)
def get_property(property_id: int, db: Session = Depends(get_db)) -> schemas.PropertyRead:
    prop = _with_relations(db).filter(models.Property.id == property_id).first()
    if not prop:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Property not found")
    return to_property_read(listing_query.annotate(prop))


@router.post("/properties/{property_id}/view")
def track_view(property_id: int, request: Request, db: Session = Depends(get_db)) -> dict:
    """
    Count a listing view.

    Repeat views from the same IP within VIEW_WINDOW_SECONDS are acknowledged
    but not counted (only enforced when Redis is enabled).
    """
    prop = db.get(models.Property, property_id)
    if not prop:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Property not found")

    if not first_hit("view", client_ip(request), str(property_id), VIEW_WINDOW_SECONDS):
        return {"success": True, "counted": False}

    try:
        stats.record_view(db, property_id)
        db.commit()
    except Exception:
        db.rollback()
        raise
    return {"success": True, "counted": True}
