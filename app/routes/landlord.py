# Landlord dashboard endpoints: owned listings with their view/inquiry statistics.
import logging

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from ..db import get_db
from .. import listing_query, models, schemas, stats
from .auth import require_landlord
from .properties import to_property_read

router = APIRouter()
logger = logging.getLogger("studentnest.landlord")


@router.get("/landlord/properties", response_model=schemas.LandlordPropertiesResponse)
def list_my_properties(
    take: int = Query(10, ge=1, le=100),
    skip: int = Query(0, ge=0),
    db: Session = Depends(get_db),
    user: models.User = Depends(require_landlord),
) -> schemas.LandlordPropertiesResponse:
    """
    The caller's listings (newest first) joined with their stats and inquiries.

    views_count / inquiries_count are totals over the returned page.
    """
    properties, stats_by_id, inquiries_by_id = stats.landlord_overview(db, user.id, take=take, skip=skip)
    views, inquiry_total = stats.totals(stats_by_id, inquiries_by_id)

    items = []
    for prop in properties:
        base = to_property_read(listing_query.annotate(prop))
        stat = stats_by_id.get(prop.id)
        items.append(
            schemas.LandlordPropertyRead(
                **base.model_dump(),
                stats=schemas.PropertyStatRead.model_validate(stat) if stat else None,
                inquiry_total=len(inquiries_by_id.get(prop.id, [])),
            )
        )
    return schemas.LandlordPropertiesResponse(properties=items, views_count=views, inquiries_count=inquiry_total)


@router.get("/landlord/properties/{property_id}/stats", response_model=schemas.PropertyStatsResponse)
def property_stats(
    property_id: int,
    db: Session = Depends(get_db),
    user: models.User = Depends(require_landlord),
) -> schemas.PropertyStatsResponse:
    found = stats.property_detail(db, user.id, property_id)
    if found is None:
        # Same answer for "missing" and "not yours" so listing ids cannot be probed
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Property not found or not owned by you")
    prop, stat, inquiries = found

    logger.info("landlord.stats", extra={"property_id": property_id, "user_id": user.id, "inquiries": len(inquiries)})
    return schemas.PropertyStatsResponse(
        property=to_property_read(listing_query.annotate(prop)),
        stats=schemas.PropertyStatRead.model_validate(stat) if stat else None,
        inquiries=[schemas.InquirySummary.model_validate(i) for i in inquiries],
        inquiries_by_status=stats.count_by_status(inquiries),
    )
