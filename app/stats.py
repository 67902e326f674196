# Listing statistics: counter upserts on view/inquiry, and the landlord dashboard aggregations
# that join properties with their stats rows and inquiries.
from __future__ import annotations

from collections import Counter, defaultdict
from datetime import datetime, timezone
from typing import Dict, List, Optional, Tuple

from sqlalchemy.orm import Session, selectinload

from . import models


def _get_or_create(db: Session, property_id: int) -> models.PropertyStat:
    stat = db.query(models.PropertyStat).filter(models.PropertyStat.property_id == property_id).first()
    if stat is None:
        stat = models.PropertyStat(property_id=property_id, view_count=0, inquiry_count=0, favorite_count=0)
        db.add(stat)
    return stat


def record_view(db: Session, property_id: int) -> models.PropertyStat:
    """Increment view_count and stamp last_viewed. The caller commits."""
    stat = _get_or_create(db, property_id)
    stat.view_count = (stat.view_count or 0) + 1
    stat.last_viewed = datetime.now(timezone.utc)
    return stat


def record_inquiry(db: Session, property_id: int) -> models.PropertyStat:
    """Increment inquiry_count. The caller commits."""
    stat = _get_or_create(db, property_id)
    stat.inquiry_count = (stat.inquiry_count or 0) + 1
    return stat


def landlord_overview(
    db: Session, owner_id: int, *, take: int = 10, skip: int = 0
) -> Tuple[List[models.Property], Dict[int, models.PropertyStat], Dict[int, List[models.Inquiry]]]:
    """
    Load one page of a landlord's listings together with their stats and inquiries.

    Returns (properties, stats_by_property_id, inquiries_by_property_id). Listings
    with no stats row or no inquiries are simply absent from the maps.
    """
    properties = (
        db.query(models.Property)
        .options(selectinload(models.Property.amenities), selectinload(models.Property.reviews))
        .filter(models.Property.owner_id == owner_id)
        .order_by(models.Property.created_at.desc(), models.Property.id.desc())
        .offset(skip)
        .limit(take)
        .all()
    )
    if not properties:
        return [], {}, {}

    ids = [p.id for p in properties]
    stats = db.query(models.PropertyStat).filter(models.PropertyStat.property_id.in_(ids)).all()
    inquiries = (
        db.query(models.Inquiry)
        .filter(models.Inquiry.property_id.in_(ids))
        .order_by(models.Inquiry.created_at.desc(), models.Inquiry.id.desc())
        .all()
    )

    inquiries_by_property: Dict[int, List[models.Inquiry]] = defaultdict(list)
    for inquiry in inquiries:
        inquiries_by_property[inquiry.property_id].append(inquiry)
    return properties, {s.property_id: s for s in stats}, dict(inquiries_by_property)


def totals(stats: Dict[int, models.PropertyStat], inquiries: Dict[int, List[models.Inquiry]]) -> Tuple[int, int]:
    """(total views, total inquiries) across a landlord overview page."""
    views = sum(s.view_count or 0 for s in stats.values())
    inquiry_total = sum(len(items) for items in inquiries.values())
    return views, inquiry_total


def property_detail(
    db: Session, owner_id: int, property_id: int
) -> Optional[Tuple[models.Property, Optional[models.PropertyStat], List[models.Inquiry]]]:
    """Stats and inquiries for one listing, or None if it does not exist or is not owned by owner_id."""
    prop = (
        db.query(models.Property)
        .filter(models.Property.id == property_id, models.Property.owner_id == owner_id)
        .first()
    )
    if prop is None:
        return None
    stat = db.query(models.PropertyStat).filter(models.PropertyStat.property_id == property_id).first()
    inquiries = (
        db.query(models.Inquiry)
        .filter(models.Inquiry.property_id == property_id)
        .order_by(models.Inquiry.created_at.desc(), models.Inquiry.id.desc())
        .all()
    )
    return prop, stat, inquiries


def count_by_status(inquiries: List[models.Inquiry]) -> Dict[str, int]:
    return dict(Counter(i.status for i in inquiries))
