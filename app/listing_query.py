# Listing search: query-string parsing into a ListingFilter, evaluation as an in-memory predicate or
# as SQL clauses against app.models.Property, and read-time rating annotation.
from __future__ import annotations

import math
from dataclasses import dataclass, field
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Callable, FrozenSet, Iterable, List, Optional, Protocol, Sequence

from sqlalchemy import func, or_

from . import models

# beds=4 in the search UI means "4 or more"
BEDS_OR_MORE = 4
MAX_TAKE = 100


class Listing(Protocol):
    price: Any
    amenity_names: Sequence[str]
    ratings: Sequence[int]


@dataclass(frozen=True)
class ListingFilter:
    min_price: Optional[float] = None
    max_price: Optional[float] = None
    amenity_names: FrozenSet[str] = field(default_factory=frozenset)
    location: Optional[str] = None
    beds: Optional[int] = None
    take: Optional[int] = None
    skip: Optional[int] = None


@dataclass(frozen=True)
class ListingWithRating:
    listing: Any
    # None means "no rating yet", never 0.0
    average_rating: Optional[float]
    review_count: int


def _values(params: Any, key: str) -> List[str]:
    # Starlette QueryParams / MultiDict expose getlist; plain dicts may hold a str or a list
    getlist = getattr(params, "getlist", None)
    if getlist is not None:
        return [str(v) for v in getlist(key)]
    value = params.get(key)
    if value is None:
        return []
    if isinstance(value, (list, tuple, set, frozenset)):
        return [str(v) for v in value]
    return [str(value)]


def _first(params: Any, key: str) -> Optional[str]:
    values = _values(params, key)
    return values[0].strip() if values else None


def _parse_number(raw: Optional[str]) -> Optional[float]:
    if not raw:
        return None
    try:
        value = float(raw)
    except ValueError:
        return None
    if not math.isfinite(value):
        return None
    return value


def _parse_non_negative_int(raw: Optional[str]) -> Optional[int]:
    if not raw:
        return None
    try:
        value = int(raw)
    except ValueError:
        return None
    return value if value >= 0 else None


def build(raw_params: Any) -> ListingFilter:
    """
    Build a ListingFilter from query parameters.

    Malformed values are dropped rather than rejected:
    - minPrice / maxPrice: decimal strings; NaN/inf and non-numeric values are ignored
    - amenity: repeatable; blank entries are ignored
    - location: trimmed substring, blank ignored
    - beds, take, skip: non-negative integers (take capped at MAX_TAKE)
    """
    amenities = frozenset(v.strip() for v in _values(raw_params, "amenity") if v.strip())
    take = _parse_non_negative_int(_first(raw_params, "take"))
    if take is not None:
        take = min(take, MAX_TAKE)
    return ListingFilter(
        min_price=_parse_number(_first(raw_params, "minPrice")),
        max_price=_parse_number(_first(raw_params, "maxPrice")),
        amenity_names=amenities,
        location=_first(raw_params, "location") or None,
        beds=_parse_non_negative_int(_first(raw_params, "beds")),
        take=take,
        skip=_parse_non_negative_int(_first(raw_params, "skip")),
    )


def _wanted_amenities(listing_filter: ListingFilter) -> FrozenSet[str]:
    return frozenset(name.lower() for name in listing_filter.amenity_names)


def _beds_match(wanted: int, beds: Optional[int]) -> bool:
    if beds is None:
        return False
    if wanted == BEDS_OR_MORE:
        return beds >= BEDS_OR_MORE
    return beds == wanted


def to_predicate(listing_filter: ListingFilter) -> Callable[[Listing], bool]:
    """
    Return a predicate over listings.

    Amenities use any-of semantics: a listing with only "WiFi" matches a
    filter of {"WiFi", "Gym"}. An inverted price range matches nothing.
    """
    wanted = _wanted_amenities(listing_filter)
    needle = listing_filter.location.lower() if listing_filter.location else None

    def predicate(listing: Listing) -> bool:
        price = listing.price
        if listing_filter.min_price is not None and price < listing_filter.min_price:
            return False
        if listing_filter.max_price is not None and price > listing_filter.max_price:
            return False
        if wanted and not any(name.lower() in wanted for name in listing.amenity_names):
            return False
        if needle is not None:
            fields = (getattr(listing, "city", None), getattr(listing, "borough", None), getattr(listing, "postcode", None))
            if not any(needle in (value or "").lower() for value in fields):
                return False
        if listing_filter.beds is not None and not _beds_match(listing_filter.beds, getattr(listing, "beds", None)):
            return False
        return True

    return predicate


def to_clauses(listing_filter: ListingFilter) -> list:
    """SQL equivalent of to_predicate(), for Query.filter(*clauses) on models.Property."""
    Property = models.Property
    clauses = []
    if listing_filter.min_price is not None:
        clauses.append(Property.price >= listing_filter.min_price)
    if listing_filter.max_price is not None:
        clauses.append(Property.price <= listing_filter.max_price)

    wanted = _wanted_amenities(listing_filter)
    if wanted:
        clauses.append(Property.amenities.any(func.lower(models.Amenity.name).in_(sorted(wanted))))

    if listing_filter.location:
        needle = listing_filter.location
        clauses.append(
            or_(
                Property.city.icontains(needle, autoescape=True),
                Property.borough.icontains(needle, autoescape=True),
                Property.postcode.icontains(needle, autoescape=True),
            )
        )

    if listing_filter.beds is not None:
        if listing_filter.beds == BEDS_OR_MORE:
            clauses.append(Property.beds >= BEDS_OR_MORE)
        else:
            clauses.append(Property.beds == listing_filter.beds)
    return clauses


def average_rating(ratings: Iterable[int]) -> Optional[float]:
    values = list(ratings)
    if not values:
        return None
    mean = Decimal(sum(values)) / Decimal(len(values))
    return float(mean.quantize(Decimal("0.1"), rounding=ROUND_HALF_UP))


def annotate(listing: Listing) -> ListingWithRating:
    ratings = list(listing.ratings)
    return ListingWithRating(
        listing=listing,
        average_rating=average_rating(ratings),
        review_count=len(ratings),
    )
