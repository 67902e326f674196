# SQLAlchemy ORM models for the marketplace tables (users, properties, amenities, reviews, inquiries, stats).
# Derived values such as average rating are computed at read time in app.listing_query, never stored.
from sqlalchemy import (
    Boolean,
    Column,
    Date,
    DateTime,
    Float,
    ForeignKey,
    Index,
    Integer,
    String,
    Table,
    Text,
    UniqueConstraint,
    func,
)
from sqlalchemy.orm import declarative_mixin, relationship

from .db import Base


@declarative_mixin
class TimestampMixin:
    """Database-managed UTC timestamps.

    - created_at: set on insert
    - updated_at: set on insert and refreshed on each modification
    """
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)


# Many-to-many link between listings and the amenities they offer
property_amenities = Table(
    "property_amenities",
    Base.metadata,
    Column("property_id", Integer, ForeignKey("properties.id", ondelete="CASCADE"), primary_key=True),
    Column("amenity_id", Integer, ForeignKey("amenities.id", ondelete="CASCADE"), primary_key=True),
)


class User(Base, TimestampMixin):
    """Marketplace account.

    Roles (see app.security.Role):
    - STUDENT: browses listings, sends inquiries
    - LANDLORD: owns listings and sees their statistics
    - ADMIN: verifies listings
    """
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    email = Column(String(255), nullable=False, unique=True, index=True)
    password_hash = Column(String(255), nullable=False)
    name = Column(String(255), nullable=True)
    role = Column(String(20), nullable=False, index=True, default="STUDENT")

    properties = relationship("Property", back_populates="owner")


class Amenity(Base):
    __tablename__ = "amenities"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    name = Column(String(100), nullable=False, unique=True)


class Property(Base, TimestampMixin):
    """Rental listing owned by a landlord. New listings start unverified until an admin approves them."""
    __tablename__ = "properties"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    owner_id = Column(Integer, ForeignKey("users.id"), nullable=True, index=True)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=False, default="")
    # Monthly rent in whole currency units
    price = Column(Integer, nullable=False, index=True)
    address = Column(String(255), nullable=False, default="")
    city = Column(String(100), nullable=True)
    borough = Column(String(100), nullable=True, index=True)
    postcode = Column(String(20), nullable=True)
    property_type = Column(String(50), nullable=False, default="Apartment")
    beds = Column(Integer, nullable=False, default=1)
    baths = Column(Integer, nullable=False, default=1)
    latitude = Column(Float, nullable=True)
    longitude = Column(Float, nullable=True)
    verified = Column(Boolean, nullable=False, default=False, index=True)

    owner = relationship("User", back_populates="properties")
    amenities = relationship("Amenity", secondary=property_amenities, order_by="Amenity.name")
    reviews = relationship("Review", back_populates="property", cascade="all, delete-orphan")
    inquiries = relationship("Inquiry", back_populates="property", cascade="all, delete-orphan")
    stats = relationship("PropertyStat", back_populates="property", uselist=False, cascade="all, delete-orphan")

    @property
    def amenity_names(self) -> list:
        return [a.name for a in self.amenities]

    @property
    def ratings(self) -> list:
        return [r.rating for r in self.reviews]


class Review(Base, TimestampMixin):
    """Star rating (1..5) left by a user; one review per user per property."""
    __tablename__ = "reviews"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    property_id = Column(Integer, ForeignKey("properties.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    rating = Column(Integer, nullable=False)
    comment = Column(String(1000), nullable=False, default="")

    property = relationship("Property", back_populates="reviews")

    __table_args__ = (
        UniqueConstraint("user_id", "property_id", name="uq_reviews_user_property"),
    )


class Inquiry(Base, TimestampMixin):
    """Message from a prospective tenant to the landlord of a listing.

    Status: PENDING -> RESPONDED -> CLOSED
    """
    __tablename__ = "inquiries"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    property_id = Column(Integer, ForeignKey("properties.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    message = Column(String(2000), nullable=False)
    email = Column(String(255), nullable=False)
    phone = Column(String(50), nullable=True)
    move_in_date = Column(Date, nullable=True)
    status = Column(String(20), nullable=False, default="PENDING")

    property = relationship("Property", back_populates="inquiries")

    # Landlord dashboards read inquiries per property, newest first
    __table_args__ = (
        Index("ix_inquiries_property_created_at", "property_id", "created_at"),
    )


class PropertyStat(Base, TimestampMixin):
    """Per-listing counters shown on the landlord dashboard."""
    __tablename__ = "property_stats"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    property_id = Column(Integer, ForeignKey("properties.id", ondelete="CASCADE"), nullable=False, unique=True)
    view_count = Column(Integer, nullable=False, default=0)
    inquiry_count = Column(Integer, nullable=False, default=0)
    # Reserved for saved-listing counts; no endpoint writes it yet
    favorite_count = Column(Integer, nullable=False, default=0)
    last_viewed = Column(DateTime(timezone=True), nullable=True)

    property = relationship("Property", back_populates="stats")
