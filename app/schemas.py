# Pydantic models (request/response DTOs) used by the API layer.
# Keep these serializable and free of business logic; see app.listing_query and app.stats for that.
from pydantic import BaseModel, Field, ConfigDict, field_validator, EmailStr
from typing import Dict, List, Literal, Optional
from datetime import date, datetime

from .security import Role


def _normalize_email(v):
    if isinstance(v, str):
        v = v.strip().lower()
    return v


# Users and authentication

class UserRead(BaseModel):
    id: int
    email: EmailStr
    name: Optional[str] = None
    role: Role

    model_config = ConfigDict(from_attributes=True)


# Registration always creates a STUDENT; landlord/admin roles are granted out of band
class RegisterRequest(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=8)
    name: Optional[str] = Field(default=None, max_length=255)

    @field_validator("email", mode="before")
    @classmethod
    def normalize_email(cls, v: str) -> str:
        return _normalize_email(v)


class LoginRequest(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=1)

    @field_validator("email", mode="before")
    @classmethod
    def normalize_email(cls, v: str) -> str:
        return _normalize_email(v)


# Login response; the token is also set as the auth cookie
class LoginResponse(BaseModel):
    user: UserRead
    access_token: str
    token_type: str = "bearer"


# Properties

class AmenityRead(BaseModel):
    id: int
    name: str

    model_config = ConfigDict(from_attributes=True)


class PropertyRead(BaseModel):
    id: int
    owner_id: Optional[int] = None
    title: str
    description: str
    price: int
    address: str
    city: Optional[str] = None
    borough: Optional[str] = None
    postcode: Optional[str] = None
    property_type: str
    beds: int
    baths: int
    verified: bool
    amenities: List[str] = []
    # None when the listing has no reviews yet
    average_rating: Optional[float] = None
    review_count: int = 0
    created_at: datetime


class PropertySearchResponse(BaseModel):
    properties: List[PropertyRead]
    total_count: int


# Inquiries

InquiryStatus = Literal["PENDING", "RESPONDED", "CLOSED"]


class InquiryCreate(BaseModel):
    property_id: int = Field(..., ge=1)
    message: str = Field(..., min_length=5, max_length=2000)
    email: EmailStr
    phone: Optional[str] = Field(default=None, max_length=50)
    move_in_date: Optional[date] = None

    @field_validator("message", mode="before")
    @classmethod
    def strip_message(cls, v: str) -> str:
        if isinstance(v, str):
            v = v.strip()
        return v

    @field_validator("email", mode="before")
    @classmethod
    def normalize_email(cls, v: str) -> str:
        return _normalize_email(v)


class InquiryRead(BaseModel):
    id: int
    property_id: int
    user_id: int
    message: str
    email: str
    phone: Optional[str] = None
    move_in_date: Optional[date] = None
    status: InquiryStatus
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class InquiryStatusUpdate(BaseModel):
    status: InquiryStatus


# Landlord statistics

class PropertyStatRead(BaseModel):
    view_count: int = 0
    inquiry_count: int = 0
    favorite_count: int = 0
    last_viewed: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class InquirySummary(BaseModel):
    id: int
    status: InquiryStatus
    email: str
    message: str
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class LandlordPropertyRead(PropertyRead):
    # None until the listing has been viewed or inquired about
    stats: Optional[PropertyStatRead] = None
    inquiry_total: int = 0


class LandlordPropertiesResponse(BaseModel):
    properties: List[LandlordPropertyRead]
    views_count: int
    inquiries_count: int


class PropertyStatsResponse(BaseModel):
    property: PropertyRead
    stats: Optional[PropertyStatRead] = None
    inquiries: List[InquirySummary]
    inquiries_by_status: Dict[str, int]


# Admin

class UnverifiedPropertyRead(BaseModel):
    id: int
    title: str
    address: str
    owner_id: Optional[int] = None
    owner_email: Optional[str] = None
    created_at: datetime


class VerifyResponse(BaseModel):
    id: int
    verified: bool
