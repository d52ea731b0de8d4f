# office_booking/schemas/bookings.py

from datetime import datetime
from typing import Optional

from pydantic import EmailStr, Field, model_validator

from ..models import BookingStatus
from .common import ApiModel, UtcDatetime
from .offices import OfficePublicRead


class VisitorCreate(ApiModel):
    name: str = Field(min_length=1)
    email: Optional[EmailStr] = None
    phone: Optional[str] = Field(None, min_length=8)
    document: Optional[str] = None
    company: Optional[str] = None


class VisitorRead(ApiModel):
    id: str
    name: str
    email: Optional[str] = None
    phone: Optional[str] = None
    document: Optional[str] = None
    company: Optional[str] = None


class BookingCreate(ApiModel):
    office_id: str
    start_at: UtcDatetime
    end_at: UtcDatetime
    title: Optional[str] = None
    description: Optional[str] = None
    needs_support: bool = False
    notes: Optional[str] = None

    # Visitor: inline record, reference, or bare contact snapshot
    visitor: Optional[VisitorCreate] = None
    visitor_id: Optional[str] = None
    visitor_name: Optional[str] = None
    visitor_email: Optional[EmailStr] = None
    visitor_whatsapp: Optional[str] = None

    @model_validator(mode="after")
    def check_booking(self):
        if self.end_at <= self.start_at:
            raise ValueError("endAt must be after startAt")
        has_snapshot = bool(self.visitor_name and (self.visitor_email or self.visitor_whatsapp))
        if not (self.visitor or self.visitor_id or has_snapshot):
            raise ValueError(
                "Visitor data required: visitor, visitorId or visitorName with visitorEmail/visitorWhatsapp"
            )
        return self


class BookingUpdate(ApiModel):
    status: Optional[BookingStatus] = None
    title: Optional[str] = None
    description: Optional[str] = None
    # not nullable; only included in field_changes when sent
    needs_support: bool = False
    notes: Optional[str] = None
    visitor_name: Optional[str] = None
    visitor_email: Optional[EmailStr] = None
    visitor_whatsapp: Optional[str] = None

    def field_changes(self) -> dict:
        """Explicitly sent non-status fields."""
        return self.model_dump(exclude_unset=True, exclude={"status"})


class BookingAction(ApiModel):
    """Optional body of the cancel and confirm actions."""
    visitor_email: Optional[EmailStr] = None


class BookingFilters(ApiModel):
    """Closed set of list filters, validated before reaching the service."""
    page: int = Field(1, ge=1)
    limit: int = Field(10, ge=1, le=100)
    office_id: Optional[str] = None
    status: Optional[BookingStatus] = None
    start_date: Optional[UtcDatetime] = None
    end_date: Optional[UtcDatetime] = None
    visitor_email: Optional[str] = Field(None, min_length=1)


class BookingPublicRead(ApiModel):
    """Projection for anonymous callers: no contact details, no internal notes."""
    id: str
    office_id: str
    start_at: datetime
    end_at: datetime
    status: BookingStatus
    visitor_name: Optional[str] = None
    office: Optional[OfficePublicRead] = None


class BookingRead(BookingPublicRead):
    title: Optional[str] = None
    description: Optional[str] = None
    needs_support: bool = False
    notes: Optional[str] = None
    visitor_id: Optional[str] = None
    visitor_email: Optional[str] = None
    visitor_whatsapp: Optional[str] = None
    visitor: Optional[VisitorRead] = None
    created_by_user_id: Optional[str] = None
    created_at: datetime
    updated_at: datetime
