# office_booking/routers/bookings.py
# PATCH = 405, DELETE = 405 (status changes go through PUT or the action endpoints)

from datetime import datetime
from typing import Union

from fastapi import APIRouter, Body, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from ..config import settings
from ..core.errors import InvalidState
from ..database import get_db
from ..middleware.auth import get_optional_caller
from ..models import Bookings, BookingStatus
from ..schemas.bookings import (
    BookingAction,
    BookingCreate,
    BookingFilters,
    BookingPublicRead,
    BookingRead,
    BookingUpdate,
)
from ..schemas.common import ApiResponse, PagedResponse, Pagination
from ..services import bookings as bookings_service
from ..services.authorization import Caller

router = APIRouter(prefix="/bookings", tags=["bookings"])

BookingOut = Union[BookingRead, BookingPublicRead]


def _present(booking: Bookings, caller: Caller | None, full: bool = False):
    if full or not bookings_service.is_public_view(caller):
        return BookingRead.model_validate(booking)
    return BookingPublicRead.model_validate(booking)


@router.get("", response_model=PagedResponse[BookingOut])
def list_bookings(
    office_id: str | None = Query(None, alias="officeId"),
    booking_status: BookingStatus | None = Query(None, alias="status"),
    start_date: datetime | None = Query(None, alias="startDate"),
    end_date: datetime | None = Query(None, alias="endDate"),
    visitor_email: str | None = Query(None, alias="visitorEmail", min_length=1),
    page: int = Query(1, ge=1),
    limit: int = Query(settings.default_page_size, ge=1, le=settings.max_page_size),
    caller: Caller | None = Depends(get_optional_caller),
    db: Session = Depends(get_db),
):
    filters = BookingFilters(
        page=page,
        limit=limit,
        office_id=office_id,
        status=booking_status,
        start_date=start_date,
        end_date=end_date,
        visitor_email=visitor_email,
    )
    items, total = bookings_service.list_bookings(db, filters, caller)
    return PagedResponse(
        data=[_present(b, caller) for b in items],
        pagination=Pagination.build(page, limit, total),
    )


@router.get("/my", response_model=PagedResponse[BookingRead])
def list_my_bookings(
    visitor_email: str | None = Query(None, alias="visitorEmail"),
    page: int = Query(1, ge=1),
    limit: int = Query(settings.default_page_size, ge=1, le=settings.max_page_size),
    caller: Caller | None = Depends(get_optional_caller),
    db: Session = Depends(get_db),
):
    email = visitor_email or (caller.email if caller else None)
    if not email:
        raise InvalidState("visitorEmail is required")

    items, total = bookings_service.list_for_visitor(db, email, page=page, limit=limit)
    return PagedResponse(
        data=[BookingRead.model_validate(b) for b in items],
        pagination=Pagination.build(page, limit, total),
    )


@router.get("/{id}", response_model=ApiResponse[BookingOut])
def get_booking(
    id: str,
    visitor_email: str | None = Query(None, alias="visitorEmail"),
    caller: Caller | None = Depends(get_optional_caller),
    db: Session = Depends(get_db),
):
    booking = bookings_service.get_booking(db, id, caller, visitor_email)
    # proving the visitor email grants the full record of that booking
    return ApiResponse(data=_present(booking, caller, full=visitor_email is not None))


@router.post("", response_model=ApiResponse[BookingRead], status_code=status.HTTP_201_CREATED)
def create_booking(
    data: BookingCreate,
    caller: Caller | None = Depends(get_optional_caller),
    db: Session = Depends(get_db),
):
    booking = bookings_service.create_booking(db, data, caller)
    return ApiResponse(data=BookingRead.model_validate(booking), message="Booking created")


@router.put("/{id}", response_model=ApiResponse[BookingRead])
def update_booking(
    id: str,
    data: BookingUpdate,
    visitor_email: str | None = Query(None, alias="visitorEmail"),
    caller: Caller | None = Depends(get_optional_caller),
    db: Session = Depends(get_db),
):
    booking = bookings_service.update_booking(db, id, data, caller, visitor_email)
    return ApiResponse(data=BookingRead.model_validate(booking))


@router.post("/{id}/cancel", response_model=ApiResponse[BookingRead])
def cancel_booking(
    id: str,
    data: BookingAction | None = Body(None),
    caller: Caller | None = Depends(get_optional_caller),
    db: Session = Depends(get_db),
):
    visitor_email = data.visitor_email if data else None
    booking = bookings_service.update_status(db, id, BookingStatus.CANCELLED, caller, visitor_email)
    return ApiResponse(data=BookingRead.model_validate(booking), message="Booking cancelled")


@router.post("/{id}/confirm", response_model=ApiResponse[BookingRead])
def confirm_booking(
    id: str,
    data: BookingAction | None = Body(None),
    caller: Caller | None = Depends(get_optional_caller),
    db: Session = Depends(get_db),
):
    visitor_email = data.visitor_email if data else None
    booking = bookings_service.update_status(db, id, BookingStatus.CONFIRMED, caller, visitor_email)
    return ApiResponse(data=BookingRead.model_validate(booking), message="Booking confirmed")


@router.post("/{id}/complete", response_model=ApiResponse[BookingRead])
def complete_booking(
    id: str,
    caller: Caller | None = Depends(get_optional_caller),
    db: Session = Depends(get_db),
):
    booking = bookings_service.update_status(db, id, BookingStatus.COMPLETED, caller)
    return ApiResponse(data=BookingRead.model_validate(booking), message="Booking completed")


@router.patch("/{id}")
def patch_not_allowed():
    raise HTTPException(
        status_code=status.HTTP_405_METHOD_NOT_ALLOWED,
        detail="Method not allowed",
    )


@router.delete("/{id}")
def delete_not_allowed():
    raise HTTPException(
        status_code=status.HTTP_405_METHOD_NOT_ALLOWED,
        detail="Method not allowed",
    )
