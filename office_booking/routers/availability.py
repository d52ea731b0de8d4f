# office_booking/routers/availability.py
"""
Availability windows of an office and the free slots computed from them.

GET    /offices/{office_id}/availability/slots  - free slots in a range (public)
GET    /offices/{office_id}/availability        - windows, optionally in a range (public)
POST   /offices/{office_id}/availability        - owner/admin
PATCH  /offices/{office_id}/availability/{id}   - owner/admin
DELETE /offices/{office_id}/availability/{id}   - owner/admin
"""

from datetime import datetime

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from ..config import settings
from ..database import get_db
from ..middleware.auth import get_optional_caller
from ..models import naive_utc
from ..schemas.availability import AvailabilityCreate, AvailabilityRead, AvailabilityUpdate, SlotRead
from ..schemas.common import ApiResponse, PagedResponse, Pagination
from ..services import availability as availability_service
from ..services.authorization import Caller
from ..services.scheduling import get_available_slots

router = APIRouter(prefix="/offices/{office_id}/availability", tags=["availability"])


# declared before /{availability_id} so "slots" is not taken for an id
@router.get("/slots", response_model=ApiResponse[list[SlotRead]])
def list_free_slots(
    office_id: str,
    start_date: datetime = Query(..., alias="startDate"),
    end_date: datetime = Query(..., alias="endDate"),
    duration: int = Query(settings.default_slot_minutes, ge=1),
    db: Session = Depends(get_db),
):
    slots = get_available_slots(db, office_id, naive_utc(start_date), naive_utc(end_date), duration)
    return ApiResponse(data=[SlotRead(start=s.start, end=s.end) for s in slots])


@router.get("", response_model=PagedResponse[AvailabilityRead])
def list_availability(
    office_id: str,
    start_date: datetime | None = Query(None, alias="startDate"),
    end_date: datetime | None = Query(None, alias="endDate"),
    page: int = Query(1, ge=1),
    limit: int = Query(settings.default_page_size, ge=1, le=settings.max_page_size),
    db: Session = Depends(get_db),
):
    items, total = availability_service.list_availability(
        db, office_id, naive_utc(start_date), naive_utc(end_date), page=page, limit=limit
    )
    return PagedResponse(
        data=[AvailabilityRead.model_validate(w) for w in items],
        pagination=Pagination.build(page, limit, total),
    )


@router.get("/{availability_id}", response_model=ApiResponse[AvailabilityRead])
def get_availability(office_id: str, availability_id: str, db: Session = Depends(get_db)):
    window = availability_service.get_availability(db, office_id, availability_id)
    return ApiResponse(data=AvailabilityRead.model_validate(window))


@router.post("", response_model=ApiResponse[AvailabilityRead], status_code=status.HTTP_201_CREATED)
def create_availability(
    office_id: str,
    data: AvailabilityCreate,
    caller: Caller | None = Depends(get_optional_caller),
    db: Session = Depends(get_db),
):
    window = availability_service.create_availability(
        db, office_id, data.available_from, data.available_to, caller
    )
    return ApiResponse(data=AvailabilityRead.model_validate(window), message="Availability created")


@router.patch("/{availability_id}", response_model=ApiResponse[AvailabilityRead])
def update_availability(
    office_id: str,
    availability_id: str,
    data: AvailabilityUpdate,
    caller: Caller | None = Depends(get_optional_caller),
    db: Session = Depends(get_db),
):
    window = availability_service.update_availability(
        db,
        office_id,
        availability_id,
        caller,
        available_from=data.available_from,
        available_to=data.available_to,
    )
    return ApiResponse(data=AvailabilityRead.model_validate(window))


@router.delete("/{availability_id}", response_model=ApiResponse[None])
def delete_availability(
    office_id: str,
    availability_id: str,
    caller: Caller | None = Depends(get_optional_caller),
    db: Session = Depends(get_db),
):
    availability_service.delete_availability(db, office_id, availability_id, caller)
    return ApiResponse(message="Availability deleted")
