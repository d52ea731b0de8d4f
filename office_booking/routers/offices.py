# office_booking/routers/offices.py
# DELETE = soft-delete (is_active + deleted_at)

from typing import Union

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from ..config import settings
from ..database import get_db
from ..middleware.auth import get_current_caller, get_optional_caller
from ..models import Offices
from ..schemas.common import ApiResponse, PagedResponse, Pagination
from ..schemas.offices import OfficeCreate, OfficeOwnerAdd, OfficePublicRead, OfficeRead, OfficeUpdate
from ..services import offices as offices_service
from ..services.authorization import Caller

router = APIRouter(prefix="/offices", tags=["offices"])

OfficeOut = Union[OfficeRead, OfficePublicRead]


def _present(office: Offices, caller: Caller | None):
    if offices_service.is_full_view(office, caller):
        return OfficeRead.model_validate(office)
    return OfficePublicRead.model_validate(office)


@router.get("", response_model=PagedResponse[OfficeOut])
def list_offices(
    q: str | None = None,
    include_deleted: bool = Query(False, alias="includeDeleted"),
    page: int = Query(1, ge=1),
    limit: int = Query(settings.default_page_size, ge=1, le=settings.max_page_size),
    caller: Caller | None = Depends(get_optional_caller),
    db: Session = Depends(get_db),
):
    items, total = offices_service.list_offices(
        db, caller, q=q, include_deleted=include_deleted, page=page, limit=limit
    )
    return PagedResponse(
        data=[_present(o, caller) for o in items],
        pagination=Pagination.build(page, limit, total),
    )


@router.get("/{id}", response_model=ApiResponse[OfficeOut])
def get_office(
    id: str,
    caller: Caller | None = Depends(get_optional_caller),
    db: Session = Depends(get_db),
):
    return ApiResponse(data=_present(offices_service.get_office(db, id, caller), caller))


@router.post("", response_model=ApiResponse[OfficeRead], status_code=status.HTTP_201_CREATED)
def create_office(
    data: OfficeCreate,
    caller: Caller = Depends(get_current_caller),
    db: Session = Depends(get_db),
):
    office = offices_service.create_office(db, data, caller)
    return ApiResponse(data=OfficeRead.model_validate(office), message="Office created")


@router.patch("/{id}", response_model=ApiResponse[OfficeRead])
def update_office(
    id: str,
    data: OfficeUpdate,
    caller: Caller = Depends(get_current_caller),
    db: Session = Depends(get_db),
):
    office = offices_service.update_office(db, id, data, caller)
    return ApiResponse(data=OfficeRead.model_validate(office))


@router.delete("/{id}", response_model=ApiResponse[None])
def delete_office(
    id: str,
    caller: Caller = Depends(get_current_caller),
    db: Session = Depends(get_db),
):
    offices_service.delete_office(db, id, caller)
    return ApiResponse(message="Office deleted")


@router.post("/{id}/owners", response_model=ApiResponse[OfficeRead])
def add_owner(
    id: str,
    data: OfficeOwnerAdd,
    caller: Caller = Depends(get_current_caller),
    db: Session = Depends(get_db),
):
    office = offices_service.add_owner(db, id, data.user_id, caller)
    return ApiResponse(data=OfficeRead.model_validate(office))


@router.delete("/{id}/owners/{user_id}", response_model=ApiResponse[OfficeRead])
def remove_owner(
    id: str,
    user_id: str,
    caller: Caller = Depends(get_current_caller),
    db: Session = Depends(get_db),
):
    office = offices_service.remove_owner(db, id, user_id, caller)
    return ApiResponse(data=OfficeRead.model_validate(office))
