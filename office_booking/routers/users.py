# office_booking/routers/users.py
# admin only; users are never deleted, only deactivated via PATCH

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from ..config import settings
from ..database import get_db
from ..middleware.auth import get_current_caller
from ..models import UserRole
from ..schemas.common import ApiResponse, PagedResponse, Pagination
from ..schemas.users import UserCreate, UserRead, UserUpdate
from ..services import users as users_service
from ..services.authorization import Caller

router = APIRouter(prefix="/users", tags=["users"])


@router.get("", response_model=PagedResponse[UserRead])
def list_users(
    role: UserRole | None = None,
    page: int = Query(1, ge=1),
    limit: int = Query(settings.default_page_size, ge=1, le=settings.max_page_size),
    caller: Caller = Depends(get_current_caller),
    db: Session = Depends(get_db),
):
    items, total = users_service.list_users(db, caller, role=role, page=page, limit=limit)
    return PagedResponse(
        data=[UserRead.model_validate(u) for u in items],
        pagination=Pagination.build(page, limit, total),
    )


@router.get("/{id}", response_model=ApiResponse[UserRead])
def get_user(id: str, caller: Caller = Depends(get_current_caller), db: Session = Depends(get_db)):
    return ApiResponse(data=UserRead.model_validate(users_service.get_user(db, id, caller)))


@router.post("", response_model=ApiResponse[UserRead], status_code=status.HTTP_201_CREATED)
def create_user(
    data: UserCreate,
    caller: Caller = Depends(get_current_caller),
    db: Session = Depends(get_db),
):
    user = users_service.create_user(db, data, caller)
    return ApiResponse(data=UserRead.model_validate(user), message="User created")


@router.patch("/{id}", response_model=ApiResponse[UserRead])
def update_user(
    id: str,
    data: UserUpdate,
    caller: Caller = Depends(get_current_caller),
    db: Session = Depends(get_db),
):
    user = users_service.update_user(db, id, data, caller)
    return ApiResponse(data=UserRead.model_validate(user))
