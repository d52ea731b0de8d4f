# office_booking/routers/auth.py

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from ..database import get_db
from ..middleware.auth import get_current_caller
from ..schemas.common import ApiResponse
from ..schemas.users import LoginRequest, TokenResponse, UserRead, UserRegister
from ..services import users as users_service
from ..services.authorization import Caller

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/register", response_model=ApiResponse[UserRead], status_code=status.HTTP_201_CREATED)
def register(data: UserRegister, db: Session = Depends(get_db)):
    user = users_service.register_user(db, data)
    return ApiResponse(data=UserRead.model_validate(user), message="User registered")


@router.post("/login", response_model=ApiResponse[TokenResponse])
def login(data: LoginRequest, db: Session = Depends(get_db)):
    token, user = users_service.authenticate(db, data.email, data.password)
    return ApiResponse(data=TokenResponse(token=token, user=UserRead.model_validate(user)))


@router.get("/me", response_model=ApiResponse[UserRead])
def me(caller: Caller = Depends(get_current_caller), db: Session = Depends(get_db)):
    user = users_service.get_user(db, caller.identity, caller)
    return ApiResponse(data=UserRead.model_validate(user))
