# office_booking/schemas/users.py

from datetime import datetime
from typing import Optional

from pydantic import EmailStr, Field

from ..models import UserRole
from .common import ApiModel


class UserRegister(ApiModel):
    name: str = Field(min_length=2)
    email: EmailStr
    password: str = Field(min_length=6, max_length=100)


class UserCreate(UserRegister):
    role: UserRole = UserRole.VISITOR


class UserUpdate(ApiModel):
    name: Optional[str] = Field(None, min_length=2)
    role: Optional[UserRole] = None
    is_active: Optional[bool] = None


class LoginRequest(ApiModel):
    email: EmailStr
    password: str = Field(min_length=1)


class UserRead(ApiModel):
    id: str
    name: str
    email: str
    role: UserRole
    is_active: bool
    created_at: Optional[datetime] = None


class TokenResponse(ApiModel):
    token: str
    user: UserRead
