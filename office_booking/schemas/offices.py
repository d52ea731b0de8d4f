# office_booking/schemas/offices.py

from datetime import datetime
from typing import Optional

from pydantic import Field

from .common import ApiModel


class OfficeCreate(ApiModel):
    number: str = Field(min_length=1)
    company_name: str = Field(min_length=1)
    is_active: bool = True
    owner_ids: list[str] = []


class OfficeUpdate(ApiModel):
    company_name: Optional[str] = Field(None, min_length=1)
    is_active: Optional[bool] = None
    owner_ids: Optional[list[str]] = None


class OfficeOwnerAdd(ApiModel):
    user_id: str


class OfficePublicRead(ApiModel):
    id: str
    number: str
    company_name: str


class OfficeRead(OfficePublicRead):
    is_active: bool
    owner_ids: list[str] = []
    created_at: datetime
    updated_at: datetime
    deleted_at: Optional[datetime] = None
