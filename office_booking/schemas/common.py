# office_booking/schemas/common.py

from datetime import datetime
from math import ceil
from typing import Annotated, Generic, Optional, TypeVar

from pydantic import AfterValidator, BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from ..models import naive_utc

T = TypeVar("T")

# camelCase on the wire, snake_case in Python; both accepted on input
API_CONFIG = ConfigDict(
    from_attributes=True,
    alias_generator=to_camel,
    populate_by_name=True,
)


class ApiModel(BaseModel):
    model_config = API_CONFIG


class Pagination(ApiModel):
    page: int
    limit: int
    total: int
    total_pages: int

    @classmethod
    def build(cls, page: int, limit: int, total: int) -> "Pagination":
        return cls(page=page, limit=limit, total=total, total_pages=ceil(total / limit) if limit else 0)


class ApiResponse(ApiModel, Generic[T]):
    success: bool = True
    message: Optional[str] = None
    data: Optional[T] = None


class PagedResponse(ApiModel, Generic[T]):
    success: bool = True
    message: Optional[str] = None
    data: list[T] = []
    pagination: Pagination


# Every instant is stored as naive UTC; aware input is converted on the way in
UtcDatetime = Annotated[datetime, AfterValidator(naive_utc)]
