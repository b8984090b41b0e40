import math
from abc import ABC
from datetime import datetime
from typing import Any, Generic, List, Optional, TypeVar
from pydantic import BaseModel, Field

from markup_backend.settings import settings

T = TypeVar("T")

class ListQuery(BaseModel):
    page: int = Field(1, ge=1, description="1-based page number")
    limit: int = Field(settings.DEFAULT_PAGE_LIMIT, ge=1, le=settings.MAX_PAGE_LIMIT, description="Page size")

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit

    @property
    def range(self) -> tuple[int, int]:
        """Inclusive zero-based row range covered by this page"""
        return self.offset, self.page * self.limit - 1


class EntityInterface(ABC):
    create: BaseModel = None
    get: BaseModel = None
    list: BaseModel = None
    update: BaseModel = None
    query: BaseModel = None
    endpoint: str = None
    model: Any = None

class BaseEntityList(BaseModel):
    created_at: Optional[datetime] = Field(None, description="Creation timestamp")
    updated_at: Optional[datetime] = Field(None, description="Update timestamp")

class BaseEntityGet(BaseEntityList):
    created_by: Optional[str] = None

class Pagination(BaseModel):
    page: int
    limit: int
    total: int
    totalPages: int

    @classmethod
    def from_query(cls, params: ListQuery, total: int) -> "Pagination":
        return cls(
            page=params.page,
            limit=params.limit,
            total=total,
            totalPages=math.ceil(total / params.limit) if params.limit else 0,
        )

class ResponseEnvelope(BaseModel, Generic[T]):
    success: bool = True
    data: T

class ListResponseEnvelope(BaseModel, Generic[T]):
    success: bool = True
    data: List[T]
    pagination: Pagination

class ErrorEnvelope(BaseModel):
    success: bool = False
    error: str
    details: Optional[List[Any]] = None
