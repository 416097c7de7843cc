from typing import Generic, TypeVar

from pydantic import BaseModel, Field

T = TypeVar('T')


class ApiErrorResponse(BaseModel):
    message: str | None = None
    details: str | None = None


class ResponseEnvelope(BaseModel, Generic[T]):
    """Body of every non-empty response."""
    success: bool = True
    data: T | None = None
    error: ApiErrorResponse = Field(default_factory=ApiErrorResponse)


class Pagination(BaseModel, Generic[T]):
    page_index: int
    page_size: int
    count: int
    data: list[T]
