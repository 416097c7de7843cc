from datetime import date, datetime

from pydantic import BaseModel, Field, field_validator

from appointment_api.core import config


class PaginationParams(BaseModel):
    page_index: int = Field(default=1, ge=1)
    page_size: int = Field(default=config.DEFAULT_PAGE_SIZE, ge=1)

    @field_validator('page_size')
    @classmethod
    def cap_page_size(cls, value: int) -> int:
        return min(value, config.MAX_PAGE_SIZE)

    @property
    def skip(self) -> int:
        return (self.page_index - 1) * self.page_size


def _lower_search(value: str | None) -> str | None:
    if value is None:
        return None
    return value.lower()


class AppointmentsSpecParams(PaginationParams):
    sort: str | None = None
    starting_date: date | None = None
    ending_date: date | None = None
    name_search: str | None = None

    @field_validator('starting_date', 'ending_date', mode='before')
    @classmethod
    def truncate_to_date(cls, value):
        if isinstance(value, datetime):
            return value.date()
        if isinstance(value, str) and value.strip():
            return datetime.fromisoformat(value.strip()).date()
        if isinstance(value, str):
            return None
        return value

    @field_validator('name_search')
    @classmethod
    def normalize_name_search(cls, value: str | None) -> str | None:
        return _lower_search(value)


class UsersSpecParams(PaginationParams):
    name_search: str | None = None

    @field_validator('name_search')
    @classmethod
    def normalize_name_search(cls, value: str | None) -> str | None:
        return _lower_search(value)
