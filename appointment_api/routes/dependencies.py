from fastapi import Depends, Query
from fastapi.exceptions import RequestValidationError
from pydantic import BaseModel, ValidationError
from sqlalchemy.orm import Session

from appointment_api.database import get_db
from appointment_api.repository import UnitOfWork
from appointment_api.specifications.params import AppointmentsSpecParams, UsersSpecParams


def get_unit_of_work(db: Session = Depends(get_db)) -> UnitOfWork:
    return UnitOfWork(db)


def parse_query_params(model: type[BaseModel], **values):
    """Build ``model`` from the query values that were actually supplied."""
    try:
        return model(**{key: value for key, value in values.items() if value is not None})
    except ValidationError as exc:
        raise RequestValidationError(exc.errors(include_url=False, include_context=False)) from exc


def get_appointments_params(
    page_index: int | None = Query(default=None, alias='pageIndex'),
    page_size: int | None = Query(default=None, alias='pageSize'),
    sort: str | None = Query(default=None),
    starting_date: str | None = Query(default=None, alias='startingDate'),
    ending_date: str | None = Query(default=None, alias='endingDate'),
    name_search: str | None = Query(default=None, alias='nameSearch'),
) -> AppointmentsSpecParams:
    return parse_query_params(
        AppointmentsSpecParams,
        page_index=page_index,
        page_size=page_size,
        sort=sort,
        starting_date=starting_date,
        ending_date=ending_date,
        name_search=name_search,
    )


def get_users_params(
    page_index: int | None = Query(default=None, alias='pageIndex'),
    page_size: int | None = Query(default=None, alias='pageSize'),
    name_search: str | None = Query(default=None, alias='nameSearch'),
) -> UsersSpecParams:
    return parse_query_params(
        UsersSpecParams,
        page_index=page_index,
        page_size=page_size,
        name_search=name_search,
    )
