"""Appointment listing rules.

Admins with no filters see every appointment. Otherwise an unset date bound
falls back to today, so a request with only ``starting_date`` covers
``[starting_date, today]`` and one with only ``ending_date`` covers
``[today, ending_date]``. Callers relying on half-open ranges should pass both
bounds.
"""

from datetime import date

from sqlalchemy import and_, func
from sqlalchemy.sql.elements import ColumnElement

from appointment_api.models.appointment import Appointment
from appointment_api.models.user import User
from appointment_api.specifications.base import Specification
from appointment_api.specifications.params import AppointmentsSpecParams

SORT_DATE_ASC = 'dateAsc'
SORT_DATE_DESC = 'dateDesc'


def create_appointment_criteria(
    ending_date: date | None,
    starting_date: date | None,
    name_search: str | None,
    user: User,
    today: date | None = None,
) -> ColumnElement[bool] | None:
    if ending_date is None and starting_date is None and not name_search and user.is_admin:
        return None

    today = today or date.today()
    starting_date = starting_date or today
    ending_date = ending_date or today

    clauses = [Appointment.date >= starting_date, Appointment.date <= ending_date]
    if name_search:
        clauses.append(func.lower(Appointment.app_user_name).contains(name_search.lower(), autoescape=True))
    if not user.is_privileged:
        clauses.insert(0, Appointment.app_user_email == user.email)

    return and_(*clauses)


def appointments_with_user_specification(
    params: AppointmentsSpecParams,
    user: User,
    today: date | None = None,
) -> Specification[Appointment]:
    spec: Specification[Appointment] = Specification(
        criteria=create_appointment_criteria(
            params.ending_date,
            params.starting_date,
            params.name_search,
            user,
            today=today,
        )
    )
    spec.apply_paging(params.skip, params.page_size)

    if params.sort == SORT_DATE_DESC:
        spec.add_order_by_descending(Appointment.estimated_start_time)
    else:
        spec.add_order_by(Appointment.estimated_start_time)

    return spec


def appointments_count_specification(criteria: ColumnElement[bool] | None) -> Specification[Appointment]:
    return Specification(criteria=criteria)
