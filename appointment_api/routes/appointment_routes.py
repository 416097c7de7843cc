import logging
from datetime import date, datetime, timezone
from decimal import Decimal

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel, EmailStr, Field, field_validator, model_validator
from sqlalchemy.exc import SQLAlchemyError

from appointment_api.auth.dependencies import get_current_user
from appointment_api.auth.gates import (
    check_admin,
    check_found,
    check_not_empty,
    check_owner_or_privileged,
    check_privileged,
    enforce,
)
from appointment_api.core.errors import bad_request, database_unavailable
from appointment_api.core.responses import Pagination, ResponseEnvelope
from appointment_api.models.appointment import Appointment
from appointment_api.models.user import User
from appointment_api.repository import UnitOfWork
from appointment_api.routes.dependencies import get_appointments_params, get_unit_of_work
from appointment_api.specifications.appointments import (
    appointments_count_specification,
    appointments_with_user_specification,
)
from appointment_api.specifications.params import AppointmentsSpecParams

router = APIRouter(tags=['appointments'])

logger = logging.getLogger(__name__)

MAX_DESCRIPTION_LENGTH = 500


class CreateOrUpdateAppointmentRequest(BaseModel):
    date: date
    estimated_start_time: datetime
    estimated_end_time: datetime
    description: str
    price: Decimal = Field(ge=0, max_digits=18, decimal_places=2)
    app_user_name: str
    app_user_email: EmailStr
    is_cancelled: bool
    done: bool

    @field_validator('description', 'app_user_name')
    @classmethod
    def validate_required_text(cls, value: str) -> str:
        normalized = value.strip()
        if not normalized:
            raise ValueError('Field is required.')
        return normalized

    @field_validator('description')
    @classmethod
    def validate_description_length(cls, value: str) -> str:
        if len(value) > MAX_DESCRIPTION_LENGTH:
            raise ValueError(f'Description must be {MAX_DESCRIPTION_LENGTH} characters or fewer.')
        return value

    @field_validator('app_user_email')
    @classmethod
    def normalize_email(cls, value: str) -> str:
        return value.strip().lower()

    @field_validator('estimated_start_time', 'estimated_end_time')
    @classmethod
    def to_naive_utc(cls, value: datetime) -> datetime:
        # Stored columns are naive UTC.
        if value.tzinfo is not None:
            return value.astimezone(timezone.utc).replace(tzinfo=None)
        return value

    @model_validator(mode='after')
    def validate_time_range(self) -> 'CreateOrUpdateAppointmentRequest':
        if self.estimated_end_time < self.estimated_start_time:
            raise ValueError('Estimated end time cannot be before the estimated start time.')
        return self

    def apply_to(self, appointment: Appointment) -> Appointment:
        for field_name, value in self.model_dump().items():
            setattr(appointment, field_name, value)
        return appointment


class AppointmentResponse(BaseModel):
    id: int
    date: date
    estimated_start_time: datetime
    estimated_end_time: datetime
    description: str
    price: Decimal
    app_user_name: str
    app_user_email: str
    is_cancelled: bool
    done: bool

    class Config:
        from_attributes = True


def to_response(appointment: Appointment) -> AppointmentResponse:
    return AppointmentResponse.model_validate(appointment)


def complete_or_bad_request(unit_of_work: UnitOfWork) -> None:
    try:
        result = unit_of_work.complete()
    except SQLAlchemyError as exc:
        unit_of_work.db.rollback()
        logger.exception('Saving appointment changes failed.')
        raise database_unavailable() from exc

    if result <= 0:
        raise bad_request()


@router.get('', response_model=ResponseEnvelope[Pagination[AppointmentResponse]])
def list_appointments(
    params: AppointmentsSpecParams = Depends(get_appointments_params),
    current_user: User | None = Depends(get_current_user),
    unit_of_work: UnitOfWork = Depends(get_unit_of_work),
):
    enforce(check_found(current_user))

    spec = appointments_with_user_specification(params, current_user)
    count_spec = appointments_count_specification(spec.criteria)
    repository = unit_of_work.repository(Appointment)

    try:
        total_items = repository.count(count_spec)
        appointments = repository.list_with_spec(spec)
    except SQLAlchemyError as exc:
        raise database_unavailable() from exc

    enforce(check_not_empty(appointments))

    return ResponseEnvelope(
        data=Pagination(
            page_index=params.page_index,
            page_size=params.page_size,
            count=total_items,
            data=[to_response(appointment) for appointment in appointments],
        )
    )


@router.get('/{appointment_id}', response_model=ResponseEnvelope[AppointmentResponse])
def get_appointment(
    appointment_id: int,
    current_user: User | None = Depends(get_current_user),
    unit_of_work: UnitOfWork = Depends(get_unit_of_work),
):
    enforce(check_found(current_user))

    appointment = unit_of_work.repository(Appointment).get_entity_by_id(appointment_id)
    enforce(check_found(appointment))
    enforce(check_owner_or_privileged(current_user, appointment))

    return ResponseEnvelope(data=to_response(appointment))


@router.post('', response_model=ResponseEnvelope[AppointmentResponse])
def create_appointment(
    data: CreateOrUpdateAppointmentRequest,
    current_user: User | None = Depends(get_current_user),
    unit_of_work: UnitOfWork = Depends(get_unit_of_work),
):
    enforce(check_found(current_user))
    enforce(check_privileged(current_user))

    appointment = data.apply_to(Appointment())
    unit_of_work.repository(Appointment).add_entity(appointment)
    complete_or_bad_request(unit_of_work)

    logger.info('Appointment %s created by %s for %s.', appointment.id, current_user.email, appointment.app_user_email)
    return ResponseEnvelope(data=to_response(appointment))


@router.put('/{appointment_id}', response_model=ResponseEnvelope[AppointmentResponse])
def update_appointment(
    appointment_id: int,
    data: CreateOrUpdateAppointmentRequest,
    current_user: User | None = Depends(get_current_user),
    unit_of_work: UnitOfWork = Depends(get_unit_of_work),
):
    enforce(check_found(current_user))
    enforce(check_privileged(current_user))

    repository = unit_of_work.repository(Appointment)
    appointment = repository.get_entity_by_id(appointment_id)
    enforce(check_found(appointment))

    data.apply_to(appointment)
    repository.update_entity(appointment)
    complete_or_bad_request(unit_of_work)

    logger.info('Appointment %s updated by %s.', appointment_id, current_user.email)
    return ResponseEnvelope(data=to_response(appointment))


@router.patch('/{appointment_id}/cancel', response_model=ResponseEnvelope[AppointmentResponse])
def cancel_appointment(
    appointment_id: int,
    current_user: User | None = Depends(get_current_user),
    unit_of_work: UnitOfWork = Depends(get_unit_of_work),
):
    enforce(check_found(current_user))

    repository = unit_of_work.repository(Appointment)
    appointment = repository.get_entity_by_id(appointment_id)
    enforce(check_found(appointment))
    enforce(check_owner_or_privileged(current_user, appointment))

    appointment.is_cancelled = True
    repository.update_entity(appointment)
    complete_or_bad_request(unit_of_work)

    logger.info('Appointment %s cancelled by %s.', appointment_id, current_user.email)
    return ResponseEnvelope(data=to_response(appointment))


@router.delete('/{appointment_id}', status_code=status.HTTP_204_NO_CONTENT)
def delete_appointment(
    appointment_id: int,
    current_user: User | None = Depends(get_current_user),
    unit_of_work: UnitOfWork = Depends(get_unit_of_work),
):
    enforce(check_found(current_user))
    enforce(check_admin(current_user))

    repository = unit_of_work.repository(Appointment)
    appointment = repository.get_entity_by_id(appointment_id)
    enforce(check_found(appointment))

    repository.delete_entity(appointment)
    complete_or_bad_request(unit_of_work)

    logger.info('Appointment %s deleted by %s.', appointment_id, current_user.email)
