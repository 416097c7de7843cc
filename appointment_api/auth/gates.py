"""Authorization gates.

Each check is a pure function of the caller (and target) returning a
``GateResult``. Routes call ``enforce`` on them one by one, so the order of
the ``enforce`` lines in a route is the order in which existence and
privilege are checked for that endpoint.
"""

from enum import Enum

from fastapi import HTTPException, status

from appointment_api.core.errors import default_message
from appointment_api.models.appointment import Appointment
from appointment_api.models.user import User


class GateResult(Enum):
    ALLOWED = None
    NOT_FOUND = status.HTTP_404_NOT_FOUND
    FORBIDDEN = status.HTTP_403_FORBIDDEN

    @property
    def allowed(self) -> bool:
        return self is GateResult.ALLOWED


def _gate(condition: bool, failure: GateResult) -> GateResult:
    return GateResult.ALLOWED if condition else failure


def check_found(entity) -> GateResult:
    return _gate(entity is not None, GateResult.NOT_FOUND)


def check_not_empty(rows: list) -> GateResult:
    return _gate(len(rows) > 0, GateResult.NOT_FOUND)


def check_privileged(user: User) -> GateResult:
    return _gate(user.is_privileged, GateResult.FORBIDDEN)


def check_admin(user: User) -> GateResult:
    return _gate(bool(user.is_admin), GateResult.FORBIDDEN)


def check_owner_or_privileged(user: User, appointment: Appointment) -> GateResult:
    return _gate(user.is_privileged or appointment.app_user_email == user.email, GateResult.FORBIDDEN)


def check_same_user(user: User, user_id: int) -> GateResult:
    # No privileged override: admins cannot change someone else's credentials.
    return _gate(user.id == user_id, GateResult.FORBIDDEN)


def enforce(result: GateResult) -> None:
    if result.allowed:
        return
    raise HTTPException(status_code=result.value, detail=default_message(result.value))
