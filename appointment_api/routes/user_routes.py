import logging

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, EmailStr, field_validator, model_validator
from sqlalchemy.exc import SQLAlchemyError

from appointment_api.auth import jwt_handler
from appointment_api.auth.dependencies import get_current_user, get_user_manager
from appointment_api.auth.gates import check_admin, check_found, check_privileged, check_same_user, enforce
from appointment_api.auth.user_manager import IdentityResult, UserManager
from appointment_api.core.errors import bad_request, database_unavailable
from appointment_api.core.responses import Pagination, ResponseEnvelope
from appointment_api.models.user import User
from appointment_api.repository import UnitOfWork
from appointment_api.routes.dependencies import get_unit_of_work, get_users_params
from appointment_api.specifications.params import UsersSpecParams
from appointment_api.specifications.users import users_specification

router = APIRouter(tags=['users'])

logger = logging.getLogger(__name__)

PASSWORD_RULE = 'Password must have minimum 5 character and maximum 15 characters'


def _validate_password(value: str) -> str:
    if not 5 <= len(value) <= 15:
        raise ValueError(PASSWORD_RULE)
    return value


def _require_text(value: str) -> str:
    normalized = value.strip()
    if not normalized:
        raise ValueError('Field is required.')
    return normalized


class RegisterRequest(BaseModel):
    user_name: str
    email: EmailStr
    password: str
    confirm_password: str
    phone_number: str

    @field_validator('user_name', 'phone_number')
    @classmethod
    def validate_required_text(cls, value: str) -> str:
        return _require_text(value)

    @field_validator('password')
    @classmethod
    def validate_password(cls, value: str) -> str:
        return _validate_password(value)

    @model_validator(mode='after')
    def validate_confirmation(self) -> 'RegisterRequest':
        if self.password != self.confirm_password:
            raise ValueError('The password and confirmation password do not match.')
        return self


class LoginRequest(BaseModel):
    email: EmailStr
    password: str


class UpdatePhoneNumberRequest(BaseModel):
    phone_number: str

    @field_validator('phone_number')
    @classmethod
    def validate_phone_number(cls, value: str) -> str:
        return _require_text(value)


class UpdateEmailRequest(BaseModel):
    email: EmailStr


class UpdatePasswordRequest(BaseModel):
    current_password: str
    new_password: str
    confirm_new_password: str

    @field_validator('new_password')
    @classmethod
    def validate_new_password(cls, value: str) -> str:
        return _validate_password(value)

    @model_validator(mode='after')
    def validate_confirmation(self) -> 'UpdatePasswordRequest':
        if self.new_password != self.confirm_new_password:
            raise ValueError('The password and confirmation password do not match.')
        return self


class UserDto(BaseModel):
    id: int
    user_name: str
    email: str
    phone_number: str | None = None
    is_admin: bool
    is_employee: bool

    class Config:
        from_attributes = True


class TokenDto(BaseModel):
    token: str | None = None


class UserResponse(BaseModel):
    user: UserDto
    token: TokenDto


def user_response(user: User, with_token: bool = True) -> UserResponse:
    token = jwt_handler.create_access_token(subject=user.email) if with_token else None
    return UserResponse(user=UserDto.model_validate(user), token=TokenDto(token=token))


def ensure_succeeded(result: IdentityResult) -> None:
    if not result.succeeded:
        raise bad_request('; '.join(result.errors) or None)


@router.get('', response_model=ResponseEnvelope[Pagination[UserDto]])
def list_users(
    params: UsersSpecParams = Depends(get_users_params),
    current_user: User | None = Depends(get_current_user),
    unit_of_work: UnitOfWork = Depends(get_unit_of_work),
):
    enforce(check_found(current_user))
    enforce(check_privileged(current_user))

    spec = users_specification(params)
    repository = unit_of_work.repository(User)
    try:
        users = repository.list_with_spec(spec)
        total_users = repository.count(spec)
    except SQLAlchemyError as exc:
        raise database_unavailable() from exc

    return ResponseEnvelope(
        data=Pagination(
            page_index=params.page_index,
            page_size=params.page_size,
            count=total_users,
            data=[UserDto.model_validate(user) for user in users],
        )
    )


@router.get('/currentUser', response_model=ResponseEnvelope[UserResponse])
def get_current_user_details(current_user: User | None = Depends(get_current_user)):
    enforce(check_found(current_user))
    return ResponseEnvelope(data=user_response(current_user))


@router.post('', response_model=ResponseEnvelope[UserResponse])
def register(data: RegisterRequest, user_manager: UserManager = Depends(get_user_manager)):
    user = User(user_name=data.user_name, email=data.email, phone_number=data.phone_number)
    ensure_succeeded(user_manager.create(user, data.password))

    logger.info('Registered user %s.', user.email)
    return ResponseEnvelope(data=user_response(user))


@router.post('/login', response_model=ResponseEnvelope[UserResponse])
def login(data: LoginRequest, user_manager: UserManager = Depends(get_user_manager)):
    user = user_manager.find_by_email(data.email)
    if user is None or not user_manager.check_password(user, data.password):
        logger.info('Failed login for %s.', data.email)
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail='Invalid email or password.')

    return ResponseEnvelope(data=user_response(user))


@router.get('/{user_id}', response_model=ResponseEnvelope[UserResponse])
def get_user(
    user_id: int,
    current_user: User | None = Depends(get_current_user),
    user_manager: UserManager = Depends(get_user_manager),
):
    enforce(check_found(current_user))
    enforce(check_privileged(current_user))

    user = user_manager.find_by_id(user_id)
    enforce(check_found(user))

    return ResponseEnvelope(data=user_response(user, with_token=False))


@router.delete('/{user_id}', status_code=status.HTTP_204_NO_CONTENT)
def delete_user(
    user_id: int,
    current_user: User | None = Depends(get_current_user),
    user_manager: UserManager = Depends(get_user_manager),
):
    enforce(check_found(current_user))
    enforce(check_admin(current_user))

    user = user_manager.find_by_id(user_id)
    enforce(check_found(user))

    email, actor = user.email, current_user.email
    ensure_succeeded(user_manager.delete(user))
    logger.info('User %s deleted by %s.', email, actor)


@router.patch('/{user_id}/updatephonenumber', response_model=ResponseEnvelope[UserResponse])
def update_phone_number(
    user_id: int,
    data: UpdatePhoneNumberRequest,
    current_user: User | None = Depends(get_current_user),
    user_manager: UserManager = Depends(get_user_manager),
):
    enforce(check_found(current_user))
    enforce(check_same_user(current_user, user_id))

    token = user_manager.generate_change_phone_number_token(current_user, data.phone_number)
    ensure_succeeded(user_manager.change_phone_number(current_user, data.phone_number, token))

    return ResponseEnvelope(data=user_response(current_user))


@router.patch('/{user_id}/updateemail', response_model=ResponseEnvelope[UserResponse])
def update_email(
    user_id: int,
    data: UpdateEmailRequest,
    current_user: User | None = Depends(get_current_user),
    user_manager: UserManager = Depends(get_user_manager),
):
    enforce(check_found(current_user))
    enforce(check_same_user(current_user, user_id))

    token = user_manager.generate_change_email_token(current_user, data.email)
    ensure_succeeded(user_manager.change_email(current_user, data.email, token))

    logger.info('User %s changed email to %s.', user_id, current_user.email)
    return ResponseEnvelope(data=user_response(current_user))


@router.patch('/{user_id}/updatepassword', response_model=ResponseEnvelope[UserResponse])
def update_password(
    user_id: int,
    data: UpdatePasswordRequest,
    current_user: User | None = Depends(get_current_user),
    user_manager: UserManager = Depends(get_user_manager),
):
    enforce(check_found(current_user))
    enforce(check_same_user(current_user, user_id))

    ensure_succeeded(user_manager.change_password(current_user, data.current_password, data.new_password))

    return ResponseEnvelope(data=user_response(current_user))


def change_role_flag(
    user_id: int,
    flag: str,
    grant: bool,
    current_user: User | None,
    user_manager: UserManager,
) -> ResponseEnvelope[UserResponse]:
    enforce(check_found(current_user))
    enforce(check_admin(current_user))

    user = user_manager.find_by_id(user_id)
    enforce(check_found(user))

    if bool(getattr(user, flag)) == grant:
        state = 'already has' if grant else 'does not have'
        raise bad_request(f"User {state} the '{flag}' flag.")

    setattr(user, flag, grant)
    ensure_succeeded(user_manager.update(user))

    logger.info('%s %s %s on user %s.', current_user.email, 'granted' if grant else 'revoked', flag, user.email)
    return ResponseEnvelope(data=user_response(user, with_token=False))


@router.patch('/{user_id}/grantadminpermission', response_model=ResponseEnvelope[UserResponse])
def grant_admin_permission(
    user_id: int,
    current_user: User | None = Depends(get_current_user),
    user_manager: UserManager = Depends(get_user_manager),
):
    return change_role_flag(user_id, 'is_admin', True, current_user, user_manager)


@router.patch('/{user_id}/removeadminpermission', response_model=ResponseEnvelope[UserResponse])
def remove_admin_permission(
    user_id: int,
    current_user: User | None = Depends(get_current_user),
    user_manager: UserManager = Depends(get_user_manager),
):
    return change_role_flag(user_id, 'is_admin', False, current_user, user_manager)


@router.patch('/{user_id}/grantemployeepermission', response_model=ResponseEnvelope[UserResponse])
def grant_employee_permission(
    user_id: int,
    current_user: User | None = Depends(get_current_user),
    user_manager: UserManager = Depends(get_user_manager),
):
    return change_role_flag(user_id, 'is_employee', True, current_user, user_manager)


@router.patch('/{user_id}/removeemployeepermission', response_model=ResponseEnvelope[UserResponse])
def remove_employee_permission(
    user_id: int,
    current_user: User | None = Depends(get_current_user),
    user_manager: UserManager = Depends(get_user_manager),
):
    return change_role_flag(user_id, 'is_employee', False, current_user, user_manager)
