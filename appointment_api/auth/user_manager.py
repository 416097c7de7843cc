"""User management: creation, lookup, credential and contact changes.

Every mutating call commits on its own and reports business failures through
``IdentityResult`` instead of raising, so routes only have to look at
``succeeded``. Database errors other than constraint violations propagate.
"""

import logging
from dataclasses import dataclass, field

import jwt
from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from appointment_api.auth import jwt_handler
from appointment_api.auth.passwords import hash_password, verify_password
from appointment_api.models.user import User, new_security_stamp

logger = logging.getLogger(__name__)

CHANGE_EMAIL_PURPOSE = 'change_email'
CHANGE_PHONE_PURPOSE = 'change_phone_number'


@dataclass
class IdentityResult:
    succeeded: bool
    errors: list[str] = field(default_factory=list)

    @classmethod
    def success(cls) -> 'IdentityResult':
        return cls(succeeded=True)

    @classmethod
    def failed(cls, *errors: str) -> 'IdentityResult':
        return cls(succeeded=False, errors=list(errors))


def normalize_email(email: str) -> str:
    return email.strip().lower()


class UserManager:
    def __init__(self, db: Session):
        self.db = db

    def find_by_email(self, email: str | None) -> User | None:
        if not email:
            return None
        return self.db.query(User).filter(func.lower(User.email) == normalize_email(email)).first()

    def find_by_id(self, user_id: int) -> User | None:
        return self.db.get(User, user_id)

    def find_by_name(self, user_name: str) -> User | None:
        return self.db.query(User).filter(func.lower(User.user_name) == user_name.strip().lower()).first()

    def _email_taken(self, email: str, exclude_id: int | None = None) -> bool:
        existing = self.find_by_email(email)
        return existing is not None and existing.id != exclude_id

    def _commit(self) -> IdentityResult:
        try:
            self.db.commit()
        except IntegrityError as exc:
            self.db.rollback()
            logger.warning('User change rejected by the database: %s', exc.orig)
            return IdentityResult.failed('User name or email is already taken.')
        return IdentityResult.success()

    def create(self, user: User, password: str) -> IdentityResult:
        user.email = normalize_email(user.email)
        user.user_name = user.user_name.strip()

        if self.find_by_name(user.user_name) is not None:
            return IdentityResult.failed(f"User name '{user.user_name}' is already taken.")
        if self._email_taken(user.email):
            return IdentityResult.failed(f"Email '{user.email}' is already taken.")

        user.hashed_password = hash_password(password)
        user.security_stamp = new_security_stamp()
        user.is_admin = bool(user.is_admin)
        user.is_employee = bool(user.is_employee)
        self.db.add(user)
        return self._commit()

    def update(self, user: User) -> IdentityResult:
        self.db.add(user)
        return self._commit()

    def delete(self, user: User) -> IdentityResult:
        self.db.delete(user)
        return self._commit()

    def check_password(self, user: User, password: str) -> bool:
        return verify_password(password, user.hashed_password)

    def change_password(self, user: User, current_password: str, new_password: str) -> IdentityResult:
        if not self.check_password(user, current_password):
            return IdentityResult.failed('Incorrect password.')

        user.hashed_password = hash_password(new_password)
        user.security_stamp = new_security_stamp()
        return self._commit()

    def generate_change_email_token(self, user: User, new_email: str) -> str:
        return jwt_handler.create_change_token(
            user.id, CHANGE_EMAIL_PURPOSE, normalize_email(new_email), user.security_stamp
        )

    def change_email(self, user: User, new_email: str, token: str) -> IdentityResult:
        new_email = normalize_email(new_email)
        if not self._verify_change_token(user, CHANGE_EMAIL_PURPOSE, new_email, token):
            return IdentityResult.failed('Invalid token.')
        if self._email_taken(new_email, exclude_id=user.id):
            return IdentityResult.failed(f"Email '{new_email}' is already taken.")

        user.email = new_email
        user.security_stamp = new_security_stamp()
        return self._commit()

    def generate_change_phone_number_token(self, user: User, phone_number: str) -> str:
        return jwt_handler.create_change_token(
            user.id, CHANGE_PHONE_PURPOSE, phone_number, user.security_stamp
        )

    def change_phone_number(self, user: User, phone_number: str, token: str) -> IdentityResult:
        if not self._verify_change_token(user, CHANGE_PHONE_PURPOSE, phone_number, token):
            return IdentityResult.failed('Invalid token.')

        user.phone_number = phone_number
        user.security_stamp = new_security_stamp()
        return self._commit()

    def _verify_change_token(self, user: User, purpose: str, value: str, token: str) -> bool:
        try:
            payload = jwt_handler.decode_change_token(token, purpose)
        except jwt.InvalidTokenError:
            return False

        return (
            payload.get('sub') == str(user.id)
            and payload.get('value') == value
            and payload.get('stamp') == user.security_stamp
        )
