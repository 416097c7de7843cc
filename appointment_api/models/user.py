"""User model definitions."""

import uuid

from sqlalchemy import Boolean, Column, Integer, String
from appointment_api.database import Base


def new_security_stamp() -> str:
    return uuid.uuid4().hex


class User(Base):
    """Represents an application user.

    ``is_admin`` and ``is_employee`` are independent flags; a user may hold
    either, both or neither.
    """
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    user_name = Column(String, unique=True, index=True, nullable=False)
    email = Column(String, unique=True, index=True, nullable=False)
    phone_number = Column(String)
    hashed_password = Column(String, nullable=False)
    security_stamp = Column(String, nullable=False, default=new_security_stamp)
    is_admin = Column(Boolean, nullable=False, default=False)
    is_employee = Column(Boolean, nullable=False, default=False)

    @property
    def is_privileged(self) -> bool:
        return bool(self.is_admin or self.is_employee)
