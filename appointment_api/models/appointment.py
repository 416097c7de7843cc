"""Appointment model definitions."""

from sqlalchemy import Boolean, Column, Date, DateTime, Integer, Numeric, String
from appointment_api.database import Base


class Appointment(Base):
    """Represents a booked appointment.

    The booking user is stored by display name and email only; there is no
    foreign key to ``users``.
    """
    __tablename__ = "appointments"

    id = Column(Integer, primary_key=True, index=True)
    date = Column(Date, nullable=False, index=True)
    estimated_start_time = Column(DateTime, nullable=False)
    estimated_end_time = Column(DateTime, nullable=False)
    description = Column(String, nullable=False)
    price = Column(Numeric(18, 2), nullable=False)
    app_user_name = Column(String, nullable=False)
    app_user_email = Column(String, nullable=False, index=True)
    is_cancelled = Column(Boolean, nullable=False, default=False)
    done = Column(Boolean, nullable=False, default=False)
