"""Demo data for an empty database."""

import logging
from datetime import date, datetime, time, timedelta
from decimal import Decimal

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from appointment_api.auth.user_manager import UserManager
from appointment_api.models.appointment import Appointment
from appointment_api.models.user import User

logger = logging.getLogger(__name__)

SEED_PASSWORD = 'Password'

SEED_USERS = [
    {'user_name': 'Admin_1', 'email': 'admin1@gmail.com', 'is_admin': True, 'is_employee': False},
    {'user_name': 'Employee_1', 'email': 'employee1@gmail.com', 'is_admin': False, 'is_employee': True},
    {'user_name': 'Customer_1', 'email': 'customer1@gmail.com', 'is_admin': False, 'is_employee': False},
    {'user_name': 'Customer_2', 'email': 'customer2@gmail.com', 'is_admin': False, 'is_employee': False},
    {'user_name': 'Customer_3', 'email': 'customer3@gmail.com', 'is_admin': False, 'is_employee': False},
]

# (days from today, start time, minutes, description, price, customer index)
SEED_APPOINTMENTS = [
    (0, time(9, 0), 30, 'Haircut', Decimal('25.00'), 2),
    (0, time(10, 0), 60, 'Haircut and beard trim', Decimal('40.00'), 3),
    (1, time(14, 30), 30, 'Beard trim', Decimal('15.00'), 4),
    (2, time(11, 0), 45, 'Hair coloring', Decimal('60.00'), 2),
    (-1, time(16, 0), 30, 'Haircut', Decimal('25.00'), 3),
]


def seed_users(db: Session) -> None:
    if db.query(User).first() is not None:
        return

    user_manager = UserManager(db)
    for values in SEED_USERS:
        result = user_manager.create(User(**values), SEED_PASSWORD)
        if not result.succeeded:
            logger.warning('Could not seed user %s: %s', values['email'], '; '.join(result.errors))


def seed_appointments(db: Session, today: date | None = None) -> None:
    if db.query(Appointment).first() is not None:
        return

    today = today or date.today()
    for day_offset, start, minutes, description, price, customer_index in SEED_APPOINTMENTS:
        customer = SEED_USERS[customer_index]
        day = today + timedelta(days=day_offset)
        start_time = datetime.combine(day, start)
        db.add(
            Appointment(
                date=day,
                estimated_start_time=start_time,
                estimated_end_time=start_time + timedelta(minutes=minutes),
                description=description,
                price=price,
                app_user_name=customer['user_name'],
                app_user_email=customer['email'],
                is_cancelled=False,
                done=day_offset < 0,
            )
        )
    db.commit()


def seed_database(db: Session) -> None:
    try:
        seed_users(db)
        seed_appointments(db)
    except SQLAlchemyError:
        db.rollback()
        logger.exception('An error occurred while seeding the database.')
