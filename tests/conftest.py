import os
from datetime import date, datetime, time, timedelta
from decimal import Decimal

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

os.environ.setdefault('DATABASE_URL', 'sqlite://')
os.environ.setdefault('SEED_DATABASE', 'false')

from appointment_api.auth.passwords import hash_password  # noqa: E402
from appointment_api.database import Base  # noqa: E402
from appointment_api.models.appointment import Appointment  # noqa: E402
from appointment_api.models.user import User  # noqa: E402

TEST_PASSWORD = 'Password'
# Cheap bcrypt cost so fixtures stay fast.
TEST_PASSWORD_HASH = hash_password(TEST_PASSWORD, rounds=4)


@pytest.fixture
def db_engine():
    engine = create_engine(
        'sqlite://',
        connect_args={'check_same_thread': False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine, tables=[User.__table__, Appointment.__table__])
    try:
        yield engine
    finally:
        Base.metadata.drop_all(bind=engine, tables=[Appointment.__table__, User.__table__])
        engine.dispose()


@pytest.fixture
def db(db_engine):
    testing_session_local = sessionmaker(autocommit=False, autoflush=False, bind=db_engine)
    session = testing_session_local()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def make_user(db):
    def _make_user(user_name: str, email: str, is_admin: bool = False, is_employee: bool = False) -> User:
        user = User(
            user_name=user_name,
            email=email,
            phone_number='555-0100',
            hashed_password=TEST_PASSWORD_HASH,
            is_admin=is_admin,
            is_employee=is_employee,
        )
        db.add(user)
        db.commit()
        db.refresh(user)
        return user

    return _make_user


@pytest.fixture
def admin(make_user) -> User:
    return make_user('Admin_1', 'admin1@gmail.com', is_admin=True)


@pytest.fixture
def employee(make_user) -> User:
    return make_user('Employee_1', 'employee1@gmail.com', is_employee=True)


@pytest.fixture
def customer(make_user) -> User:
    return make_user('Customer_1', 'customer1@gmail.com')


@pytest.fixture
def make_appointment(db):
    def _make_appointment(
        app_user_name: str = 'Customer_1',
        app_user_email: str = 'customer1@gmail.com',
        day: date | None = None,
        start: time = time(9, 0),
        description: str = 'Haircut',
        price: Decimal = Decimal('25.00'),
        is_cancelled: bool = False,
    ) -> Appointment:
        day = day or date.today()
        start_time = datetime.combine(day, start)
        appointment = Appointment(
            date=day,
            estimated_start_time=start_time,
            estimated_end_time=start_time + timedelta(minutes=30),
            description=description,
            price=price,
            app_user_name=app_user_name,
            app_user_email=app_user_email,
            is_cancelled=is_cancelled,
            done=False,
        )
        db.add(appointment)
        db.commit()
        db.refresh(appointment)
        return appointment

    return _make_appointment
