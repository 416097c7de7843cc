from datetime import date, time

from appointment_api.models.appointment import Appointment
from appointment_api.models.user import User
from appointment_api.specifications.base import Specification
from appointment_api.specifications.evaluator import SpecificationEvaluator
from appointment_api.specifications.params import UsersSpecParams
from appointment_api.specifications.users import users_specification


def _run(db, spec) -> list[str]:
    query = SpecificationEvaluator.get_query(db.query(Appointment), spec)
    return [appointment.description for appointment in query.all()]


def test_ordering_is_last_writer_wins() -> None:
    spec = Specification()

    spec.add_order_by(Appointment.estimated_start_time)
    spec.add_order_by_descending(Appointment.price)
    assert spec.order_by is None
    assert spec.order_by_descending is Appointment.price

    spec.add_order_by(Appointment.description)
    assert spec.order_by is Appointment.description
    assert spec.order_by_descending is None


def test_empty_specification_passes_every_row_through(db, make_appointment) -> None:
    make_appointment(description='a', day=date(2026, 3, 1))
    make_appointment(description='b', day=date(2026, 3, 2))

    assert sorted(_run(db, Specification())) == ['a', 'b']


def test_skip_and_take_ignored_without_paging(db, make_appointment) -> None:
    for index in range(4):
        make_appointment(description=f'row {index}', start=time(9 + index, 0))

    spec = Specification(skip=2, take=1).add_order_by(Appointment.estimated_start_time)

    assert _run(db, spec) == ['row 0', 'row 1', 'row 2', 'row 3']


def test_filter_sort_and_page_together(db, make_appointment) -> None:
    for index in range(6):
        make_appointment(description=f'row {index}', start=time(9 + index, 0), is_cancelled=index % 2 == 1)

    spec = Specification(criteria=Appointment.is_cancelled.is_(False))
    spec.add_order_by_descending(Appointment.estimated_start_time)
    spec.apply_paging(skip=1, take=2)

    assert _run(db, spec) == ['row 2', 'row 0']


def test_applying_the_same_specification_twice_is_stable(db, make_appointment) -> None:
    for index in range(5):
        make_appointment(description=f'row {index}', start=time(9 + index, 0))

    spec = Specification().add_order_by(Appointment.estimated_start_time).apply_paging(skip=1, take=3)
    before = (spec.criteria, spec.skip, spec.take, spec.is_paging_enabled)

    assert _run(db, spec) == _run(db, spec) == ['row 1', 'row 2', 'row 3']
    assert (spec.criteria, spec.skip, spec.take, spec.is_paging_enabled) == before


def test_users_specification_filters_and_orders_by_user_name(db, make_user) -> None:
    make_user('Zoe', 'zoe@gmail.com')
    make_user('anna_smith', 'anna@gmail.com')
    make_user('Bob', 'bob@gmail.com')
    make_user('Annabel', 'annabel@gmail.com')

    spec = users_specification(UsersSpecParams(name_search='ANN'))
    users = SpecificationEvaluator.get_query(db.query(User), spec).all()

    assert [user.user_name for user in users] == ['Annabel', 'anna_smith']


def test_users_specification_pages_with_empty_search(db, make_user) -> None:
    for name in ['d_user', 'a_user', 'c_user', 'b_user']:
        make_user(name, f'{name}@gmail.com')

    spec = users_specification(UsersSpecParams(page_index=2, page_size=3))
    users = SpecificationEvaluator.get_query(db.query(User), spec).all()

    assert [user.user_name for user in users] == ['d_user']
    assert db.query(User).filter(spec.criteria).count() == 4
