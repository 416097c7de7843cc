import jwt
import pytest

from appointment_api.auth import jwt_handler
from appointment_api.auth.passwords import hash_password, verify_password
from appointment_api.auth.user_manager import CHANGE_EMAIL_PURPOSE, UserManager
from appointment_api.models.user import User


@pytest.fixture(autouse=True)
def fast_hashing(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(
        'appointment_api.auth.user_manager.hash_password',
        lambda password: hash_password(password, rounds=4),
    )


def test_verify_password_round_trip_and_garbage_hash() -> None:
    hashed = hash_password('secret', rounds=4)

    assert verify_password('secret', hashed)
    assert not verify_password('Secret', hashed)
    assert not verify_password('secret', 'not-a-bcrypt-hash')
    assert not verify_password('secret', None)


def test_create_normalizes_email_and_hashes_password(db) -> None:
    manager = UserManager(db)
    user = User(user_name=' New_User ', email=' New.User@Gmail.com ')

    result = manager.create(user, 'hunter2')

    assert result.succeeded
    assert user.email == 'new.user@gmail.com'
    assert user.user_name == 'New_User'
    assert user.hashed_password != 'hunter2'
    assert manager.check_password(user, 'hunter2')
    assert manager.find_by_email('NEW.USER@gmail.com').id == user.id


def test_create_rejects_duplicate_email_and_user_name(db, customer) -> None:
    manager = UserManager(db)

    same_email = manager.create(User(user_name='Someone', email='CUSTOMER1@gmail.com'), 'hunter2')
    same_name = manager.create(User(user_name='customer_1', email='other@gmail.com'), 'hunter2')

    assert not same_email.succeeded
    assert 'already taken' in same_email.errors[0]
    assert not same_name.succeeded


def test_change_password_requires_current_password(db, customer) -> None:
    manager = UserManager(db)
    old_stamp = customer.security_stamp

    assert not manager.change_password(customer, 'wrong', 'newpass').succeeded
    assert manager.change_password(customer, 'Password', 'newpass').succeeded
    assert manager.check_password(customer, 'newpass')
    assert customer.security_stamp != old_stamp


def test_change_email_with_generated_token(db, customer) -> None:
    manager = UserManager(db)

    token = manager.generate_change_email_token(customer, 'fresh@gmail.com')
    result = manager.change_email(customer, 'Fresh@gmail.com', token)

    assert result.succeeded
    assert customer.email == 'fresh@gmail.com'


def test_change_email_rejects_token_for_other_address(db, customer) -> None:
    manager = UserManager(db)

    token = manager.generate_change_email_token(customer, 'fresh@gmail.com')

    assert not manager.change_email(customer, 'sneaky@gmail.com', token).succeeded
    assert customer.email == 'customer1@gmail.com'


def test_change_email_rejects_address_in_use(db, customer, employee) -> None:
    manager = UserManager(db)

    token = manager.generate_change_email_token(customer, employee.email)

    assert not manager.change_email(customer, employee.email, token).succeeded


def test_change_token_is_single_use(db, customer) -> None:
    manager = UserManager(db)

    token = manager.generate_change_phone_number_token(customer, '555-0199')

    assert manager.change_phone_number(customer, '555-0199', token).succeeded
    assert customer.phone_number == '555-0199'
    # The security stamp rotated, so the same token no longer verifies.
    assert not manager.change_phone_number(customer, '555-0199', token).succeeded


def test_change_token_purpose_is_checked(db, customer) -> None:
    token = UserManager(db).generate_change_phone_number_token(customer, '555-0199')

    with pytest.raises(jwt.InvalidTokenError):
        jwt_handler.decode_change_token(token, CHANGE_EMAIL_PURPOSE)


def test_update_and_delete(db, customer) -> None:
    manager = UserManager(db)
    customer_id = customer.id

    customer.is_employee = True
    assert manager.update(customer).succeeded
    assert manager.find_by_id(customer_id).is_employee is True

    assert manager.delete(customer).succeeded
    assert manager.find_by_id(customer_id) is None


def test_access_token_subject_round_trip() -> None:
    token = jwt_handler.create_access_token(subject='customer1@gmail.com')

    assert jwt_handler.decode_access_token(token)['sub'] == 'customer1@gmail.com'
