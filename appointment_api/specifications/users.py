from sqlalchemy import func, true
from sqlalchemy.sql.elements import ColumnElement

from appointment_api.models.user import User
from appointment_api.specifications.base import Specification
from appointment_api.specifications.params import UsersSpecParams


def create_user_criteria(name_search: str | None) -> ColumnElement[bool]:
    if not name_search:
        return true()
    return func.lower(User.user_name).contains(name_search.lower(), autoescape=True)


def users_specification(params: UsersSpecParams) -> Specification[User]:
    spec: Specification[User] = Specification(criteria=create_user_criteria(params.name_search))
    spec.apply_paging(params.skip, params.page_size)
    spec.add_order_by(User.user_name)
    return spec
