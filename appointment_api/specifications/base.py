"""Query specifications.

A ``Specification`` describes which rows to load, in which order and which
page of them, without knowing how the query is executed. The criteria is a
SQLAlchemy boolean clause so the whole thing is pushed down to the database
by ``SpecificationEvaluator``.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Generic, TypeVar

from sqlalchemy.sql.elements import ColumnElement

T = TypeVar('T')


@dataclass
class Specification(Generic[T]):
    criteria: ColumnElement[bool] | None = None
    order_by: Any = None
    order_by_descending: Any = None
    skip: int = 0
    take: int = 0
    is_paging_enabled: bool = False

    def add_order_by(self, key: Any) -> Specification[T]:
        self.order_by = key
        self.order_by_descending = None
        return self

    def add_order_by_descending(self, key: Any) -> Specification[T]:
        self.order_by_descending = key
        self.order_by = None
        return self

    def apply_paging(self, skip: int, take: int) -> Specification[T]:
        self.skip = max(skip, 0)
        self.take = take
        self.is_paging_enabled = True
        return self

    def for_count(self) -> Specification[T]:
        """Same rows, no ordering or paging. Used for pagination totals."""
        return Specification(criteria=self.criteria)

