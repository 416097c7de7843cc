"""Generic repository and unit of work over a SQLAlchemy session."""

from typing import Generic, TypeVar

from sqlalchemy import inspect
from sqlalchemy.orm import Session
from sqlalchemy.orm.attributes import flag_modified

from appointment_api.specifications.base import Specification
from appointment_api.specifications.evaluator import SpecificationEvaluator

T = TypeVar('T')


class GenericRepository(Generic[T]):
    """Reads go straight to the database; writes are only staged on the
    session until ``UnitOfWork.complete`` runs."""

    def __init__(self, db: Session, model: type[T]):
        self.db = db
        self.model = model

    def _apply(self, spec: Specification[T]):
        return SpecificationEvaluator.get_query(self.db.query(self.model), spec)

    def get_entity_by_id(self, entity_id: int) -> T | None:
        return self.db.get(self.model, entity_id)

    def list_all(self) -> list[T]:
        return self.db.query(self.model).all()

    def get_entity_with_spec(self, spec: Specification[T]) -> T | None:
        return self._apply(spec).first()

    def list_with_spec(self, spec: Specification[T]) -> list[T]:
        return self._apply(spec).all()

    def count(self, spec: Specification[T]) -> int:
        return self._apply(spec.for_count()).count()

    def add_entity(self, entity: T) -> None:
        self.db.add(entity)

    def update_entity(self, entity: T) -> None:
        """Stage the whole row for an UPDATE, even when no column changed."""
        self.db.add(entity)
        state = inspect(entity)
        if not state.persistent:
            return
        key = next(
            attr.key
            for attr in state.mapper.column_attrs
            if not any(column.primary_key for column in attr.columns)
        )
        # flag_modified needs the attribute loaded.
        getattr(entity, key)
        flag_modified(entity, key)

    def delete_entity(self, entity: T) -> None:
        self.db.delete(entity)


class UnitOfWork:
    def __init__(self, db: Session):
        self.db = db
        self._repositories: dict[type, GenericRepository] = {}

    def repository(self, model: type[T]) -> GenericRepository[T]:
        if model not in self._repositories:
            self._repositories[model] = GenericRepository(self.db, model)
        return self._repositories[model]

    def pending_changes(self) -> int:
        modified = [entity for entity in self.db.dirty if self.db.is_modified(entity)]
        return len(self.db.new) + len(self.db.deleted) + len(modified)

    def complete(self) -> int:
        """Commit every staged change and return how many rows were touched."""
        affected = self.pending_changes()
        self.db.commit()
        return affected
