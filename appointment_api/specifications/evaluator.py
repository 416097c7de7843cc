from sqlalchemy.orm import Query

from appointment_api.specifications.base import Specification


class SpecificationEvaluator:
    """Applies a specification to a query over every row of an entity."""

    @staticmethod
    def get_query(query: Query, spec: Specification) -> Query:
        if spec.criteria is not None:
            query = query.filter(spec.criteria)

        if spec.order_by is not None:
            query = query.order_by(spec.order_by.asc())
        elif spec.order_by_descending is not None:
            query = query.order_by(spec.order_by_descending.desc())

        if spec.is_paging_enabled:
            query = query.offset(spec.skip).limit(spec.take)

        return query
