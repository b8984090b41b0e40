from typing import Any, Optional, Type
from sqlalchemy.orm import Session, Query, joinedload
from markup_backend.interface.filter import FilterSchema, apply_filters, icontains
from markup_backend.model.markup import MarkupDocument


class PredicateQueryBuilder:
    """Utility class for turning compiled predicates into ORM queries"""

    @classmethod
    def filtered_query(cls, entity: Type[Any], predicate: FilterSchema, db: Session) -> Query:
        """Apply exactly the given predicate to a query over entity"""
        return db.query(entity).filter(apply_filters(entity, predicate))


class MarkupDocumentQueryBuilder:
    """Utility class for building markup document list queries"""

    @classmethod
    def visible_documents(cls, predicate: FilterSchema, db: Session, search: Optional[str] = None) -> Query:
        query = PredicateQueryBuilder.filtered_query(MarkupDocument, predicate, db)

        if search:
            query = query.filter(apply_filters(MarkupDocument, icontains("title", search)))

        return query

    @classmethod
    def ordered(cls, query: Query) -> Query:
        # newest first; id keeps pages stable for equal timestamps
        return query.order_by(MarkupDocument.created_at.desc(), MarkupDocument.id.desc())

    @classmethod
    def with_creator(cls, query: Query) -> Query:
        return query.options(joinedload(MarkupDocument.creator))
