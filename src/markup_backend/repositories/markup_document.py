"""
Markup document repository.

Wraps all storage access for markup documents. Visibility is never decided
here: list queries receive an already compiled predicate from the
permission handlers and apply it unchanged.
"""

import logging
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple
from sqlalchemy.orm import Session, joinedload
from sqlalchemy.exc import SQLAlchemyError

from .base import BaseRepository
from ..interface.filter import FilterSchema
from ..model.markup import MarkupDocument
from ..permissions.query_builders import MarkupDocumentQueryBuilder

logger = logging.getLogger(__name__)


class MarkupDocumentRepository(BaseRepository[MarkupDocument]):
    """Repository for MarkupDocument entity database operations."""

    def __init__(self, db: Session):
        super().__init__(db, MarkupDocument)

    def list(
        self,
        predicate: FilterSchema,
        search: Optional[str] = None,
        offset: int = 0,
        limit: Optional[int] = None,
    ) -> Tuple[List[MarkupDocument], int]:
        """
        List documents satisfying the predicate, newest first.

        Args:
            predicate: Compiled visibility predicate
            search: Optional case-insensitive substring of the title
            offset: Rows to skip
            limit: Maximum rows to return

        Returns:
            The requested page and the total count over the whole filtered set
        """
        query = MarkupDocumentQueryBuilder.visible_documents(predicate, self.db, search)

        try:
            total = query.count()

            page = MarkupDocumentQueryBuilder.ordered(MarkupDocumentQueryBuilder.with_creator(query))
            if offset:
                page = page.offset(offset)
            if limit is not None:
                page = page.limit(limit)

            return page.all(), total
        except SQLAlchemyError as e:
            raise self._fail("list", e)

    def get_one(self, document_id: str) -> Optional[MarkupDocument]:
        """Load one document with its creator and site, regardless of visibility."""
        try:
            return (
                self.db.query(MarkupDocument)
                .options(joinedload(MarkupDocument.creator), joinedload(MarkupDocument.site))
                .filter(MarkupDocument.id == document_id)
                .first()
            )
        except SQLAlchemyError as e:
            raise self._fail("read", e)

    def insert(self, record: Dict[str, Any]) -> MarkupDocument:
        return self.create(MarkupDocument(**record))

    def update_by_id(self, document_id: str, patch: Dict[str, Any]) -> MarkupDocument:
        return self.update(document_id, patch)

    def soft_delete_by_id(self, document_id: str, updated_at: datetime) -> MarkupDocument:
        """Flag a document as deleted. The row itself is kept."""
        document = self.update(document_id, {"is_deleted": True, "updated_at": updated_at})
        logger.info(f"Soft-deleted markup document {document_id}")
        return document

