"""
Base repository pattern implementation.

Repositories are the only place that talks to the database session. Every
SQLAlchemy failure leaves this layer as a RepositoryError with the session
rolled back, so callers never see driver exceptions.
"""

import logging
from abc import ABC
from typing import TypeVar, Generic, Optional, Dict, Any, Type
from sqlalchemy.orm import Session
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

logger = logging.getLogger(__name__)

# Type variable for generic entity type
T = TypeVar('T')


class RepositoryError(Exception):
    """Base exception for repository operations."""
    pass


class NotFoundError(RepositoryError):
    """Exception raised when entity is not found."""

    def __init__(self, entity_type: str, entity_id: Any):
        super().__init__(f"{entity_type} with id {entity_id} not found")
        self.entity_type = entity_type
        self.entity_id = entity_id


class DuplicateError(RepositoryError):
    """Exception raised when an insert violates a unique or foreign key constraint."""

    def __init__(self, entity_type: str, detail: str):
        super().__init__(f"{entity_type} could not be stored: {detail}")
        self.entity_type = entity_type


class BaseRepository(ABC, Generic[T]):
    """
    Abstract base repository providing common database operations.
    """

    def __init__(self, db: Session, model: Type[T]):
        """
        Initialize repository with database session and model class.

        Args:
            db: SQLAlchemy database session
            model: SQLAlchemy model class
        """
        self.db = db
        self.model = model

    def _fail(self, operation: str, error: SQLAlchemyError) -> RepositoryError:
        self.db.rollback()
        logger.error(f"Failed to {operation} {self.model.__name__}: {error}")
        return RepositoryError(f"Failed to {operation} {self.model.__name__}")

    def get_by_id_optional(self, entity_id: Any) -> Optional[T]:
        """
        Get entity by ID, returning None if not found.

        Args:
            entity_id: Entity identifier

        Returns:
            Entity instance or None
        """
        try:
            return self.db.query(self.model).filter(self.model.id == entity_id).first()
        except SQLAlchemyError as e:
            raise self._fail("read", e)

    def get_by_id(self, entity_id: Any) -> T:
        """
        Get entity by ID.

        Raises:
            NotFoundError: If entity not found
        """
        entity = self.get_by_id_optional(entity_id)
        if entity is None:
            raise NotFoundError(self.model.__name__, entity_id)
        return entity

    def create(self, entity: T) -> T:
        """
        Persist a new entity and return it refreshed from the database.

        Raises:
            DuplicateError: If entity violates a constraint
            RepositoryError: If database operation fails
        """
        try:
            self.db.add(entity)
            self.db.commit()
            self.db.refresh(entity)
            return entity
        except IntegrityError as e:
            self.db.rollback()
            logger.warning(f"Integrity error creating {self.model.__name__}: {e.orig}")
            raise DuplicateError(self.model.__name__, str(e.orig))
        except SQLAlchemyError as e:
            raise self._fail("create", e)

    def update(self, entity_id: Any, updates: Dict[str, Any]) -> T:
        """
        Update an existing entity.

        Args:
            entity_id: Entity identifier
            updates: Dictionary of fields to update

        Raises:
            NotFoundError: If entity not found
            RepositoryError: If update fails
        """
        entity = self.get_by_id(entity_id)

        try:
            for key, value in updates.items():
                if hasattr(entity, key):
                    setattr(entity, key, value)

            self.db.commit()
            self.db.refresh(entity)
            return entity
        except SQLAlchemyError as e:
            raise self._fail("update", e)

