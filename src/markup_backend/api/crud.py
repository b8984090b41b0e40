import logging
from typing import Any, Optional, Tuple, List
from sqlalchemy.orm import Session

from markup_backend.api.exceptions import InternalServerException, NotFoundException, ValidationException
from markup_backend.interface.base import EntityInterface
from markup_backend.interface.markup_documents import MarkupDocumentCreate, MarkupDocumentQuery, MarkupDocumentUpdate
from markup_backend.permissions.core import authorize_target, compile_predicate, decide
from markup_backend.permissions.decisions import Action
from markup_backend.permissions.handlers import raise_for_decision
from markup_backend.permissions.principal import Principal
from markup_backend.repositories.base import NotFoundError, RepositoryError
from markup_backend.repositories.markup_document import MarkupDocumentRepository
from markup_backend.services.markup_lifecycle import DocumentValidationError, MarkupLifecycleManager

logger = logging.getLogger(__name__)


def get_lifecycle_manager() -> MarkupLifecycleManager:
    return MarkupLifecycleManager()


def _resolve_target(permissions: Principal, repository: MarkupDocumentRepository, id: str, action: Action) -> Any:
    """Load a document and authorize `action` on it.

    Unknown ids and documents the caller may not touch raise the same
    NotFoundException.
    """
    target = repository.get_one(id)
    raise_for_decision(authorize_target(permissions, repository.model, action, target))
    return target


async def create_db(permissions: Principal, db: Session, entity: MarkupDocumentCreate, interface: EntityInterface,
                    lifecycle: Optional[MarkupLifecycleManager] = None):

    lifecycle = lifecycle or get_lifecycle_manager()

    raise_for_decision(decide(permissions, interface.model, Action.CREATE))

    try:
        record = lifecycle.create(permissions.profile, entity)
    except DocumentValidationError as e:
        raise ValidationException(errors=e.errors)

    try:
        db_item = MarkupDocumentRepository(db).insert(record)
        return interface.get.model_validate(db_item, from_attributes=True)
    except RepositoryError as e:
        logger.error(f"Creating {interface.model.__name__} failed: {e}")
        raise InternalServerException()


async def get_id_db(permissions: Principal, db: Session, id: str, interface: EntityInterface):

    try:
        item = _resolve_target(permissions, MarkupDocumentRepository(db), id, Action.GET)
        return interface.get.model_validate(item, from_attributes=True)
    except RepositoryError as e:
        logger.error(f"Reading {interface.model.__name__} {id} failed: {e}")
        raise InternalServerException()


async def list_db(permissions: Principal, db: Session, params: MarkupDocumentQuery, interface: EntityInterface) -> Tuple[List[Any], int]:

    predicate = compile_predicate(
        permissions,
        interface.model,
        Action.LIST,
        location=params.location,
        site_id=params.site_id,
    )

    try:
        items, total = MarkupDocumentRepository(db).list(
            predicate,
            search=params.search,
            offset=params.offset,
            limit=params.limit,
        )
    except RepositoryError as e:
        logger.error(f"Listing {interface.model.__name__} failed: {e}")
        raise InternalServerException()

    return [interface.list.model_validate(item, from_attributes=True) for item in items], total


def update_db(permissions: Principal, db: Session, id: str, entity: MarkupDocumentUpdate, interface: EntityInterface,
              lifecycle: Optional[MarkupLifecycleManager] = None):

    lifecycle = lifecycle or get_lifecycle_manager()
    repository = MarkupDocumentRepository(db)

    # Profile gate, then patch validation, before the target is looked up
    raise_for_decision(decide(permissions, interface.model, Action.UPDATE))
    errors = lifecycle.validate_update(entity)
    if errors:
        raise ValidationException(errors=errors)

    try:
        target = _resolve_target(permissions, repository, id, Action.UPDATE)

        try:
            changes = lifecycle.update(permissions.profile, target, entity)
        except DocumentValidationError as e:
            raise ValidationException(errors=e.errors)

        db_item = repository.update_by_id(id, changes)
        return interface.get.model_validate(db_item, from_attributes=True)

    except NotFoundError:
        raise NotFoundException()
    except RepositoryError as e:
        logger.error(f"Updating {interface.model.__name__} {id} failed: {e}")
        raise InternalServerException()


def delete_db(permissions: Principal, db: Session, id: str, interface: EntityInterface,
              lifecycle: Optional[MarkupLifecycleManager] = None):

    lifecycle = lifecycle or get_lifecycle_manager()
    repository = MarkupDocumentRepository(db)

    try:
        target = _resolve_target(permissions, repository, id, Action.DELETE)
        patch = lifecycle.soft_delete(permissions.profile, target)
        db_item = repository.soft_delete_by_id(id, patch["updated_at"])
        return interface.get.model_validate(db_item, from_attributes=True)

    except NotFoundError:
        raise NotFoundException()
    except RepositoryError as e:
        logger.error(f"Deleting {interface.model.__name__} {id} failed: {e}")
        raise InternalServerException()
