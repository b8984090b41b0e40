"""
Permission entry points used by the API layer and the CLI.
"""

from typing import Any, Optional

from markup_backend.interface.filter import FilterSchema
from markup_backend.model.markup import MarkupDocument
from markup_backend.permissions.decisions import Action, Decision
from markup_backend.permissions.handlers import permission_registry, raise_for_decision
from markup_backend.permissions.handlers_impl import MarkupDocumentPermissionHandler
from markup_backend.permissions.principal import Principal


def initialize_permission_handlers():
    """Initialize and register all permission handlers"""
    permission_registry.register(MarkupDocument, MarkupDocumentPermissionHandler(MarkupDocument))


def get_handler(entity: Any) -> MarkupDocumentPermissionHandler:
    handler = permission_registry.get_handler(entity)
    if handler is None:
        raise LookupError(f"No permission handler registered for {entity.__tablename__}")
    return handler


def decide(permissions: Principal, entity: Any, action: Action, **filters) -> Decision:
    """Target-independent decision (list, create and the profile gate of updates)."""
    return get_handler(entity).decide(permissions, action, **filters)


def compile_predicate(permissions: Principal, entity: Any, action: Action, **filters) -> FilterSchema:
    """Predicate for a collection read; raises when the caller may not list at all."""
    return raise_for_decision(decide(permissions, entity, action, **filters)).predicate


def authorize_target(permissions: Principal, entity: Any, action: Action, target: Optional[Any]) -> Decision:
    """Decision for an operation on one resolved row (None when the id is unknown)."""
    return get_handler(entity).can_perform_action(permissions, action, target)


# Initialize handlers on module import
initialize_permission_handlers()
