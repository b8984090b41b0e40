import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, Optional, Type

from markup_backend.api.exceptions import ForbiddenException, NotFoundException, UnauthorizedException
from markup_backend.interface.filter import matches
from markup_backend.permissions.decisions import (
    Action, Allow, Decision, Deny, DenyReason, Inaccessible, SINGLE_TARGET_ACTIONS
)
from markup_backend.permissions.principal import Principal

logger = logging.getLogger(__name__)


def raise_for_decision(decision: Decision) -> Allow:
    """Translate a non-allow decision into the matching HTTP exception."""
    if isinstance(decision, Allow):
        return decision

    if isinstance(decision, Deny):
        if decision.reason == DenyReason.UNAUTHENTICATED:
            raise UnauthorizedException()
        raise ForbiddenException()

    raise NotFoundException()


class PermissionHandler(ABC):
    """Base class for entity-specific permission handlers"""

    def __init__(self, entity: Type[Any]):
        self.entity = entity
        self.resource_name = entity.__tablename__

    @abstractmethod
    def decide(self, principal: Principal, action: Action, **filters) -> Decision:
        """Target-independent decision for an action.

        For list-like actions an Allow carries the predicate every visible row
        must satisfy. Keyword filters may only narrow that predicate.
        """
        pass

    def can_perform_action(self, principal: Principal, action: Action, target: Optional[Any] = None) -> Decision:
        """Decide an action on a concrete target row (or on nothing, for create)."""
        decision = self.decide(principal, action)

        if not isinstance(decision, Allow) or action not in SINGLE_TARGET_ACTIONS:
            return decision

        if target is None or not matches(decision.predicate, target):
            logger.debug(f"{self.resource_name}:{action.value} inaccessible for user {principal.user_id}")
            return Inaccessible()

        return decision


class PermissionRegistry:
    """Registry for managing entity permission handlers"""

    _instance = None
    _handlers: Dict[Type[Any], PermissionHandler] = {}

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def register(self, entity: Type[Any], handler: PermissionHandler):
        """Register a permission handler for an entity"""
        self._handlers[entity] = handler

    def get_handler(self, entity: Type[Any]) -> Optional[PermissionHandler]:
        """Get the permission handler for an entity"""
        return self._handlers.get(entity)


# Global registry instance
permission_registry = PermissionRegistry()
