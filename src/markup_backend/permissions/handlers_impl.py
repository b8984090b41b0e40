import logging
from dataclasses import dataclass
from typing import Callable, Optional, Tuple

from markup_backend.interface.filter import (
    ALWAYS, NEVER, FilterSchema, all_of, any_of, eq, is_null
)
from markup_backend.interface.markup_documents import DocumentLocation
from markup_backend.interface.profiles import UserRole
from markup_backend.permissions.decisions import Action, Allow, Decision, Deny, DenyReason
from markup_backend.permissions.handlers import PermissionHandler
from markup_backend.permissions.principal import Principal

logger = logging.getLogger(__name__)

SITE_MEMBER_ROLES = frozenset({UserRole.WORKER, UserRole.SITE_MANAGER, UserRole.CUSTOMER_MANAGER})


@dataclass(frozen=True)
class ListScope:
    """Client-requested narrowing of a document listing"""
    location: Optional[DocumentLocation] = None
    site_id: Optional[str] = None
    include_deleted: bool = False


@dataclass(frozen=True)
class AccessRule:
    name: str
    applies: Callable[[Principal, Action, ListScope], bool]
    outcome: Callable[[Principal, Action, ListScope], Decision]


def personal_scope(principal: Principal) -> FilterSchema:
    return all_of(
        eq("location", DocumentLocation.PERSONAL.value),
        eq("created_by", principal.profile.id),
    )


def shared_scope(principal: Principal) -> FilterSchema:
    # A profile without a site sees no shared documents at all
    if principal.site_id is None:
        return NEVER
    return all_of(
        eq("location", DocumentLocation.SHARED.value),
        eq("site_id", principal.site_id),
    )


def organization_scope(principal: Principal) -> FilterSchema:
    """Documents on sites of the admin's organization, plus unassigned ones
    created by members of that organization"""
    if principal.organization_id is None:
        return NEVER
    return any_of(
        eq("site.organization_id", principal.organization_id),
        all_of(is_null("site_id"), eq("creator.organization_id", principal.organization_id)),
    )


def location_scope(scope: ListScope) -> FilterSchema:
    if scope.location is None:
        return ALWAYS
    return eq("location", scope.location.value)


def _narrowed(visibility: FilterSchema, scope: ListScope) -> Allow:
    site_filter = eq("site_id", scope.site_id) if scope.site_id else ALWAYS
    deleted_filter = ALWAYS if scope.include_deleted else eq("is_deleted", False)
    return Allow(predicate=all_of(deleted_filter, visibility, site_filter))


def _deny_unauthenticated(principal: Principal, action: Action, scope: ListScope) -> Decision:
    return Deny(reason=DenyReason.UNAUTHENTICATED, detail="No profile for the current user")


def _deny_inactive(principal: Principal, action: Action, scope: ListScope) -> Decision:
    return Deny(reason=DenyReason.FORBIDDEN, detail=f"Profile status is {principal.profile.status.value}")


def _system_admin(principal: Principal, action: Action, scope: ListScope) -> Decision:
    if action == Action.CREATE:
        return Allow()
    return _narrowed(location_scope(scope), scope)


def _admin(principal: Principal, action: Action, scope: ListScope) -> Decision:
    if action == Action.CREATE:
        return Allow()
    return _narrowed(all_of(location_scope(scope), organization_scope(principal)), scope)


def _site_member(principal: Principal, action: Action, scope: ListScope) -> Decision:
    if scope.include_deleted:
        return Deny(reason=DenyReason.FORBIDDEN, detail="Deleted documents are restricted to administrators")

    clauses = {
        DocumentLocation.PERSONAL: personal_scope(principal),
        DocumentLocation.SHARED: shared_scope(principal),
    }
    # A requested location only ever removes clauses
    if scope.location is not None:
        visibility = clauses[scope.location]
    else:
        visibility = any_of(*clauses.values())

    return _narrowed(visibility, scope)


def _site_member_create(principal: Principal, action: Action, scope: ListScope) -> Decision:
    return Allow()


class MarkupDocumentPermissionHandler(PermissionHandler):
    """Permission handler for MarkupDocument entity.

    Rules are evaluated top to bottom and the first one that applies decides.
    Adding a role or scope means adding a row, not editing existing ones.
    """

    RULES: Tuple[AccessRule, ...] = (
        AccessRule(
            "missing_profile",
            lambda p, a, s: p.user_id is None or p.profile is None,
            _deny_unauthenticated,
        ),
        AccessRule(
            "inactive_profile",
            lambda p, a, s: not p.is_active,
            _deny_inactive,
        ),
        AccessRule(
            "system_admin",
            lambda p, a, s: p.role == UserRole.SYSTEM_ADMIN,
            _system_admin,
        ),
        AccessRule(
            "admin",
            lambda p, a, s: p.role == UserRole.ADMIN,
            _admin,
        ),
        AccessRule(
            "site_member_read_write",
            lambda p, a, s: p.role in SITE_MEMBER_ROLES and a != Action.CREATE,
            _site_member,
        ),
        AccessRule(
            "site_member_create",
            lambda p, a, s: p.role in SITE_MEMBER_ROLES and a == Action.CREATE,
            _site_member_create,
        ),
    )

    def decide(self, principal: Principal, action: Action, location=None, site_id: Optional[str] = None,
               include_deleted: bool = False) -> Decision:
        scope = ListScope(
            location=DocumentLocation(location) if location is not None else None,
            site_id=site_id,
            include_deleted=include_deleted,
        )

        for rule in self.RULES:
            if rule.applies(principal, action, scope):
                decision = rule.outcome(principal, action, scope)
                logger.debug(f"{self.resource_name}:{action.value} for user {principal.user_id} -> {rule.name}: {decision.outcome}")
                return decision

        return Deny(reason=DenyReason.FORBIDDEN, detail="No access rule matched")
