"""
Outcomes produced by permission handlers.

Handlers never raise for an access decision; they return one of these values
and the API layer maps it to a response. Single-target operations that are
refused for a reason tied to the target return `Inaccessible`, which the API
reports exactly like a missing id.
"""

from enum import Enum
from typing import Literal, Union
from pydantic import BaseModel

from markup_backend.interface.filter import ALWAYS, FilterSchema


class Action(str, Enum):
    LIST = "list"
    GET = "get"
    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"


SINGLE_TARGET_ACTIONS = frozenset({Action.GET, Action.UPDATE, Action.DELETE})


class DenyReason(str, Enum):
    UNAUTHENTICATED = "unauthenticated"
    FORBIDDEN = "forbidden"


class Allow(BaseModel):
    outcome: Literal["allow"] = "allow"
    predicate: FilterSchema = ALWAYS


class Deny(BaseModel):
    outcome: Literal["deny"] = "deny"
    reason: DenyReason
    detail: str = ""


class Inaccessible(BaseModel):
    outcome: Literal["inaccessible"] = "inaccessible"


Decision = Union[Allow, Deny, Inaccessible]
