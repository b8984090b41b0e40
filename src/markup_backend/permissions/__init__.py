from .decisions import Action, Allow, Deny, DenyReason, Inaccessible, Decision
from .principal import Principal
from .core import compile_predicate, authorize_target, decide
from .handlers import raise_for_decision

__all__ = [
    "Action",
    "Allow",
    "Deny",
    "DenyReason",
    "Inaccessible",
    "Decision",
    "Principal",
    "compile_predicate",
    "authorize_target",
    "decide",
    "raise_for_decision",
]
