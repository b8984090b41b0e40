from .base import EntityInterface, ListQuery
from .markup_documents import MarkupDocumentInterface
from .profiles import ProfileGet, UserRole, ProfileStatus

__all__ = [
    "EntityInterface",
    "ListQuery",
    "MarkupDocumentInterface",
    "ProfileGet",
    "UserRole",
    "ProfileStatus",
]
