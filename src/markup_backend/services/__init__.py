"""
Service layer for document business rules.
"""

from .markup_lifecycle import DocumentValidationError, MarkupLifecycleManager

__all__ = ["DocumentValidationError", "MarkupLifecycleManager"]
