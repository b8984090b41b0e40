from .base import Base, metadata
from .auth import User, Profile
from .organization import Organization, Site
from .markup import MarkupDocument

# Import all models to ensure relationships are properly set up
from . import auth, organization, markup

__all__ = [
    'Base',
    'metadata',
    # Auth models
    'User',
    'Profile',
    # Organization
    'Organization',
    'Site',
    # Documents
    'MarkupDocument',
]
