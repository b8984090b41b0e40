from typing import Optional
from pydantic import BaseModel, model_validator
from markup_backend.api.exceptions import UnauthorizedException
from markup_backend.interface.profiles import ProfileGet, UserRole


class Principal(BaseModel):
    """Authenticated identity of a request together with its profile snapshot.

    The profile is resolved once per request by the PrincipalBuilder and passed
    explicitly to every permission check; nothing is read from module state.
    """

    user_id: Optional[str] = None
    email: Optional[str] = None
    profile: Optional[ProfileGet] = None

    is_admin: bool = False

    @model_validator(mode='after')
    def set_is_admin_from_profile(self):
        """Automatically set admin flag based on the profile role"""
        self.is_admin = self.profile is not None and self.profile.is_elevated
        return self

    def get_user_id_or_throw(self) -> str:
        if self.user_id is None:
            raise UnauthorizedException()
        return self.user_id

    @property
    def role(self) -> Optional[UserRole]:
        return self.profile.role if self.profile is not None else None

    @property
    def is_active(self) -> bool:
        return self.profile is not None and self.profile.is_active

    @property
    def site_id(self) -> Optional[str]:
        return self.profile.site_id if self.profile is not None else None

    @property
    def organization_id(self) -> Optional[str]:
        return self.profile.organization_id if self.profile is not None else None
