from enum import Enum
from typing import Optional
from pydantic import BaseModel, ConfigDict, Field

class UserRole(str, Enum):
    WORKER = "worker"
    SITE_MANAGER = "site_manager"
    CUSTOMER_MANAGER = "customer_manager"
    ADMIN = "admin"
    SYSTEM_ADMIN = "system_admin"

class ProfileStatus(str, Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"
    SUSPENDED = "suspended"

ELEVATED_ROLES = frozenset({UserRole.ADMIN, UserRole.SYSTEM_ADMIN})

class ProfileGet(BaseModel):
    id: str = Field(description="Profile identifier, equal to the user ID")
    email: Optional[str] = Field(None, description="Contact email")
    full_name: Optional[str] = Field(None, description="Display name")
    role: UserRole = Field(description="Role used for document access decisions")
    status: ProfileStatus = Field(ProfileStatus.ACTIVE, description="Account status")
    organization_id: Optional[str] = Field(None, description="Organization the profile belongs to")
    site_id: Optional[str] = Field(None, description="Site the profile is assigned to")

    model_config = ConfigDict(from_attributes=True)

    @property
    def is_active(self) -> bool:
        return self.status == ProfileStatus.ACTIVE

    @property
    def is_elevated(self) -> bool:
        return self.role in ELEVATED_ROLES

class CurrentUserGet(BaseModel):
    user_id: str
    email: Optional[str] = None
    profile: Optional[ProfileGet] = None
