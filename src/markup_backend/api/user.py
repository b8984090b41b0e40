from typing import Annotated
from fastapi import Depends
from fastapi import APIRouter
from markup_backend.api.exceptions import NotFoundException
from markup_backend.interface.base import ResponseEnvelope
from markup_backend.interface.profiles import CurrentUserGet
from markup_backend.permissions.auth import get_current_permissions
from markup_backend.permissions.principal import Principal

user_router = APIRouter()

@user_router.get("/me", response_model=ResponseEnvelope[CurrentUserGet])
def get_current_user(permissions: Annotated[Principal, Depends(get_current_permissions)]):
    """Get the current authenticated user together with the profile used for access decisions"""

    if permissions.profile is None:
        raise NotFoundException(detail="Profile not found")

    return ResponseEnvelope(data=CurrentUserGet(
        user_id=permissions.get_user_id_or_throw(),
        email=permissions.email,
        profile=permissions.profile,
    ))
