"""
Authentication for the markup backend.

Resolves the Authorization header to a user (Identity Resolver) and attaches
the user's profile (Profile Lookup) to build the request Principal.
"""

import base64
import binascii
import datetime
import logging
from typing import Annotated, Optional
from pydantic import BaseModel
from sqlalchemy import or_
from sqlalchemy.orm import Session
from fastapi import Depends, Request
from fastapi.security import HTTPBasicCredentials
from fastapi.security.utils import get_authorization_scheme_param

from markup_backend.api.exceptions import UnauthorizedException
from markup_backend.database import get_db
from markup_backend.interface.profiles import ProfileGet
from markup_backend.interface.tokens import decrypt_api_key, hash_api_token
from markup_backend.model.auth import Profile, User
from markup_backend.permissions.principal import Principal

logger = logging.getLogger(__name__)


class AuthenticationResult:
    """Result of authentication containing the resolved identity"""

    def __init__(self, user_id: str, email: Optional[str], provider: str = "unknown"):
        self.user_id = user_id
        self.email = email
        self.provider = provider


class TokenAuthCredentials(BaseModel):
    """Bearer API token credentials"""
    token: str
    scheme: str = "Bearer"


def _is_expired(user: User) -> bool:
    if user.user_type != 'token':
        return False
    if user.token_expiration is None:
        return True
    expiration = user.token_expiration
    if expiration.tzinfo is None:
        expiration = expiration.replace(tzinfo=datetime.timezone.utc)
    return expiration < datetime.datetime.now(datetime.timezone.utc)


class AuthenticationService:
    """Service for handling different authentication methods"""

    @staticmethod
    def authenticate_basic(username: str, password: str, db: Session) -> AuthenticationResult:
        """Authenticate using basic auth credentials (username or email)"""

        user = (
            db.query(User)
            .filter(or_(User.username == username, User.email == username))
            .filter(User.archived_at.is_(None))
            .first()
        )

        if user is None or user.password is None:
            raise UnauthorizedException("Invalid credentials")

        if _is_expired(user):
            raise UnauthorizedException("Token expired")

        try:
            stored_password = decrypt_api_key(user.password)
        except Exception as e:
            logger.error(f"Stored password for user {user.id} could not be decrypted: {e}")
            raise UnauthorizedException("Invalid credentials")

        if password != stored_password:
            raise UnauthorizedException("Invalid credentials")

        return AuthenticationResult(user.id, user.email, "basic")

    @staticmethod
    def authenticate_token(token: str, db: Session) -> AuthenticationResult:
        """Authenticate using a bearer API token"""

        user = (
            db.query(User)
            .filter(User.auth_token == hash_api_token(token))
            .filter(User.archived_at.is_(None))
            .first()
        )

        if user is None:
            raise UnauthorizedException("Invalid token")

        if _is_expired(user):
            raise UnauthorizedException("Token expired")

        return AuthenticationResult(user.id, user.email, "token")


class PrincipalBuilder:
    """Builder for creating Principal objects with their profile attached"""

    @staticmethod
    def lookup_profile(user_id: str, db: Session) -> Optional[ProfileGet]:
        profile = db.query(Profile).filter(Profile.id == user_id).first()

        if profile is None:
            logger.info(f"No profile found for user {user_id}")
            return None

        return ProfileGet.model_validate(profile, from_attributes=True)

    @staticmethod
    def build(auth_result: AuthenticationResult, db: Session) -> Principal:
        """Build a Principal from authentication result.

        A missing profile is not an error here; the permission handlers deny
        every operation for a principal without one.
        """
        return Principal(
            user_id=auth_result.user_id,
            email=auth_result.email,
            profile=PrincipalBuilder.lookup_profile(auth_result.user_id, db),
        )


def parse_authorization_header(request: Request) -> HTTPBasicCredentials | TokenAuthCredentials:
    """Parse authorization header to determine auth type"""

    authorization = request.headers.get("Authorization")
    if not authorization:
        raise UnauthorizedException("No authorization provided")

    scheme, param = get_authorization_scheme_param(authorization)

    if not param:
        raise UnauthorizedException("Invalid authorization format")

    if scheme.lower() == "bearer":
        return TokenAuthCredentials(token=param, scheme="Bearer")

    elif scheme.lower() == "basic":
        try:
            data = base64.b64decode(param).decode("utf-8")
        except (ValueError, UnicodeDecodeError, binascii.Error) as e:
            logger.error(f"Failed to decode Basic auth: {e}")
            raise UnauthorizedException("Invalid Basic auth encoding")

        username, separator, password = data.partition(":")
        if not separator:
            raise UnauthorizedException("Invalid Basic auth format")
        return HTTPBasicCredentials(username=username, password=password)

    raise UnauthorizedException(f"Unsupported auth scheme: {scheme}")


def get_current_principal(
    credentials: Annotated[
        HTTPBasicCredentials | TokenAuthCredentials,
        Depends(parse_authorization_header)
    ],
    db: Session = Depends(get_db),
) -> Principal:
    """Main dependency for getting the current authenticated principal."""

    if isinstance(credentials, HTTPBasicCredentials):
        auth_result = AuthenticationService.authenticate_basic(
            credentials.username, credentials.password, db
        )

    elif isinstance(credentials, TokenAuthCredentials):
        auth_result = AuthenticationService.authenticate_token(credentials.token, db)

    else:
        raise UnauthorizedException("Unknown authentication type")

    return PrincipalBuilder.build(auth_result, db)


get_current_permissions = get_current_principal
