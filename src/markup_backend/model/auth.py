from uuid import uuid4
from sqlalchemy import CheckConstraint, Column, DateTime, Enum, ForeignKey, String, func
from sqlalchemy.orm import relationship

from .base import Base

PROFILE_ROLES = ('worker', 'site_manager', 'customer_manager', 'admin', 'system_admin')
PROFILE_STATUSES = ('active', 'inactive', 'suspended')


class User(Base):
    __tablename__ = 'user'
    __table_args__ = (
        CheckConstraint(
            "(user_type <> 'token') OR (token_expiration IS NOT NULL)",
            name='ck_user_token_expiration'
        ),
    )

    id = Column(String(255), primary_key=True, default=lambda: str(uuid4()))
    created_at = Column(DateTime(True), nullable=False, server_default=func.now())
    updated_at = Column(DateTime(True), nullable=False, server_default=func.now())
    archived_at = Column(DateTime(True))
    email = Column(String(320), unique=True, nullable=False)
    username = Column(String(255), unique=True)
    user_type = Column(Enum('user', 'token', name='user_type'), nullable=False, server_default='user')
    token_expiration = Column(DateTime(True))
    password = Column(String(255))
    # sha256 hex digest of a bearer API token
    auth_token = Column(String(64), unique=True)

    profile = relationship("Profile", back_populates="user", uselist=False, lazy="select")


class Profile(Base):
    __tablename__ = 'profile'

    id = Column(ForeignKey('user.id', ondelete='CASCADE'), primary_key=True)
    created_at = Column(DateTime(True), nullable=False, server_default=func.now())
    updated_at = Column(DateTime(True), nullable=False, server_default=func.now())
    email = Column(String(320))
    full_name = Column(String(255))
    role = Column(Enum(*PROFILE_ROLES, name='profile_role'), nullable=False, server_default='worker')
    status = Column(Enum(*PROFILE_STATUSES, name='profile_status'), nullable=False, server_default='active')
    organization_id = Column(ForeignKey('organization.id', ondelete='SET NULL'), index=True)
    site_id = Column(ForeignKey('site.id', ondelete='SET NULL'), index=True)

    user = relationship("User", back_populates="profile")
    organization = relationship("Organization", foreign_keys=[organization_id])
    site = relationship("Site", foreign_keys=[site_id])
