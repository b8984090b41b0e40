from uuid import uuid4
from sqlalchemy import Column, DateTime, Enum, ForeignKey, String, func
from sqlalchemy.orm import relationship

from .base import Base


class Organization(Base):
    __tablename__ = 'organization'

    id = Column(String(255), primary_key=True, default=lambda: str(uuid4()))
    created_at = Column(DateTime(True), nullable=False, server_default=func.now())
    updated_at = Column(DateTime(True), nullable=False, server_default=func.now())
    name = Column(String(255), nullable=False)
    description = Column(String(4096))

    sites = relationship('Site', back_populates='organization', uselist=True, lazy='select')


class Site(Base):
    __tablename__ = 'site'

    id = Column(String(255), primary_key=True, default=lambda: str(uuid4()))
    created_at = Column(DateTime(True), nullable=False, server_default=func.now())
    updated_at = Column(DateTime(True), nullable=False, server_default=func.now())
    organization_id = Column(ForeignKey('organization.id', ondelete='RESTRICT'), nullable=False, index=True)
    name = Column(String(255), nullable=False)
    address = Column(String(1024))
    status = Column(Enum('active', 'inactive', 'completed', name='site_status'), nullable=False, server_default='active')

    organization = relationship('Organization', back_populates='sites')
