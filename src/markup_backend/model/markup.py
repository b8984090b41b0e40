from uuid import uuid4
from sqlalchemy import Boolean, Column, DateTime, Enum, ForeignKey, Index, Integer, String, func, text
from sqlalchemy.orm import relationship

from .base import Base, JSONType

DOCUMENT_LOCATIONS = ('personal', 'shared')


class MarkupDocument(Base):
    __tablename__ = 'markup_document'
    __table_args__ = (
        Index('markup_document_visibility_idx', 'is_deleted', 'location', 'site_id'),
        Index('markup_document_created_by_idx', 'created_by'),
        Index('markup_document_created_at_idx', 'created_at'),
    )

    id = Column(String(36), primary_key=True, default=lambda: str(uuid4()))
    created_at = Column(DateTime(True), nullable=False, server_default=func.now())
    updated_at = Column(DateTime(True), nullable=False, server_default=func.now())
    title = Column(String(255), nullable=False)
    description = Column(String(4096))
    original_blueprint_url = Column(String(2048), nullable=False)
    original_blueprint_filename = Column(String(1024), nullable=False)
    markup_data = Column(JSONType, nullable=False, default=list)
    preview_image_url = Column(String(2048))
    location = Column(Enum(*DOCUMENT_LOCATIONS, name='markup_document_location'), nullable=False, server_default='personal')
    created_by = Column(ForeignKey('profile.id', ondelete='RESTRICT'), nullable=False)
    site_id = Column(ForeignKey('site.id', ondelete='SET NULL'))
    is_deleted = Column(Boolean, nullable=False, default=False, server_default=text("false"))
    file_size = Column(Integer, nullable=False, default=0, server_default=text("0"))
    markup_count = Column(Integer, nullable=False, default=0, server_default=text("0"))

    creator = relationship('Profile', foreign_keys=[created_by], lazy='select')
    site = relationship('Site', foreign_keys=[site_id], lazy='select')

    @property
    def created_by_name(self) -> str:
        if self.creator is not None and self.creator.full_name:
            return self.creator.full_name
        return "Unknown"
