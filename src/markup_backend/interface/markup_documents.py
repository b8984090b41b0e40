from enum import Enum
from typing import Any, List, Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator
from markup_backend.interface.base import BaseEntityGet, BaseEntityList, EntityInterface, ListQuery
from markup_backend.model.markup import MarkupDocument

class DocumentLocation(str, Enum):
    PERSONAL = "personal"
    SHARED = "shared"

class MarkupDocumentCreate(BaseModel):
    # Fields are untyped here. Required-field, type and structure checks happen
    # in MarkupLifecycleManager so that every problem is reported in a single
    # error. Unknown keys such as created_by or site_id are dropped.
    model_config = ConfigDict(extra="ignore")

    title: Optional[Any] = Field(None, description="Document title")
    description: Optional[Any] = Field(None, description="Free text description")
    original_blueprint_url: Optional[Any] = Field(None, description="URL of the uploaded blueprint")
    original_blueprint_filename: Optional[Any] = Field(None, description="Original file name of the blueprint")
    markup_data: Optional[Any] = Field(None, description="Ordered list of annotation objects")
    location: Optional[Any] = Field(None, description="Sharing scope: personal or shared")
    preview_image_url: Optional[Any] = Field(None, description="Rendered preview image URL")
    file_size: Optional[Any] = Field(None, description="Blueprint file size in bytes")

class MarkupDocumentUpdate(BaseModel):
    model_config = ConfigDict(extra="ignore")

    title: Optional[Any] = Field(None, description="Document title")
    description: Optional[Any] = Field(None, description="Free text description")
    markup_data: Optional[Any] = Field(None, description="Ordered list of annotation objects")
    preview_image_url: Optional[Any] = Field(None, description="Rendered preview image URL")
    file_size: Optional[Any] = Field(None, description="Blueprint file size in bytes")

class MarkupDocumentList(BaseEntityList):
    id: str = Field(description="Document identifier")
    title: str
    description: Optional[str] = None
    original_blueprint_url: str
    original_blueprint_filename: str
    preview_image_url: Optional[str] = None
    location: DocumentLocation
    created_by: str
    created_by_name: str = "Unknown"
    site_id: Optional[str] = None
    file_size: int = 0
    markup_count: int = 0

    model_config = ConfigDict(from_attributes=True)

class MarkupDocumentGet(BaseEntityGet):
    id: str = Field(description="Document identifier")
    title: str
    description: Optional[str] = None
    original_blueprint_url: str
    original_blueprint_filename: str
    markup_data: List[Any] = Field(default_factory=list)
    preview_image_url: Optional[str] = None
    location: DocumentLocation
    created_by_name: str = "Unknown"
    site_id: Optional[str] = None
    is_deleted: bool = False
    file_size: int = 0
    markup_count: int = 0

    model_config = ConfigDict(from_attributes=True)

class MarkupDocumentQuery(ListQuery):
    location: Optional[DocumentLocation] = Field(None, description="Restrict to one sharing scope")
    site: Optional[Any] = Field(None, description="Restrict to a site id; 'all' disables the filter")
    search: Optional[Any] = Field(None, description="Case-insensitive substring match on the title")

    @field_validator('site', 'search')
    @classmethod
    def blank_to_none(cls, v):
        if v is not None:
            v = v.strip()
            if not v:
                return None
        return v

    @property
    def site_id(self) -> Optional[str]:
        if self.site is None or self.site == "all":
            return None
        return self.site

class MarkupDocumentInterface(EntityInterface):
    create = MarkupDocumentCreate
    get = MarkupDocumentGet
    list = MarkupDocumentList
    update = MarkupDocumentUpdate
    query = MarkupDocumentQuery
    endpoint = "markup-documents"
    model = MarkupDocument
