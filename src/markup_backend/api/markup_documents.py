from markup_backend.api.api_builder import CrudRouter
from markup_backend.interface.markup_documents import MarkupDocumentInterface

markup_document_router = CrudRouter(MarkupDocumentInterface)
