from fastapi import APIRouter, Depends, FastAPI, Query, Response, status
from sqlalchemy.orm import Session
from typing import Annotated, Optional
from markup_backend.api.crud import create_db, delete_db, get_id_db, get_lifecycle_manager, list_db, update_db
from markup_backend.database import get_db
from markup_backend.interface.base import EntityInterface, ListResponseEnvelope, Pagination, ResponseEnvelope
from markup_backend.permissions.auth import get_current_permissions
from markup_backend.permissions.principal import Principal
from markup_backend.services.markup_lifecycle import MarkupLifecycleManager


class CrudRouter:

    id_type = "id"

    path: str
    dto: EntityInterface

    def __init__(self, dto, endpoint: Optional[str] = None):
        self.dto = dto
        if endpoint == None:
            self.path = self.dto.endpoint
        else:
            self.path = endpoint

        self.router = APIRouter()

    def create(self):
        async def route(
            permissions: Annotated[Principal, Depends(get_current_permissions)],
            entity: self.dto.create,
            lifecycle: Annotated[MarkupLifecycleManager, Depends(get_lifecycle_manager)],
            db: Session = Depends(get_db),
        ) -> ResponseEnvelope[self.dto.get]:
            entity_created = await create_db(permissions, db, entity, self.dto, lifecycle)
            return ResponseEnvelope(data=entity_created)
        return route

    def get(self):
        async def route(
            permissions: Annotated[Principal, Depends(get_current_permissions)],
            id: str,
            db: Session = Depends(get_db),
        ) -> ResponseEnvelope[self.dto.get]:
            return ResponseEnvelope(data=await get_id_db(permissions, db, id, self.dto))
        return route

    def list(self):
        async def route(
            permissions: Annotated[Principal, Depends(get_current_permissions)],
            response: Response,
            params: Annotated[self.dto.query, Query()],
            db: Session = Depends(get_db),
        ) -> ListResponseEnvelope[self.dto.list]:
            list_result, total = await list_db(permissions, db, params, self.dto)
            response.headers["X-Total-Count"] = str(total)

            return ListResponseEnvelope(data=list_result, pagination=Pagination.from_query(params, total))
        return route

    def update(self):
        def route(
            permissions: Annotated[Principal, Depends(get_current_permissions)],
            id: str,
            entity: self.dto.update,
            lifecycle: Annotated[MarkupLifecycleManager, Depends(get_lifecycle_manager)],
            db: Session = Depends(get_db),
        ) -> ResponseEnvelope[self.dto.get]:
            return ResponseEnvelope(data=update_db(permissions, db, id, entity, self.dto, lifecycle))
        return route

    def delete(self):
        def route(
            permissions: Annotated[Principal, Depends(get_current_permissions)],
            id: str,
            lifecycle: Annotated[MarkupLifecycleManager, Depends(get_lifecycle_manager)],
            db: Session = Depends(get_db),
        ) -> ResponseEnvelope[self.dto.get]:
            return ResponseEnvelope(data=delete_db(permissions, db, id, self.dto, lifecycle))
        return route

    def register_routes(self, app: FastAPI):

        scope_name = self.path.replace("/","").replace("-"," ")

        self.router.add_api_route("", self.create(), methods=["POST"],
                    status_code=status.HTTP_201_CREATED, name=f"{self.create.__name__} {scope_name.capitalize()}")
        self.router.add_api_route(f"/{{{CrudRouter.id_type}}}", self.get(), methods=["GET"],
                    status_code=status.HTTP_200_OK, name=f"{self.get.__name__} {scope_name.capitalize()}")
        self.router.add_api_route("", self.list(), methods=["GET"],
                    status_code=status.HTTP_200_OK, name=f"{self.list.__name__} {scope_name.capitalize()}")
        self.router.add_api_route(f"/{{{CrudRouter.id_type}}}", self.update(), methods=["PATCH"],
                    status_code=status.HTTP_200_OK, name=f"{self.update.__name__} {scope_name.capitalize()}")
        self.router.add_api_route(f"/{{{CrudRouter.id_type}}}", self.delete(), methods=["DELETE"],
                    status_code=status.HTTP_200_OK, name=f"{self.delete.__name__} {scope_name.capitalize()}")

        app.include_router(
            self.router,
            prefix=f"/{self.path}",
            tags=[scope_name]
        )

        return self
