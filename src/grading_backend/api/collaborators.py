"""
Collaborator routes for tasks and groups.

``CollaboratorRouter(kind)`` builds the four routes under
``/{tasks|groups}/{id}/collaborators``; every route authenticates, delegates
to ``grading_backend.permissions.collaborators`` and commits on success.
"""

from typing import Annotated, List
from fastapi import APIRouter, Depends, FastAPI
from sqlalchemy.orm import Session

from grading_backend.api.auth import get_current_principal
from grading_backend.database import get_db
from grading_backend.interface.collaborators import CollaboratorCreate, CollaboratorGet, CollaboratorUpdate
from grading_backend.model.types import ResourceKind
from grading_backend.permissions import collaborators
from grading_backend.permissions.principal import Principal


class CollaboratorRouter:

    def __init__(self, kind: ResourceKind):
        self.kind = ResourceKind(kind)
        self.prefix = f"/{self.kind.value}s"
        self.router = APIRouter()

    def list(self):
        def route(
            resource_id: int,
            principal: Annotated[Principal, Depends(get_current_principal)],
            db: Session = Depends(get_db),
        ) -> List[CollaboratorGet]:
            return collaborators.list_collaborators(db, principal, self.kind, resource_id)
        return route

    def create(self):
        def route(
            resource_id: int,
            payload: CollaboratorCreate,
            principal: Annotated[Principal, Depends(get_current_principal)],
            db: Session = Depends(get_db),
        ) -> CollaboratorGet:
            collaborator = collaborators.add_collaborator(
                db, principal, self.kind, resource_id, payload.user_id, payload.permission
            )
            db.commit()
            return collaborator
        return route

    def update(self):
        def route(
            resource_id: int,
            user_id: int,
            payload: CollaboratorUpdate,
            principal: Annotated[Principal, Depends(get_current_principal)],
            db: Session = Depends(get_db),
        ) -> CollaboratorGet:
            collaborator = collaborators.update_collaborator(
                db, principal, self.kind, resource_id, user_id, payload.permission
            )
            db.commit()
            return collaborator
        return route

    def delete(self):
        def route(
            resource_id: int,
            user_id: int,
            principal: Annotated[Principal, Depends(get_current_principal)],
            db: Session = Depends(get_db),
        ):
            collaborators.remove_collaborator(db, principal, self.kind, resource_id, user_id)
            db.commit()
        return route

    def register_routes(self, app: FastAPI):
        tags = [f"{self.kind.value}s"]
        path = "/{resource_id}/collaborators"

        self.router.add_api_route(path, endpoint=self.list(), methods=["GET"], response_model=List[CollaboratorGet])
        self.router.add_api_route(path, endpoint=self.create(), methods=["POST"], response_model=CollaboratorGet, status_code=201)
        self.router.add_api_route(f"{path}/{{user_id}}", endpoint=self.update(), methods=["PUT"], response_model=CollaboratorGet)
        self.router.add_api_route(f"{path}/{{user_id}}", endpoint=self.delete(), methods=["DELETE"], status_code=204)

        app.include_router(self.router, prefix=self.prefix, tags=tags)
        return self
