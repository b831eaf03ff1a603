from datetime import datetime
from pydantic import BaseModel, ConfigDict, Field
from typing import Optional

from grading_backend.model.types import Permission


class CollaboratorCreate(BaseModel):
    user_id: int = Field(description="User to grant access to")
    permission: Permission = Field(description="Permission level: view, edit or manage")

    model_config = ConfigDict(use_enum_values=True)


class CollaboratorUpdate(BaseModel):
    permission: Permission = Field(description="New permission level")

    model_config = ConfigDict(use_enum_values=True)


class CollaboratorGet(BaseModel):
    user_id: int = Field(description="Collaborator user identifier")
    username: Optional[str] = Field(None, description="Collaborator username")
    name: Optional[str] = Field(None, description="Collaborator given name")
    surname: Optional[str] = Field(None, description="Collaborator family name")
    permission: Permission = Field(description="Effective permission level")
    is_creator: bool = Field(False, description="Whether the user created the resource")
    created_at: Optional[datetime] = Field(None, description="When the grant was added")

    model_config = ConfigDict(from_attributes=True, use_enum_values=True)
