from datetime import datetime
from pydantic import BaseModel, ConfigDict, Field

from grading_backend.model.types import UserRole


class PrincipalGet(BaseModel):
    user_id: int = Field(description="User unique identifier")
    role: UserRole = Field(description="Global role")
    name: str = Field("", description="User's given name")
    surname: str = Field("", description="User's family name")
    email: str = Field("", description="User's email address")
    username: str = Field("", description="Unique username")

    model_config = ConfigDict(from_attributes=True, use_enum_values=True)


class SessionGet(BaseModel):
    id: int = Field(description="Session identifier")
    user_id: int = Field(description="Owning user")
    created_at: datetime = Field(description="Creation timestamp")
    expires_at: datetime = Field(description="Expiry timestamp")
    valid: bool = Field(description="Validity flag")

    model_config = ConfigDict(from_attributes=True)


class ValidateSessionResponse(BaseModel):
    principal: PrincipalGet
    session: SessionGet
