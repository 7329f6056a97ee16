from enum import Enum
from pydantic import BaseModel, Field
from typing import Optional


class UserRole(str, Enum):
    CANDIDATE = "CANDIDATE"
    RECRUITER = "RECRUITER"


class SyncUserRequest(BaseModel):
    # id and email are checked by the service so that a missing value is a 400, not a 422
    id: Optional[str] = None
    email: Optional[str] = None
    name: Optional[str] = None
    role: Optional[UserRole] = None


class SyncUserResponse(BaseModel):
    message: str
    user_id: str = Field(serialization_alias="userId")

