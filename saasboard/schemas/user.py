"""User-related Pydantic schemas."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from saasboard.models.enums import Role
from saasboard.schemas.subscription import SubscriptionOut


class UserOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    email: str
    name: str | None = None
    role: Role
    created_at: datetime
    subscription: SubscriptionOut | None = None


class ProfileUpdate(BaseModel):
    name: str | None = Field(None, max_length=128)


class ProfileResponse(BaseModel):
    message: str
    user: UserOut


class Pagination(BaseModel):
    page: int
    limit: int
    total: int
    pages: int


class UserList(BaseModel):
    users: list[UserOut]
    pagination: Pagination
