"""Auth-related Pydantic schemas."""

from pydantic import BaseModel, EmailStr, Field

from saasboard.models.enums import Role
from saasboard.schemas.user import UserOut


class SessionClaims(BaseModel):
    user_id: int
    email: str
    role: Role


class RegisterRequest(BaseModel):
    email: EmailStr
    password: str = Field(min_length=6, max_length=128)
    name: str | None = Field(None, max_length=128)


class LoginRequest(BaseModel):
    email: EmailStr
    password: str = Field(min_length=1, max_length=128)


class AuthResponse(BaseModel):
    message: str
    user: UserOut


class MeResponse(BaseModel):
    user: UserOut
