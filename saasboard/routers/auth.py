"""Auth routes — register, login, logout, current user, token refresh."""

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from saasboard.db.session import get_db
from saasboard.models.user import User
from saasboard.schemas.auth import AuthResponse, LoginRequest, MeResponse, RegisterRequest
from saasboard.schemas.user import UserOut
from saasboard.services.auth_service import (
    clear_session_cookie,
    create_session_token,
    get_current_user,
    set_session_cookie,
)
from saasboard.services.user_service import authenticate, register

router = APIRouter(prefix="/api/auth", tags=["auth"])


@router.post("/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
async def register_user(
    data: RegisterRequest,
    response: Response,
    db: AsyncSession = Depends(get_db),
):
    user = await register(db, data.email, data.password, data.name)
    set_session_cookie(response, create_session_token(user))
    return AuthResponse(message="User registered successfully", user=UserOut.model_validate(user))


@router.post("/login", response_model=AuthResponse)
async def login(
    data: LoginRequest,
    response: Response,
    db: AsyncSession = Depends(get_db),
):
    user = await authenticate(db, data.email, data.password)
    set_session_cookie(response, create_session_token(user))
    return AuthResponse(message="Login successful", user=UserOut.model_validate(user))


@router.post("/logout")
async def logout(response: Response):
    """Clear the session cookie. The token itself stays valid until it expires."""
    clear_session_cookie(response)
    return {"message": "Logout successful"}


@router.get("/me", response_model=MeResponse)
async def me(user: User = Depends(get_current_user)):
    return MeResponse(user=UserOut.model_validate(user))


@router.post("/refresh", response_model=AuthResponse)
async def refresh(response: Response, user: User = Depends(get_current_user)):
    set_session_cookie(response, create_session_token(user))
    return AuthResponse(message="Token refreshed successfully", user=UserOut.model_validate(user))
