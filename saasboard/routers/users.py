"""User routes — own profile, account deletion, admin listing."""

import math

from fastapi import APIRouter, Depends, Query, Response
from sqlalchemy.ext.asyncio import AsyncSession

from saasboard.constants import MAX_USERS_PER_PAGE, USERS_PER_PAGE
from saasboard.db.session import get_db
from saasboard.models.enums import Role
from saasboard.models.user import User
from saasboard.schemas.user import Pagination, ProfileResponse, ProfileUpdate, UserList, UserOut
from saasboard.services.auth_service import clear_session_cookie, get_current_user, require_role
from saasboard.services.user_service import delete_user, list_users, update_profile

router = APIRouter(prefix="/api/users", tags=["users"])


@router.get("/profile", response_model=UserOut)
async def get_profile(user: User = Depends(get_current_user)):
    return user


@router.put("/profile", response_model=ProfileResponse)
async def put_profile(
    updates: ProfileUpdate,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    user = await update_profile(db, user, updates)
    return ProfileResponse(message="Profile updated successfully", user=UserOut.model_validate(user))


@router.delete("/account")
async def delete_account(
    response: Response,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    await delete_user(db, user.id)
    clear_session_cookie(response)
    return {"message": "Account deleted successfully"}


@router.get("", response_model=UserList)
async def get_all_users(
    page: int = Query(1, ge=1),
    limit: int = Query(USERS_PER_PAGE, ge=1, le=MAX_USERS_PER_PAGE),
    _admin: User = Depends(require_role(Role.ADMIN)),
    db: AsyncSession = Depends(get_db),
):
    users, total = await list_users(db, page, limit)
    return UserList(
        users=[UserOut.model_validate(u) for u in users],
        pagination=Pagination(page=page, limit=limit, total=total, pages=math.ceil(total / limit)),
    )
