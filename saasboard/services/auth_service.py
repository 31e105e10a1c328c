"""Session cookies and the get_current_user / require_role dependencies."""

import logging
from collections.abc import Callable, Coroutine
from typing import Any

from fastapi import Depends, Request, Response
from sqlalchemy.ext.asyncio import AsyncSession

from saasboard.config import get_settings
from saasboard.constants import COOKIE_NAME, SECONDS_PER_DAY
from saasboard.db.session import get_db
from saasboard.errors import InsufficientPermissions, InvalidOrExpiredToken, Unauthenticated
from saasboard.models.enums import Role
from saasboard.models.user import User
from saasboard.schemas.auth import SessionClaims
from saasboard.security.tokens import issue_token, verify_token
from saasboard.services.user_service import get_user_with_subscription

logger = logging.getLogger(__name__)


def create_session_token(user: User) -> str:
    return issue_token(SessionClaims(user_id=user.id, email=user.email, role=user.role))


def set_session_cookie(response: Response, token: str) -> None:
    """Set the JWT as an HTTP-only cookie on the response."""
    settings = get_settings()
    response.set_cookie(
        key=COOKIE_NAME,
        value=token,
        httponly=True,
        secure=not settings.debug,
        samesite="strict",
        max_age=settings.jwt_expire_days * SECONDS_PER_DAY,
        path="/",
    )


def clear_session_cookie(response: Response) -> None:
    response.delete_cookie(key=COOKIE_NAME, path="/")


def extract_token(request: Request) -> str | None:
    """Cookie first, then ``Authorization: Bearer``."""
    token = request.cookies.get(COOKIE_NAME)
    if token:
        return token
    scheme, _, credentials = request.headers.get("authorization", "").partition(" ")
    if scheme.lower() == "bearer" and credentials.strip():
        return credentials.strip()
    return None


async def get_current_user(
    request: Request,
    db: AsyncSession = Depends(get_db),
) -> User:
    """FastAPI dependency: resolve the session token to a live User.

    Missing token -> 401, bad or expired token -> 403, user gone -> 401.
    Role and plan come from the database row, not from the token claims.
    """
    token = extract_token(request)
    if not token:
        raise Unauthenticated()

    claims = verify_token(token)

    user = await get_user_with_subscription(db, claims.user_id)
    if not user:
        raise Unauthenticated("User not found")

    request.state.user = user
    return user


async def get_optional_user(
    request: Request,
    db: AsyncSession = Depends(get_db),
) -> User | None:
    """Like get_current_user but returns None instead of raising."""
    token = extract_token(request)
    if not token:
        return None
    try:
        claims = verify_token(token)
    except InvalidOrExpiredToken:
        return None
    return await get_user_with_subscription(db, claims.user_id)


def require_role(*roles: Role) -> Callable[..., Coroutine[Any, Any, User]]:
    """Dependency factory: the authenticated user must hold one of ``roles``."""
    allowed = frozenset(roles)

    async def _check_role(user: User = Depends(get_current_user)) -> User:
        if user.role not in allowed:
            logger.info("User %s with role %s denied (needs %s)", user.id, user.role.value,
                        ", ".join(sorted(r.value for r in allowed)))
            raise InsufficientPermissions()
        return user

    return _check_role
