"""User account operations — registration, login, profile, deletion, listing."""

import logging

from sqlalchemy import delete, func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from saasboard.errors import ConflictError, NotFound, Unauthenticated
from saasboard.models.enums import Plan, Role, SubscriptionStatus
from saasboard.models.event import Event
from saasboard.models.subscription import Subscription
from saasboard.models.user import User
from saasboard.schemas.user import ProfileUpdate
from saasboard.security.passwords import dummy_hash, hash_password_async, verify_password_async

logger = logging.getLogger(__name__)


async def get_user_with_subscription(db: AsyncSession, user_id: int) -> User | None:
    result = await db.execute(
        select(User).options(selectinload(User.subscription)).where(User.id == user_id)
    )
    return result.scalar_one_or_none()


async def get_user_by_email(db: AsyncSession, email: str) -> User | None:
    result = await db.execute(
        select(User).options(selectinload(User.subscription)).where(User.email == email)
    )
    return result.scalar_one_or_none()


async def get_user(db: AsyncSession, user_id: int) -> User:
    user = await get_user_with_subscription(db, user_id)
    if not user:
        raise NotFound("User not found")
    return user


async def create_user(
    db: AsyncSession,
    email: str,
    password: str,
    name: str | None = None,
    role: Role = Role.USER,
    plan: Plan = Plan.FREE,
) -> User:
    """Insert a User and its Subscription in one transaction.

    The email pre-check only produces a friendlier error; two concurrent
    registrations can both pass it, and the unique constraint on
    ``users.email`` decides which one wins.
    """
    if await get_user_by_email(db, email):
        raise ConflictError("User already exists with this email")

    password_hash = await hash_password_async(password)
    user = User(email=email, password_hash=password_hash, name=name, role=role)
    user.subscription = Subscription(plan=plan, status=SubscriptionStatus.ACTIVE)
    db.add(user)
    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        logger.info("Concurrent registration lost the race for %s", email)
        raise ConflictError("User already exists with this email")

    return await get_user(db, user.id)


async def register(db: AsyncSession, email: str, password: str, name: str | None = None) -> User:
    """Public sign-up: always a USER on the FREE plan."""
    user = await create_user(db, email, password, name)
    logger.info("Registered user %s", user.id)
    return user


async def authenticate(db: AsyncSession, email: str, password: str) -> User:
    """Return the user for valid credentials.

    Unknown email and wrong password fail identically.
    """
    user = await get_user_by_email(db, email)
    if not user:
        await verify_password_async(password, dummy_hash())
        raise Unauthenticated("Invalid credentials")
    if not await verify_password_async(password, user.password_hash):
        raise Unauthenticated("Invalid credentials")
    return user


async def update_profile(db: AsyncSession, user: User, updates: ProfileUpdate) -> User:
    update_data = updates.model_dump(exclude_unset=True)
    for key, value in update_data.items():
        setattr(user, key, value)

    await db.commit()
    return await get_user(db, user.id)


async def set_role(db: AsyncSession, email: str, role: Role) -> User:
    user = await get_user_by_email(db, email)
    if not user:
        raise NotFound(f"No user with email {email}")
    user.role = role
    await db.commit()
    return user


async def delete_user(db: AsyncSession, user_id: int) -> None:
    """Delete a user together with its subscription and events, atomically."""
    user = await db.get(User, user_id)
    if not user:
        raise NotFound("User not found")

    events_deleted = await db.execute(delete(Event).where(Event.user_id == user_id))
    await db.execute(delete(Subscription).where(Subscription.user_id == user_id))
    await db.execute(delete(User).where(User.id == user_id))
    await db.commit()
    db.expunge_all()
    logger.info("Deleted user %s (%d events)", user_id, events_deleted.rowcount)


async def list_users(db: AsyncSession, page: int, limit: int) -> tuple[list[User], int]:
    """Newest users first."""
    offset = (page - 1) * limit

    total = await db.scalar(select(func.count()).select_from(User)) or 0

    result = await db.execute(
        select(User)
        .options(selectinload(User.subscription))
        .order_by(User.created_at.desc(), User.id.desc())
        .offset(offset)
        .limit(limit)
    )
    return list(result.scalars().all()), total
