"""SQLAlchemy models for SaaS Board."""

from .base import Base
from .enums import Plan, Role, SubscriptionStatus
from .user import User
from .subscription import Subscription
from .event import Event

__all__ = [
    "Base",
    "Plan",
    "Role",
    "SubscriptionStatus",
    "User",
    "Subscription",
    "Event",
]
