"""Subscription and billing Pydantic schemas."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from saasboard.models.enums import Plan, SubscriptionStatus


class SubscriptionOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    plan: Plan
    status: SubscriptionStatus
    stripe_customer_id: str | None = None
    stripe_subscription_id: str | None = None
    stripe_price_id: str | None = None
    stripe_current_period_end: datetime | None = None


class SubscriptionResponse(BaseModel):
    subscription: SubscriptionOut | None = None


class CheckoutRequest(BaseModel):
    price_id: str = Field(min_length=1, max_length=64)


class RedirectUrl(BaseModel):
    url: str
