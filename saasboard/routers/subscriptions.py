"""Subscription routes — current plan, Stripe checkout/portal, Stripe webhook."""

from fastapi import APIRouter, Depends, Header, Request
from sqlalchemy.ext.asyncio import AsyncSession

from saasboard.constants import STRIPE_SIGNATURE_HEADER
from saasboard.db.session import get_db
from saasboard.models.user import User
from saasboard.schemas.subscription import CheckoutRequest, RedirectUrl, SubscriptionOut, SubscriptionResponse
from saasboard.services.auth_service import get_current_user
from saasboard.services.subscription_service import (
    create_checkout_session,
    create_portal_session,
    handle_webhook,
)

router = APIRouter(prefix="/api/subscriptions", tags=["subscriptions"])


@router.get("", response_model=SubscriptionResponse)
async def get_subscription(user: User = Depends(get_current_user)):
    subscription = SubscriptionOut.model_validate(user.subscription) if user.subscription else None
    return SubscriptionResponse(subscription=subscription)


@router.post("/checkout", response_model=RedirectUrl)
async def checkout(
    data: CheckoutRequest,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    url = await create_checkout_session(db, user.id, data.price_id)
    return RedirectUrl(url=url)


@router.post("/portal", response_model=RedirectUrl)
async def portal(user: User = Depends(get_current_user)):
    url = await create_portal_session(user)
    return RedirectUrl(url=url)


@router.post("/webhook")
async def stripe_webhook(
    request: Request,
    stripe_signature: str | None = Header(default=None, alias=STRIPE_SIGNATURE_HEADER),
    db: AsyncSession = Depends(get_db),
):
    payload = await request.body()
    await handle_webhook(db, payload, stripe_signature)
    return {"received": True}
