"""Stripe billing — checkout, portal, and webhook-driven subscription sync.

Webhook handlers overwrite local fields from the payload they receive
(last-applied wins). Stripe does not guarantee delivery order, and nothing
here keeps a local sequence number.
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from datetime import datetime, UTC
from typing import Any

import stripe
from sqlalchemy import update
from sqlalchemy.ext.asyncio import AsyncSession

from saasboard.config import get_settings
from saasboard.constants import CHECKOUT_CANCEL_PATH, CHECKOUT_SUCCESS_PATH, PORTAL_RETURN_PATH
from saasboard.errors import NotFound, SignatureInvalid, UpstreamError, ValidationError
from saasboard.models.enums import Plan, SubscriptionStatus
from saasboard.models.subscription import Subscription
from saasboard.models.user import User
from saasboard.services.user_service import get_user_with_subscription
from saasboard.services.webhook_events import WebhookEvent

logger = logging.getLogger(__name__)


def init_stripe() -> None:
    """Set the Stripe API key from settings. Call once at startup."""
    settings = get_settings()
    stripe.api_key = settings.stripe_secret_key


def _get(obj: Any, key: str, default: Any = None) -> Any:
    """Key lookup that works for both dicts and StripeObjects."""
    try:
        value = obj[key]
    except (KeyError, TypeError):
        return default
    return default if value is None else value


def _object_id(value: Any) -> str | None:
    """Stripe references are either an id string or an expanded object."""
    if value is None or isinstance(value, str):
        return value
    return _get(value, "id")


def _get_period_end(stripe_sub: Any) -> datetime | None:
    """Extract current_period_end, handling Stripe API version differences.

    Newer API versions (2024-06-20+) moved the field to items.data[0].
    """
    period_end = _get(stripe_sub, "current_period_end")
    if period_end is None:
        try:
            period_end = stripe_sub["items"]["data"][0]["current_period_end"]
        except (KeyError, TypeError, IndexError):
            period_end = None
    return datetime.fromtimestamp(period_end, tz=UTC) if period_end else None


def _get_price_id(stripe_sub: Any) -> str | None:
    try:
        return stripe_sub["items"]["data"][0]["price"]["id"]
    except (KeyError, TypeError, IndexError):
        return None


def _get_invoice_subscription_id(invoice: Any) -> str | None:
    """Invoice -> subscription id; newer API versions nest it under parent."""
    subscription_id = _object_id(_get(invoice, "subscription"))
    if subscription_id:
        return subscription_id
    details = _get(_get(invoice, "parent"), "subscription_details")
    return _object_id(_get(details, "subscription"))


def plan_for_price(price_id: str | None) -> Plan:
    """Static price -> plan lookup. Unmapped prices fall back to FREE."""
    if not price_id:
        return Plan.FREE
    return get_settings().price_plan_map().get(price_id, Plan.FREE)


async def _retrieve_subscription(subscription_id: str) -> Any:
    try:
        return await asyncio.to_thread(stripe.Subscription.retrieve, subscription_id)
    except stripe.StripeError as e:
        logger.error("Failed to retrieve Stripe subscription %s: %s", subscription_id, e)
        raise UpstreamError(f"Failed to retrieve subscription: {e}")


async def _update_by_customer(db: AsyncSession, customer_id: str | None, values: dict, event: str) -> int:
    """Apply ``values`` to every subscription row for a Stripe customer."""
    if not customer_id:
        logger.warning("%s without a customer id, ignoring", event)
        return 0

    result = await db.execute(
        update(Subscription).where(Subscription.stripe_customer_id == customer_id).values(**values)
    )
    await db.commit()
    if result.rowcount == 0:
        logger.warning("%s: no subscription for customer %s", event, customer_id)
    else:
        logger.info("%s: updated %d subscription(s) for customer %s", event, result.rowcount, customer_id)
    return result.rowcount


# --- Checkout & portal ---


async def create_checkout_session(db: AsyncSession, user_id: int, price_id: str) -> str:
    """Create a Stripe Checkout session and return its URL.

    The Stripe customer is created lazily and persisted before the session
    call, so a failed checkout keeps the customer id for the next attempt.
    """
    settings = get_settings()

    user = await get_user_with_subscription(db, user_id)
    if not user:
        raise NotFound("User not found")
    subscription = user.subscription
    if not subscription:
        raise NotFound("Subscription not found")

    try:
        if not subscription.stripe_customer_id:
            customer = await asyncio.to_thread(
                stripe.Customer.create,
                email=user.email,
                name=user.name or None,
                metadata={"user_id": str(user.id)},
            )
            subscription.stripe_customer_id = customer.id
            await db.commit()
            logger.info("Created Stripe customer %s for user %s", customer.id, user.id)

        session = await asyncio.to_thread(
            stripe.checkout.Session.create,
            customer=subscription.stripe_customer_id,
            mode="subscription",
            line_items=[{"price": price_id, "quantity": 1}],
            success_url=f"{settings.app_url}{CHECKOUT_SUCCESS_PATH}",
            cancel_url=f"{settings.app_url}{CHECKOUT_CANCEL_PATH}",
            client_reference_id=str(user.id),
            metadata={"user_id": str(user.id)},
        )
    except stripe.StripeError as e:
        logger.error("Stripe checkout failed for user %s: %s", user.id, e)
        raise UpstreamError(f"Failed to create checkout session: {e}")

    return session.url


async def create_portal_session(user: User) -> str:
    """Create a Stripe Customer Portal session and return the URL."""
    settings = get_settings()

    if not user.subscription or not user.subscription.stripe_customer_id:
        raise ValidationError("No subscription found")

    try:
        session = await asyncio.to_thread(
            stripe.billing_portal.Session.create,
            customer=user.subscription.stripe_customer_id,
            return_url=f"{settings.app_url}{PORTAL_RETURN_PATH}",
        )
    except stripe.StripeError as e:
        logger.error("Stripe portal failed for user %s: %s", user.id, e)
        raise UpstreamError(f"Failed to create portal session: {e}")
    return session.url


# --- Webhook handlers ---


async def handle_checkout_completed(session_data: Any, db: AsyncSession) -> None:
    """Attach the new Stripe subscription to the user named in the session metadata."""
    user_id = _get(_get(session_data, "metadata"), "user_id")
    subscription_id = _object_id(_get(session_data, "subscription"))
    if not user_id or not subscription_id:
        logger.warning("checkout.session.completed without user_id/subscription, ignoring")
        return
    try:
        user_id = int(user_id)
    except (TypeError, ValueError):
        logger.warning("checkout.session.completed with non-numeric user_id %r, ignoring", user_id)
        return

    stripe_sub = await _retrieve_subscription(subscription_id)
    price_id = _get_price_id(stripe_sub)

    result = await db.execute(
        update(Subscription)
        .where(Subscription.user_id == user_id)
        .values(
            stripe_subscription_id=subscription_id,
            stripe_price_id=price_id,
            plan=plan_for_price(price_id),
            status=SubscriptionStatus.ACTIVE,
            stripe_current_period_end=_get_period_end(stripe_sub),
        )
    )
    await db.commit()
    if result.rowcount == 0:
        logger.warning("checkout.session.completed: no subscription for user %s", user_id)


async def handle_invoice_payment_succeeded(invoice_data: Any, db: AsyncSession) -> None:
    """Refresh the billing period and mark the subscription active."""
    subscription_id = _get_invoice_subscription_id(invoice_data)
    if not subscription_id:
        logger.debug("Invoice %s is not for a subscription, ignoring", _get(invoice_data, "id"))
        return

    stripe_sub = await _retrieve_subscription(subscription_id)
    await _update_by_customer(
        db,
        _object_id(_get(invoice_data, "customer")),
        {
            "stripe_current_period_end": _get_period_end(stripe_sub),
            "status": SubscriptionStatus.ACTIVE,
        },
        WebhookEvent.INVOICE_PAYMENT_SUCCEEDED.value,
    )


async def handle_subscription_updated(sub_data: Any, db: AsyncSession) -> None:
    price_id = _get_price_id(sub_data)
    status = SubscriptionStatus.ACTIVE if _get(sub_data, "status") == "active" else SubscriptionStatus.CANCELED
    await _update_by_customer(
        db,
        _object_id(_get(sub_data, "customer")),
        {
            "stripe_subscription_id": _get(sub_data, "id"),
            "stripe_price_id": price_id,
            "plan": plan_for_price(price_id),
            "stripe_current_period_end": _get_period_end(sub_data),
            "status": status,
        },
        WebhookEvent.SUBSCRIPTION_UPDATED.value,
    )


async def handle_subscription_deleted(sub_data: Any, db: AsyncSession) -> None:
    await _update_by_customer(
        db,
        _object_id(_get(sub_data, "customer")),
        {
            "plan": Plan.FREE,
            "status": SubscriptionStatus.CANCELED,
            "stripe_price_id": None,
            "stripe_current_period_end": None,
        },
        WebhookEvent.SUBSCRIPTION_DELETED.value,
    )


WEBHOOK_HANDLERS: dict[WebhookEvent, Callable[[Any, AsyncSession], Awaitable[None]]] = {
    WebhookEvent.CHECKOUT_COMPLETED: handle_checkout_completed,
    WebhookEvent.INVOICE_PAYMENT_SUCCEEDED: handle_invoice_payment_succeeded,
    WebhookEvent.SUBSCRIPTION_UPDATED: handle_subscription_updated,
    WebhookEvent.SUBSCRIPTION_DELETED: handle_subscription_deleted,
}


async def handle_webhook(db: AsyncSession, payload: bytes, signature: str | None) -> WebhookEvent | None:
    """Verify and dispatch one Stripe webhook delivery.

    Nothing is written unless the signature checks out. Returns the handled
    kind, or None when the event type is not one we react to.
    """
    settings = get_settings()
    if not signature:
        raise SignatureInvalid("Missing Stripe signature")

    try:
        event = stripe.Webhook.construct_event(payload, signature, settings.stripe_webhook_secret)
    except (stripe.SignatureVerificationError, ValueError) as e:
        logger.warning("Rejected Stripe webhook: %s", e)
        raise SignatureInvalid()

    event_type = event["type"]
    kind = WebhookEvent.parse(event_type)
    if kind is None:
        logger.info("Ignoring unhandled Stripe event type: %s", event_type)
        return None

    logger.info("Stripe webhook: %s", event_type)
    await WEBHOOK_HANDLERS[kind](event["data"]["object"], db)
    return kind
