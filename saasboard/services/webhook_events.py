"""Stripe webhook event kinds this application reacts to."""

import enum


class WebhookEvent(str, enum.Enum):
    CHECKOUT_COMPLETED = "checkout.session.completed"
    INVOICE_PAYMENT_SUCCEEDED = "invoice.payment_succeeded"
    SUBSCRIPTION_UPDATED = "customer.subscription.updated"
    SUBSCRIPTION_DELETED = "customer.subscription.deleted"

    @classmethod
    def parse(cls, event_type: str) -> "WebhookEvent | None":
        """Map a Stripe ``event.type`` string to a known kind, or None."""
        try:
            return cls(event_type)
        except ValueError:
            return None
