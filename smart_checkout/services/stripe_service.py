"""Stripe service — all Stripe API calls and webhook handling.

Responsible for:
- Creating Stripe Checkout Sessions (one fixed product, one-time payment)
- Verifying incoming webhook signatures
- Dispatching verified events and recording their metrics
- Turning completed checkout sessions into Airtable order rows

Webhook deliveries are not deduplicated: a retried
checkout.session.completed event creates another order row.
"""

import json
import logging

import stripe
from flask import current_app

from smart_checkout.services.airtable_service import submit_order

logger = logging.getLogger(__name__)

CHECKOUT_COMPLETED = "checkout.session.completed"

PRODUCT_NAME = "Stripe Smart Checkout Product"
PRODUCT_CURRENCY = "usd"
PRODUCT_UNIT_AMOUNT = 2000  # $20.00, in cents
PRODUCT_QUANTITY = 1


# ──────────────────────────────────────────────
# Checkout Sessions
# ──────────────────────────────────────────────

def create_checkout_session():
    """Create a Stripe Checkout Session for the fixed product.

    No idempotency key is sent, so every call creates a new session.

    Returns the Stripe session ID.
    Raises stripe.StripeError on API failures.
    """
    stripe.api_key = current_app.config["STRIPE_SECRET_KEY"]
    app_base_url = current_app.config["APP_BASE_URL"].rstrip("/")

    session = stripe.checkout.Session.create(
        payment_method_types=["card"],
        mode="payment",
        line_items=[
            {
                "price_data": {
                    "currency": PRODUCT_CURRENCY,
                    "product_data": {"name": PRODUCT_NAME},
                    "unit_amount": PRODUCT_UNIT_AMOUNT,
                },
                "quantity": PRODUCT_QUANTITY,
            },
        ],
        success_url=f"{app_base_url}/success.html",
        cancel_url=f"{app_base_url}/cancel.html",
    )

    return session.id


# ──────────────────────────────────────────────
# Webhook Handling
# ──────────────────────────────────────────────

def verify_webhook_signature(payload, sig_header):
    """Verify Stripe webhook signature and decode the event.

    Same checks as stripe.Webhook.construct_event, but the event comes
    back as plain dicts so field access does not depend on the SDK's
    StripeObject API.

    Returns the verified event as a dict.
    Raises stripe.SignatureVerificationError on invalid signature,
    ValueError on a payload that is not a JSON object.
    """
    webhook_secret = current_app.config["STRIPE_WEBHOOK_SECRET"]
    if isinstance(payload, bytes):
        payload = payload.decode("utf-8")

    stripe.WebhookSignature.verify_header(payload, sig_header, webhook_secret)

    event = json.loads(payload)
    if not isinstance(event, dict):
        raise ValueError("Webhook payload is not a JSON object")
    return event


def handle_webhook_event(event, metrics):
    """Process a verified Stripe webhook event.

    Only checkout.session.completed triggers work; every other type is
    counted as processed and ignored.
    """
    event_type = event.get("type") or "unknown"
    metrics.webhook(event_type, "received")

    if event_type == CHECKOUT_COMPLETED:
        _handle_checkout_completed(event, metrics)
    else:
        metrics.webhook(event_type, "processed")


def order_fields_from_session(session):
    """Map a Checkout Session object to an Airtable order row.

    - Name falls back to "Anonymous"
    - Email prefers customer_email, then customer_details.email, then "N/A"
    - Amount is amount_total converted from cents
    """
    details = session.get("customer_details")
    if not isinstance(details, dict):
        details = {}
    amount_total = session.get("amount_total") or 0

    return {
        "Name": details.get("name") or "Anonymous",
        "Email": session.get("customer_email") or details.get("email") or "N/A",
        "Amount": amount_total / 100,
        "Status": session.get("payment_status"),
        "SessionID": session.get("id"),
    }


def _handle_checkout_completed(event, metrics):
    """Handle checkout.session.completed: save one order row.

    Events without a session object are acknowledged and counted as
    malformed; nothing is written.
    """
    data = event.get("data")
    session = data.get("object") if isinstance(data, dict) else None

    if not isinstance(session, dict):
        logger.warning(f"{CHECKOUT_COMPLETED} {event.get('id')} has no session object, skipping")
        metrics.webhook(CHECKOUT_COMPLETED, "malformed")
        return

    metrics.payment("completed")
    logger.info(f"Webhook session completed: {session.get('id')}")

    submit_order(order_fields_from_session(session), metrics)
