# =============================================================================
# app/routers/checkout.py - Checkout Endpoints
# =============================================================================
# Creates a Stripe hosted checkout session. The first cart item's render
# parameters ride along as session metadata and come back in the
# checkout.session.completed webhook.
# =============================================================================

import logging

import stripe
from fastapi import APIRouter

from app.config import settings
from app.exceptions import CheckoutFailedError, NoItemsError
from core.models.order import CheckoutItem, CheckoutRequest, CheckoutResponse
from lib.utils import unix_millis

logger = logging.getLogger(__name__)

router = APIRouter()


def build_session_params(item: CheckoutItem, timestamp_ms: int) -> dict:
    """Arguments for stripe.checkout.Session.create."""
    return {
        "mode": "payment",
        "payment_method_types": ["card"],
        "client_reference_id": f"ORDER-{timestamp_ms}",
        "metadata": item.to_metadata(),
        "line_items": [{
            "quantity": item.qty,
            "price_data": {
                "currency": item.currency.lower(),
                "product_data": {"name": f"{item.product} ({item.size})"},
                "unit_amount": item.unit_amount,
            },
        }],
        "success_url": settings.SUCCESS_URL,
        "cancel_url": settings.CANCEL_URL,
    }


@router.post("/session", response_model=CheckoutResponse)
async def create_checkout_session(body: CheckoutRequest):
    """
    Start a checkout for the cart.

    Only the first item is rendered after payment.
    """
    if not body.items:
        raise NoItemsError()

    item = body.items[0]
    params = build_session_params(item, unix_millis())

    try:
        session = stripe.checkout.Session.create(api_key=settings.STRIPE_SECRET_KEY, **params)
    except stripe.StripeError as e:
        logger.error(f"Stripe checkout failed: {e}")
        raise CheckoutFailedError(str(e))

    logger.info(f"Created checkout {params['client_reference_id']} for {item.object_key}")
    return CheckoutResponse(url=session.url)
