# =============================================================================
# app/routers/webhooks.py - Payment Provider Webhooks
# =============================================================================
# Receives Stripe events. A completed checkout starts the render of the
# paid order.
#
# The signature is checked against the raw request body, so this route
# reads the body itself instead of using a Pydantic model.
# =============================================================================

import json
import logging
from typing import Annotated

import stripe
from fastapi import APIRouter, BackgroundTasks, Header, Request
from fastapi.responses import PlainTextResponse

from app.config import settings
from core.errors import InvalidInputError
from core.models.render import RenderRequest

logger = logging.getLogger(__name__)

router = APIRouter()

CHECKOUT_COMPLETED = "checkout.session.completed"


def dispatch_render(request: RenderRequest, background_tasks: BackgroundTasks) -> str | None:
    """
    Hand a render request to the configured executor.

    Returns:
        Celery task id, or None for inline renders
    """
    payload = request.model_dump(mode="json")

    if settings.RENDER_DISPATCH == "inline":
        from workers.tasks import run_render

        background_tasks.add_task(run_render, payload)
        logger.info(f"Queued inline render for {request.request_key}")
        return None

    from workers.tasks import render_order

    task = render_order.delay(payload)
    logger.info(f"Queued render task {task.id} for {request.request_key}")
    return task.id


@router.post("/stripe")
async def stripe_webhook(
    request: Request,
    background_tasks: BackgroundTasks,
    stripe_signature: Annotated[str | None, Header(alias="stripe-signature")] = None,
):
    """
    Stripe webhook endpoint.

    Responds with {"received": true} for every verified event. Render
    problems are logged and never reported back to Stripe.
    """
    payload = await request.body()
    secret = settings.STRIPE_WEBHOOK_SECRET

    if not stripe_signature or not secret:
        return PlainTextResponse("missing signature or secret", status_code=400)

    try:
        stripe.Webhook.construct_event(payload, stripe_signature, secret)
        event = json.loads(payload)
    except (ValueError, stripe.SignatureVerificationError) as e:
        logger.warning(f"Rejected webhook: {e}")
        return PlainTextResponse(f"Webhook Error: {e}", status_code=400)

    event_type = event.get("type")
    logger.info(f"Received Stripe event {event.get('id')} ({event_type})")

    if event_type == CHECKOUT_COMPLETED:
        session = (event.get("data") or {}).get("object") or {}
        metadata = session.get("metadata") or {}

        try:
            render_request = RenderRequest.from_checkout_metadata(
                metadata,
                bucket=settings.STORAGE_BUCKET,
                bleed_mm=settings.DEFAULT_BLEED_MM,
            )
        except InvalidInputError as e:
            logger.warning(f"Missing metadata for render: {e.message} {e.details}")
        else:
            try:
                dispatch_render(render_request, background_tasks)
            except Exception as e:
                logger.exception(f"Could not dispatch render for {render_request.request_key}: {e}")

    return {"received": True}
