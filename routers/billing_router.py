"""
Billing Router - API endpoints for Stripe billing integration
Webhook is defined FIRST to avoid middleware conflicts
"""

import logging
from fastapi import APIRouter, Request, Depends, Body
from fastapi.responses import JSONResponse
import stripe

from auth import get_current_user
from config.settings import settings
from dependencies import get_billing_service
from services.billing_service import BillingService
from utils.responses import success_response, error_response

logger = logging.getLogger(__name__)

# Create billing router
billing_router = APIRouter(prefix="/api/billing", tags=["billing"])


# WEBHOOK ENDPOINT - MUST BE DEFINED FIRST TO AVOID MIDDLEWARE CONFLICTS
@billing_router.post("/webhook")
async def stripe_webhook(
    request: Request,
    billing_service: BillingService = Depends(get_billing_service),
):
    """
    Handle Stripe webhook events with signature verification.

    Only verified events are processed to prevent spoofing attacks.
    Always returns 200 OK to Stripe to prevent retries.

    Args:
        request: FastAPI Request object (for raw body)
        billing_service: BillingService dependency

    Returns:
        JSON response with 200 status code
    """
    try:
        webhook_secret = settings.stripe_webhook_secret
        if not webhook_secret:
            logger.error("STRIPE_WEBHOOK_SECRET environment variable is not set")
            return JSONResponse(
                status_code=200,
                content={"ok": False, "received": True, "error": "Webhook secret not configured"}
            )

        # Raw body is required for signature verification
        payload = await request.body()

        stripe_signature = request.headers.get("stripe-signature")
        if not stripe_signature:
            logger.error("Missing Stripe-Signature header")
            return JSONResponse(
                status_code=200,
                content={"ok": False, "received": True, "error": "Missing signature header"}
            )

        try:
            event = stripe.Webhook.construct_event(
                payload,
                stripe_signature,
                webhook_secret
            )
        except stripe.SignatureVerificationError as e:
            logger.error(f"Stripe webhook signature verification failed: {e}")
            return JSONResponse(
                status_code=200,
                content={"ok": False, "received": True, "error": "Invalid webhook signature"}
            )
        except ValueError as e:
            logger.error(f"Invalid webhook payload: {e}")
            return JSONResponse(
                status_code=200,
                content={"ok": False, "received": True, "error": "Invalid payload format"}
            )

        result = await billing_service.process_webhook(event)

        success = not result.get("is_error", True)
        return JSONResponse(
            status_code=200,
            content={
                "ok": success,
                "received": True,
                "event_type": event["type"]
            }
        )

    except Exception as e:
        logger.error(f"Webhook error: {e}", exc_info=True)
        return JSONResponse(
            status_code=200,
            content={"ok": False, "received": True, "error": str(e)}
        )


@billing_router.post("/create-checkout-session")
async def create_checkout_session(
    plan_id: str = Body(..., embed=True),
    current_user: dict = Depends(get_current_user),
    billing_service: BillingService = Depends(get_billing_service),
):
    """
    Create a Stripe Checkout session for the signed-in user.

    Args:
        plan_id: Plan chosen on the upgrade page
        current_user: Authenticated user
        billing_service: BillingService dependency

    Returns:
        JSON response with checkout session URL
    """
    result = await billing_service.create_checkout_session(
        current_user["user_id"], plan_id, current_user.get("email")
    )
    if result.get("is_error"):
        return error_response("checkout_failed", message=result.get("error", "Unknown error"))
    return success_response({"url": result["data"]})
