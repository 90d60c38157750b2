"""
Billing Service - Stripe checkout for the upgrade call-to-action and trial conversion on payment
"""

import logging
from typing import Optional
import stripe

from config.settings import settings
from services.trial_service import TrialService

logger = logging.getLogger(__name__)

CHECKOUT_COMPLETED = "checkout.session.completed"

# Initialize Stripe client
if settings.stripe_secret_key:
    stripe.api_key = settings.stripe_secret_key
else:
    logger.warning("STRIPE_SECRET_KEY is not set. Stripe functionality will be unavailable.")


class BillingService:
    """
    Service class for handling billing-related business logic.
    Stripe is the payment collaborator; a completed checkout converts the trial.
    """

    def __init__(self, trial_service: TrialService):
        """
        Initialize the billing service.

        Args:
            trial_service: TrialService used to convert users once payment completes
        """
        self.trial_service = trial_service

    async def create_checkout_session(self, user_id: str, plan_id: str, email: Optional[str] = None):
        """
        Create a Stripe Checkout session for upgrading a user.

        Args:
            user_id: User upgrading, carried in session metadata
            plan_id: Plan chosen on the upgrade page
            email: Optional email address for the Stripe customer

        Returns:
            Normalized response: {"data": url, "is_error": False} or {"error": str(e), "is_error": True}
        """
        if not settings.stripe_secret_key:
            logger.error("STRIPE_SECRET_KEY is not set. Cannot create checkout session.")
            return {"error": "STRIPE_SECRET_KEY is not set. Cannot create checkout session.", "is_error": True}

        if not settings.stripe_price_id:
            logger.error("STRIPE_PRICE_ID is not set. Cannot create checkout session.")
            return {"error": "STRIPE_PRICE_ID is not set. Cannot create checkout session.", "is_error": True}

        try:
            frontend_url = settings.frontend_url or "http://localhost:5173"

            checkout_session = stripe.checkout.Session.create(
                customer_email=email,
                payment_method_types=["card"],
                line_items=[{
                    "price": settings.stripe_price_id,
                    "quantity": 1,
                }],
                mode="subscription",
                client_reference_id=user_id,
                success_url=f"{frontend_url}/upgrade/success?session_id={{CHECKOUT_SESSION_ID}}",
                cancel_url=f"{frontend_url}/upgrade",
                metadata={
                    "user_id": user_id,
                    "plan_id": plan_id,
                }
            )

            return {"data": checkout_session.url, "is_error": False}
        except Exception as e:
            logger.error(f"Failed to create checkout session: {e}", exc_info=True)
            return {"error": str(e), "is_error": True}

    async def process_webhook(self, event):
        """
        Process a verified Stripe webhook event.

        checkout.session.completed converts the user named in the session metadata;
        other event types are acknowledged and ignored.

        Args:
            event: Verified Stripe Event object (from webhook signature verification)

        Returns:
            Normalized response: {"data": ..., "is_error": False} or {"error": str(e), "is_error": True}
        """
        try:
            event_type = event["type"]
            logger.info(f"Processing Stripe webhook event: {event_type}")

            if event_type != CHECKOUT_COMPLETED:
                return {"data": {"handled": False}, "is_error": False}

            session = event["data"]["object"]
            metadata = session.get("metadata") or {}
            user_id = metadata.get("user_id") or session.get("client_reference_id")
            if not user_id:
                logger.error("Checkout session completed without a user_id")
                return {"error": "Missing user_id in checkout session", "is_error": True}

            result = await self.trial_service.convert_to_paid(user_id, metadata.get("plan_id"))
            if not result.success:
                return {"error": result.message, "is_error": True}

            return {"data": {"handled": True, "user_id": user_id}, "is_error": False}

        except Exception as e:
            logger.error(f"Error processing webhook: {e}", exc_info=True)
            return {"error": str(e), "is_error": True}
