"""
Notification Service - outbound email (stubbed until an email provider is wired in)
"""

import logging

logger = logging.getLogger(__name__)

TEMPLATE_TRIAL_WELCOME = "trial_welcome"


class NotificationService:
    """Sends templated notifications to users."""

    async def send(self, email: str, template_id: str) -> bool:
        """
        Send a templated email.

        Args:
            email: Recipient address
            template_id: Template key, e.g. "trial_welcome"

        Returns:
            True if the message was handed off
        """
        if not email:
            logger.warning(f"Notification {template_id} skipped: no recipient")
            return False

        logger.info(f"Sending {template_id} email to {email}")
        return True
