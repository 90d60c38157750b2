"""
Trial Service for managing 45-day no-credit-card trial periods
"""
import logging
from datetime import datetime, timedelta
from typing import Callable, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from config.settings import (
    TRIAL_DURATION_DAYS,
    UPGRADE_PROMPT_DAY,
    NUDGE_EARLY_DAY,
    NUDGE_MID_DAY,
    NUDGE_LATE_DAY,
)
from crud.profile import ProfileRepository
from crud.usage import TrialEventRepository
from database_models import Profile
from models.trial import NudgeType, SubscriptionTier, TrialActionResult, TrialStatus
from services.exceptions import AlreadySubscribed, AlreadyUsedTrial, NoTrialFound, StoreUnavailable
from services.notification_service import NotificationService, TEMPLATE_TRIAL_WELCOME
from utils.time_utils import utc_now, whole_days

logger = logging.getLogger(__name__)

EVENT_TRIAL_STARTED = "trial_started"
EVENT_TRIAL_CONVERTED = "trial_converted"

_UNSUBSCRIBED_TIERS = {None, "", SubscriptionTier.NONE.value, SubscriptionTier.FREE.value}


def nudge_type_for(days_elapsed: int, is_expired: bool) -> NudgeType:
    """Map elapsed trial days to a nudge phase. Larger thresholds win."""
    if is_expired:
        return NudgeType.EXPIRED
    if days_elapsed >= NUDGE_LATE_DAY:
        return NudgeType.DAY40
    if days_elapsed >= NUDGE_MID_DAY:
        return NudgeType.DAY21
    if days_elapsed >= NUDGE_EARLY_DAY:
        return NudgeType.DAY7
    return NudgeType.NONE


def compute_trial_status(profile: Optional[Profile], now: datetime) -> TrialStatus:
    """
    Derive the trial status of a profile at a given instant.

    Pure function of the stored record and `now`; never mutates the profile.
    An expired trial keeps subscription_tier == "trial", expiry is only a view.

    Args:
        profile: Stored profile, or None if the user has no profile yet
        now: Naive UTC instant to evaluate at

    Returns:
        TrialStatus for the profile
    """
    window = profile.trial_window if profile is not None else None
    if window is None:
        return TrialStatus()

    tier = profile.subscription_tier
    days_elapsed = whole_days(now - window.started_at)
    days_remaining = max(0, whole_days(window.ends_at - now))
    is_expired = now > window.ends_at

    return TrialStatus(
        is_active=not is_expired and tier == SubscriptionTier.TRIAL.value,
        days_remaining=days_remaining,
        trial_start_date=window.started_at,
        trial_end_date=window.ends_at,
        nudge_type=nudge_type_for(days_elapsed, is_expired),
        show_upgrade_prompt=days_elapsed >= UPGRADE_PROMPT_DAY,
        # Converted users keep premium access past the original trial end
        can_access_premium=(
            tier == SubscriptionTier.PREMIUM.value
            or (not is_expired and tier == SubscriptionTier.TRIAL.value)
        ),
    )


class TrialService:
    """
    Service for managing user trial periods.
    Handles trial start, status derivation and conversion to paid.
    """

    def __init__(
        self,
        db: AsyncSession,
        profile_repo: ProfileRepository,
        event_repo: Optional[TrialEventRepository] = None,
        notifier: Optional[NotificationService] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        """
        Initialize the trial service with database session and repositories.

        Args:
            db: AsyncSession instance for database operations
            profile_repo: ProfileRepository instance for profile operations
            event_repo: TrialEventRepository for lifecycle analytics events
            notifier: NotificationService used for the welcome email
            clock: Callable returning the current naive UTC time
        """
        self.db = db
        self.profile_repo = profile_repo
        self.event_repo = event_repo or TrialEventRepository(db)
        self.notifier = notifier or NotificationService()
        self._clock = clock or utc_now

    async def start_trial(self, user_id: str, email: Optional[str] = None) -> TrialActionResult:
        """
        Start a free trial for a user.

        A user can start a trial at most once, ever. The trial start is committed
        before the lifecycle event and welcome email, so neither can undo it.

        Args:
            user_id: Authenticated user's ID
            email: Optional address for the welcome email

        Returns:
            TrialActionResult describing the outcome
        """
        try:
            profile = await self.profile_repo.get_profile(user_id)
            if profile is None:
                profile = await self.profile_repo.create_profile({"id": user_id, "email": email})

            if profile.trial_started_at is not None:
                raise AlreadyUsedTrial(user_id)
            if profile.subscription_tier not in _UNSUBSCRIBED_TIERS:
                raise AlreadySubscribed(user_id, profile.subscription_tier)

            trial_start = self._clock()
            trial_end = trial_start + timedelta(days=TRIAL_DURATION_DAYS)
            await self.profile_repo.update_profile(profile, {
                "trial_started_at": trial_start,
                "trial_ends_at": trial_end,
                "subscription_tier": SubscriptionTier.TRIAL.value,
                "trial_reminder_sent": False,
                "email_verified": False,
            })
            await self._commit("start_trial")
        except (AlreadyUsedTrial, AlreadySubscribed) as e:
            logger.info(f"Trial start refused for user {user_id}: {e.code}")
            return TrialActionResult(success=False, message=str(e), error=e.code)
        except StoreUnavailable as e:
            logger.error(f"Error starting trial for user {user_id}: {e}")
            await self._rollback()
            return TrialActionResult(
                success=False,
                message="Unable to start trial. Please try again.",
                error=e.code,
            )

        logger.info(f"Trial started for user {user_id}, ends {trial_end.isoformat()}")

        await self._log_event(user_id, EVENT_TRIAL_STARTED, {
            "duration_days": TRIAL_DURATION_DAYS,
            "email": email,
        })

        if email:
            await self._send_welcome_email(email)

        return TrialActionResult(
            success=True,
            message=(
                f"Welcome! Your {TRIAL_DURATION_DAYS}-day free trial has started. No credit card "
                f"required. Explore all premium features until {trial_end:%B %d, %Y}."
            ),
        )

    async def get_trial_status(self, user_id: str) -> TrialStatus:
        """
        Get the current trial status for a user.

        Read-only. If the profile cannot be read the "no trial" status is returned.
        """
        try:
            profile = await self.profile_repo.get_profile(user_id)
        except StoreUnavailable as e:
            logger.error(f"Error getting trial status for user {user_id}: {e}")
            return TrialStatus()

        return compute_trial_status(profile, self._clock())

    async def convert_to_paid(self, user_id: str, plan_id: Optional[str] = None) -> TrialActionResult:
        """
        Convert a trial user to the premium tier.

        Re-invoking re-stamps subscription_started_at. Payment itself is handled
        by the billing provider before this is called.

        Args:
            user_id: User to convert
            plan_id: Plan purchased, recorded on the profile

        Returns:
            TrialActionResult describing the outcome
        """
        try:
            profile = await self.profile_repo.get_profile(user_id)
            window = profile.trial_window if profile is not None else None
            if window is None:
                raise NoTrialFound(user_id)

            now = self._clock()
            await self.profile_repo.update_profile(profile, {
                "subscription_tier": SubscriptionTier.PREMIUM.value,
                "subscription_started_at": now,
                "plan_id": plan_id,
            })
            await self._commit("convert_to_paid")
        except NoTrialFound as e:
            logger.info(f"Conversion refused for user {user_id}: {e.code}")
            return TrialActionResult(success=False, message=str(e), error=e.code)
        except StoreUnavailable as e:
            logger.error(f"Error converting trial for user {user_id}: {e}")
            await self._rollback()
            return TrialActionResult(
                success=False,
                message="Unable to upgrade. Please try again.",
                error=e.code,
            )

        days_used = whole_days(now - window.started_at)
        logger.info(f"User {user_id} converted to premium (plan={plan_id}) after {days_used} days")

        await self._log_event(user_id, EVENT_TRIAL_CONVERTED, {
            "days_used": days_used,
            "plan_id": plan_id,
        })

        return TrialActionResult(
            success=True,
            message="Welcome to Premium! You now have unlimited access to all features.",
        )

    async def _log_event(self, user_id: str, event: str, metadata: Optional[dict] = None) -> None:
        """Best-effort analytics event; failures are logged and dropped."""
        try:
            await self.event_repo.add_event(user_id, event, metadata, self._clock())
            await self._commit(f"log_event:{event}")
        except StoreUnavailable as e:
            logger.error(f"Error logging trial event {event} for user {user_id}: {e}")
            await self._rollback()

    async def _send_welcome_email(self, email: str) -> None:
        try:
            sent = await self.notifier.send(email, TEMPLATE_TRIAL_WELCOME)
            if not sent:
                logger.warning(f"Welcome email to {email} was not sent")
        except Exception as e:
            logger.error(f"Failed to send welcome email to {email}: {e}", exc_info=True)

    async def _commit(self, operation: str) -> None:
        try:
            await self.db.commit()
        except SQLAlchemyError as e:
            raise StoreUnavailable(operation, str(e)) from e

    async def _rollback(self) -> None:
        try:
            await self.db.rollback()
        except SQLAlchemyError as e:
            logger.error(f"Rollback failed: {e}")
