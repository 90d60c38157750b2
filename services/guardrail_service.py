"""
Guardrail Service - soft usage limits (downloads per day, concurrent devices) for trial users
"""
import logging
from datetime import datetime, timedelta
from typing import Callable, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from config.settings import settings, Settings, ACTIVE_SESSION_WINDOW_MINUTES
from crud.usage import ActiveSessionRepository, DownloadLogRepository
from models.trial import TrialGuardrails
from services.exceptions import DownloadLimitExceeded, StoreUnavailable
from services.trial_service import TrialService
from utils.time_utils import ONE_DAY, start_of_utc_day, utc_now

logger = logging.getLogger(__name__)


class GuardrailService:
    """
    Checks and enforces trial guardrails.

    Guardrails are advisory: counting failures degrade to zero, and the
    check-then-insert in record_download is not locked, so concurrent requests
    can overshoot the daily cap slightly.
    """

    def __init__(
        self,
        db: AsyncSession,
        trial_service: TrialService,
        download_repo: Optional[DownloadLogRepository] = None,
        session_repo: Optional[ActiveSessionRepository] = None,
        config: Optional[Settings] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self.db = db
        self.trial_service = trial_service
        self.download_repo = download_repo or DownloadLogRepository(db)
        self.session_repo = session_repo or ActiveSessionRepository(db)
        self.config = config or settings
        self._clock = clock or utc_now

    def _static_limits(self, current_downloads: int = 0, current_devices: int = 0) -> TrialGuardrails:
        return TrialGuardrails(
            max_downloads_per_day=self.config.max_downloads_per_day,
            max_concurrent_devices=self.config.max_concurrent_devices,
            requires_email_verification=self.config.require_email_verification,
            requires_phone_verification=self.config.require_phone_verification,
            current_downloads=current_downloads,
            current_devices=current_devices,
        )

    async def check_guardrails(self, user_id: str) -> TrialGuardrails:
        """
        Get the static limits merged with the user's live usage counts.

        Never raises: if the counts cannot be read, both are reported as zero.

        Args:
            user_id: User to check

        Returns:
            TrialGuardrails for the user
        """
        now = self._clock()
        day_start = start_of_utc_day(now)

        try:
            downloads = await self.download_repo.count_between(user_id, day_start, day_start + ONE_DAY)
            devices = await self.session_repo.count_active_since(
                user_id, now - timedelta(minutes=ACTIVE_SESSION_WINDOW_MINUTES)
            )
        except StoreUnavailable as e:
            logger.error(f"Error checking guardrails for user {user_id}: {e}")
            return self._static_limits()

        return self._static_limits(current_downloads=downloads, current_devices=devices)

    async def authorize_download(self, user_id: str) -> bool:
        """
        Authorize one download for a user.

        Premium users and users in an active trial are not capped.

        Returns:
            True if the download may proceed

        Raises:
            DownloadLimitExceeded: If the daily allowance is used up
        """
        status = await self.trial_service.get_trial_status(user_id)
        if status.can_access_premium:
            return True

        guardrails = await self.check_guardrails(user_id)
        if guardrails.current_downloads >= guardrails.max_downloads_per_day:
            logger.warning(
                f"Download denied for user {user_id}: "
                f"{guardrails.current_downloads}/{guardrails.max_downloads_per_day} today"
            )
            raise DownloadLimitExceeded(guardrails.max_downloads_per_day)

        return True

    async def record_download(self, user_id: str, resource: str) -> TrialGuardrails:
        """
        Authorize and log a download.

        Args:
            user_id: User downloading
            resource: Identifier of the downloaded resource

        Returns:
            Guardrails refreshed after the insert

        Raises:
            DownloadLimitExceeded: If the daily allowance is used up
            StoreUnavailable: If the download could not be logged
        """
        await self.authorize_download(user_id)

        try:
            await self.download_repo.add_download(user_id, resource, self._clock())
        except StoreUnavailable:
            await self.db.rollback()
            raise
        await self._commit("record_download")
        logger.info(f"Download recorded for user {user_id}: {resource}")

        return await self.check_guardrails(user_id)

    async def record_activity(self, user_id: str, device_id: str) -> TrialGuardrails:
        """
        Mark a device as active now and return the refreshed guardrails.

        Raises:
            StoreUnavailable: If the session could not be written
        """
        try:
            await self.session_repo.touch(user_id, device_id, self._clock())
        except StoreUnavailable:
            await self.db.rollback()
            raise
        await self._commit("record_activity")

        return await self.check_guardrails(user_id)

    async def _commit(self, operation: str) -> None:
        try:
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            raise StoreUnavailable(operation, str(e)) from e
