"""
Repositories for guardrail usage tables and the trial event log
"""

from datetime import datetime
from typing import Optional
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy import select, func

from database_models import DownloadLog, ActiveSession, TrialEvent
from services.exceptions import StoreUnavailable


class DownloadLogRepository:
    """Append-only access to download_logs."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def count_between(self, user_id: str, start: datetime, end: datetime) -> int:
        """
        Count downloads for a user with start <= created_at < end.

        Raises:
            StoreUnavailable: If the query fails
        """
        try:
            result = await self.db.execute(
                select(func.count())
                .select_from(DownloadLog)
                .where(
                    DownloadLog.user_id == user_id,
                    DownloadLog.created_at >= start,
                    DownloadLog.created_at < end,
                )
            )
            return result.scalar_one() or 0
        except SQLAlchemyError as e:
            raise StoreUnavailable("count_downloads", str(e)) from e

    async def add_download(self, user_id: str, resource: str, created_at: datetime) -> DownloadLog:
        entry = DownloadLog(user_id=user_id, resource=resource, created_at=created_at)
        try:
            self.db.add(entry)
            await self.db.flush()
        except SQLAlchemyError as e:
            raise StoreUnavailable("add_download", str(e)) from e
        return entry


class ActiveSessionRepository:
    """Per-device activity used for the concurrent device count."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def count_active_since(self, user_id: str, since: datetime) -> int:
        try:
            result = await self.db.execute(
                select(func.count())
                .select_from(ActiveSession)
                .where(
                    ActiveSession.user_id == user_id,
                    ActiveSession.last_activity_at >= since,
                )
            )
            return result.scalar_one() or 0
        except SQLAlchemyError as e:
            raise StoreUnavailable("count_active_sessions", str(e)) from e

    async def touch(self, user_id: str, device_id: str, seen_at: datetime) -> ActiveSession:
        """
        Insert or refresh the session row for (user_id, device_id).

        Raises:
            StoreUnavailable: If the read or write fails
        """
        try:
            result = await self.db.execute(
                select(ActiveSession).where(
                    ActiveSession.user_id == user_id,
                    ActiveSession.device_id == device_id,
                )
            )
            session: Optional[ActiveSession] = result.scalar_one_or_none()
            if session is None:
                session = ActiveSession(user_id=user_id, device_id=device_id, last_activity_at=seen_at)
                self.db.add(session)
            else:
                session.last_activity_at = seen_at
            await self.db.flush()
        except SQLAlchemyError as e:
            raise StoreUnavailable("touch_session", str(e)) from e
        return session


class TrialEventRepository:
    """Analytics log for trial lifecycle events."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def add_event(self, user_id: str, event: str, metadata: Optional[dict], created_at: datetime) -> TrialEvent:
        entry = TrialEvent(user_id=user_id, event=event, event_metadata=metadata, created_at=created_at)
        try:
            self.db.add(entry)
            await self.db.flush()
        except SQLAlchemyError as e:
            raise StoreUnavailable("add_trial_event", str(e)) from e
        return entry

    async def list_events(self, user_id: str) -> list[TrialEvent]:
        try:
            result = await self.db.execute(
                select(TrialEvent)
                .where(TrialEvent.user_id == user_id)
                .order_by(TrialEvent.created_at, TrialEvent.id)
            )
            return list(result.scalars().all())
        except SQLAlchemyError as e:
            raise StoreUnavailable("list_trial_events", str(e)) from e
