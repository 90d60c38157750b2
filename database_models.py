from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from sqlalchemy import Column, Integer, String, Boolean, DateTime, JSON, UniqueConstraint

from database import Base
from utils.time_utils import utc_now, as_naive_utc


@dataclass(frozen=True)
class TrialWindow:
    """Start and end of a trial that has been started."""
    started_at: datetime
    ends_at: datetime


class Profile(Base):
    """
    Per-user trial and subscription record.
    trial_started_at / trial_ends_at are written once, when the trial starts.
    """
    __tablename__ = "profiles"

    id = Column(String, primary_key=True, index=True)
    email = Column(String, nullable=True)
    subscription_tier = Column(String, nullable=False, default="free")
    trial_started_at = Column(DateTime, nullable=True)
    trial_ends_at = Column(DateTime, nullable=True)
    trial_reminder_sent = Column(Boolean, nullable=False, default=False)
    email_verified = Column(Boolean, nullable=False, default=False)
    phone_verified = Column(Boolean, nullable=False, default=False)
    subscription_started_at = Column(DateTime, nullable=True)
    plan_id = Column(String, nullable=True)
    created_at = Column(DateTime, default=utc_now, nullable=False)

    @property
    def trial_window(self) -> Optional[TrialWindow]:
        """The trial window, or None if this user never started a trial."""
        if self.trial_started_at is None or self.trial_ends_at is None:
            return None
        return TrialWindow(
            started_at=as_naive_utc(self.trial_started_at),
            ends_at=as_naive_utc(self.trial_ends_at),
        )


class DownloadLog(Base):
    """One row per authorized download. Append-only."""
    __tablename__ = "download_logs"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(String, nullable=False, index=True)
    resource = Column(String, nullable=False)
    created_at = Column(DateTime, default=utc_now, nullable=False, index=True)


class ActiveSession(Base):
    __tablename__ = "active_sessions"
    __table_args__ = (UniqueConstraint("user_id", "device_id", name="uq_active_sessions_user_device"),)

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(String, nullable=False, index=True)
    device_id = Column(String, nullable=False)
    last_activity_at = Column(DateTime, default=utc_now, nullable=False)


class TrialEvent(Base):
    """Analytics log of trial lifecycle events (trial_started, trial_converted)."""
    __tablename__ = "trial_events"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(String, nullable=False, index=True)
    event = Column(String, nullable=False)
    event_metadata = Column("metadata", JSON, nullable=True)
    created_at = Column(DateTime, default=utc_now, nullable=False)
