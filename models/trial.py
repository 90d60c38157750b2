from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, computed_field


class SubscriptionTier(str, Enum):
    NONE = "none"
    FREE = "free"
    TRIAL = "trial"
    PREMIUM = "premium"


class NudgeType(str, Enum):
    NONE = "none"
    DAY7 = "day7"
    DAY21 = "day21"
    DAY40 = "day40"
    EXPIRED = "expired"


class TrialStatus(BaseModel):
    is_active: bool = False
    days_remaining: int = 0
    trial_start_date: Optional[datetime] = None
    trial_end_date: Optional[datetime] = None
    nudge_type: NudgeType = NudgeType.NONE
    show_upgrade_prompt: bool = False
    can_access_premium: bool = False


class TrialGuardrails(BaseModel):
    max_downloads_per_day: int
    max_concurrent_devices: int
    requires_email_verification: bool
    requires_phone_verification: bool
    current_downloads: int = 0
    current_devices: int = 0

    @computed_field
    @property
    def downloads_remaining(self) -> int:
        return max(0, self.max_downloads_per_day - self.current_downloads)


class TrialActionResult(BaseModel):
    success: bool
    message: str
    error: Optional[str] = None  # machine-readable code when success is False
