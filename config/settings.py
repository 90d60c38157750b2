"""
Configuration settings for the application
"""
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# Trial lifecycle constants
TRIAL_DURATION_DAYS = 45
UPGRADE_PROMPT_DAY = 30

# Nudge schedule (days from trial start)
NUDGE_EARLY_DAY = 7    # "You're getting the hang of it!"
NUDGE_MID_DAY = 21     # "Look what you've accomplished"
NUDGE_LATE_DAY = 40    # "Your trial ends in 5 days"
NUDGE_URGENT_DAYS_LEFT = 3

# A device counts as active if seen within this window
ACTIVE_SESSION_WINDOW_MINUTES = 30


class Settings(BaseSettings):
    """Application settings loaded from environment variables"""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        populate_by_name=True,
        extra="ignore",
    )

    # Core authentication
    jwt_secret_key: Optional[str] = Field(default=None, alias="JWT_SECRET_KEY")

    # Stripe billing configuration
    stripe_secret_key: Optional[str] = Field(default=None, alias="STRIPE_SECRET_KEY")
    stripe_webhook_secret: Optional[str] = Field(default=None, alias="STRIPE_WEBHOOK_SECRET")
    stripe_price_id: Optional[str] = Field(default=None, alias="STRIPE_PRICE_ID")

    # Infrastructure configuration
    database_url: Optional[str] = Field(default="sqlite+aiosqlite:///./trial_app.db", alias="DATABASE_URL")

    # Frontend configuration
    frontend_url: Optional[str] = Field(default="http://localhost:5173", alias="FRONTEND_URL")

    # Trial guardrails (process-wide, not per user)
    max_downloads_per_day: int = Field(default=10, alias="TRIAL_MAX_DOWNLOADS_PER_DAY")
    max_concurrent_devices: int = Field(default=2, alias="TRIAL_MAX_CONCURRENT_DEVICES")
    require_email_verification: bool = Field(default=True, alias="TRIAL_REQUIRE_EMAIL_VERIFICATION")
    require_phone_verification: bool = Field(default=False, alias="TRIAL_REQUIRE_PHONE_VERIFICATION")

    # Render.com deployment configuration
    render: Optional[str] = Field(default=None, alias="RENDER")

    # Environment configuration
    env: Optional[str] = Field(default=None, alias="ENV")


# Instantiate settings object
settings = Settings()

# Determine if we're in production mode
IS_PRODUCTION = bool(settings.render) or bool(settings.env and settings.env.lower() == "production")
