"""
ProfileRepository for database operations on the Profile model
"""

from typing import Optional
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy import select

from database_models import Profile
from services.exceptions import StoreUnavailable


class ProfileRepository:
    """
    Repository class for Profile database operations.
    Encapsulates all database logic for the Profile model.
    """

    def __init__(self, db: AsyncSession):
        """
        Initialize the repository with a database session.

        Args:
            db: AsyncSession instance for database operations
        """
        self.db = db

    async def get_profile(self, user_id: str) -> Optional[Profile]:
        """
        Retrieve a profile by user ID.

        Args:
            user_id: Opaque user identifier

        Returns:
            Profile object if found, None otherwise

        Raises:
            StoreUnavailable: If the query fails
        """
        try:
            result = await self.db.execute(
                select(Profile).where(Profile.id == user_id)
            )
            return result.scalar_one_or_none()
        except SQLAlchemyError as e:
            raise StoreUnavailable("get_profile", str(e)) from e

    async def create_profile(self, profile_data: dict) -> Profile:
        """
        Create a new profile in the database.

        Args:
            profile_data: Dictionary containing profile data. Must include:
                - id: str
                Optional:
                - email: str
                - subscription_tier: str (defaults to "free")

        Returns:
            Created Profile object
        """
        profile = Profile(
            id=profile_data["id"],
            email=profile_data.get("email"),
            subscription_tier=profile_data.get("subscription_tier", "free"),
            email_verified=profile_data.get("email_verified", False),
            phone_verified=profile_data.get("phone_verified", False),
        )
        try:
            self.db.add(profile)
            await self.db.flush()
            await self.db.refresh(profile)
        except SQLAlchemyError as e:
            raise StoreUnavailable("create_profile", str(e)) from e
        return profile

    async def update_profile(self, profile: Profile, updates: dict) -> Profile:
        """
        Update profile fields.

        Args:
            profile: Profile object to update
            updates: Dictionary of fields to update (e.g., {"subscription_tier": "premium"})

        Returns:
            Updated Profile object
        """
        for key, value in updates.items():
            if hasattr(profile, key):
                setattr(profile, key, value)

        try:
            await self.db.flush()
            await self.db.refresh(profile)
        except SQLAlchemyError as e:
            raise StoreUnavailable("update_profile", str(e)) from e
        return profile
