"""Local user profile storage."""

from datetime import datetime
from typing import Any, Dict, Optional
import pytz
from pydantic import ValidationError

from lunchbox.models.profile import Interests, UserProfile
from lunchbox.storage.base import ClientStorage, StorageError
from lunchbox.utils.logging import setup_logger

logger = setup_logger(__name__)

PROFILE_STORAGE_KEY = "lunchbox_user_profile"

CONNECTION_FIELDS = {
    "email": "email",
    "discord": "external_id",
}

def _now() -> datetime:
    return datetime.now(pytz.UTC)

class ProfileStore:
    """Reads and writes the single profile kept in a client's storage."""

    def __init__(self, storage: ClientStorage, storage_key: str = PROFILE_STORAGE_KEY):
        self.storage = storage
        self.storage_key = storage_key

    def load(self) -> Optional[UserProfile]:
        """Return the stored profile, or None when absent or unreadable."""
        try:
            stored = self.storage.get(self.storage_key)
            if stored:
                return UserProfile.model_validate_json(stored)
        except ValidationError as e:
            logger.error(f"Error loading user profile: {str(e)}")
        except StorageError as e:
            logger.error(f"Profile storage unavailable: {str(e)}")
        return None

    def save(self, profile: UserProfile) -> UserProfile:
        """Stamp lastActive and overwrite the storage slot."""
        stamped = profile.model_copy(update={"last_active": _now()})
        self.storage.set(self.storage_key, stamped.model_dump_json(by_alias=True))
        return stamped

    def update(self, updates: Dict[str, Any]) -> Optional[UserProfile]:
        """Shallow-merge updates into the stored profile.

        Keys may be given in snake_case or camelCase.

        Returns:
            The saved profile, or None if there is no profile to update
        """
        current = self.load()
        if not current:
            return None

        merged = current.model_dump(by_alias=True)
        for key, value in updates.items():
            field = UserProfile.model_fields.get(key)
            merged[field.alias if field and field.alias else key] = value

        try:
            updated = UserProfile.model_validate(merged)
        except ValidationError as e:
            logger.error(f"Error updating user profile: {str(e)}")
            return None
        return self.save(updated)

    def complete_onboarding(self, interests: Interests) -> UserProfile:
        now = _now()
        profile = UserProfile(
            interests=interests,
            onboarding_complete=True,
            created_at=now,
            last_active=now
        )
        logger.info("Onboarding complete, saving new profile")
        return self.save(profile)

    def add_connection(self, kind: str, value: str) -> Optional[UserProfile]:
        """Attach an email address or Discord id to the profile."""
        field = CONNECTION_FIELDS.get(kind)
        if field is None:
            raise ValueError(f"Unknown connection type: {kind}")
        return self.update({field: value})

    def is_onboarding_complete(self) -> bool:
        profile = self.load()
        return bool(profile and profile.onboarding_complete)

    def get_interests(self) -> Optional[Interests]:
        profile = self.load()
        return profile.interests if profile else None

    def clear(self) -> None:
        self.storage.delete(self.storage_key)
