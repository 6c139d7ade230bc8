"""Diet profile persistence logic."""

import logging
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Protocol
from uuid import UUID

from nutrition_advisor.domain.profiles import ProfileForm, UserProfile, form_to_row
from nutrition_advisor.errors import PersistenceError

logger = logging.getLogger(__name__)


class ProfileRepository(Protocol):
    """Persistence interface for diet profiles."""

    def get_latest(self, user_id: UUID) -> UserProfile | None:
        """Return the most recently updated profile for a user."""

    def get_version(self, profile_id: UUID) -> int | None:
        """Return the stored version of a profile."""

    def insert(self, user_id: UUID, payload: dict[str, object]) -> UserProfile:
        """Create a profile row and return it."""

    def update(self, profile_id: UUID, payload: dict[str, object]) -> UserProfile:
        """Update a profile row and return it."""

    def set_current_recommendation(
        self, profile_id: UUID, recommendation_id: UUID
    ) -> None:
        """Point a profile at its active recommendation."""


@dataclass
class ProfileService:
    """Loads and upserts the single profile each user owns."""

    repository: ProfileRepository

    def load_profile(self, user_id: UUID) -> UserProfile | None:
        """Return the user's profile, if one was saved before."""
        try:
            return self.repository.get_latest(user_id)
        except Exception as exc:
            logger.exception(
                "Failed to load profile", extra={"user_id": str(user_id)}
            )
            raise PersistenceError("Could not load your profile") from exc

    def save_profile(
        self, user_id: UUID, form: ProfileForm, profile_id: UUID | None
    ) -> UserProfile:
        """Insert the profile, or update it in place with the next version.

        Without a known ``profile_id`` the stored profile of the user, if any,
        is updated so each user keeps a single profile.
        """
        payload = form_to_row(form)
        payload["updated_at"] = datetime.now(tz=UTC).isoformat()
        try:
            if profile_id is None:
                existing = self.repository.get_latest(user_id)
                profile_id = existing.id if existing else None
            if profile_id is None:
                payload["version"] = 1
                return self.repository.insert(user_id, payload)
            stored_version = self.repository.get_version(profile_id)
            payload["version"] = (stored_version or 0) + 1
            return self.repository.update(profile_id, payload)
        except Exception as exc:
            logger.exception(
                "Failed to save profile", extra={"user_id": str(user_id)}
            )
            raise PersistenceError("Failed to save profile data") from exc

    def link_recommendation(self, profile_id: UUID, recommendation_id: UUID) -> None:
        """Record the active recommendation on the profile; failures are logged."""
        try:
            self.repository.set_current_recommendation(profile_id, recommendation_id)
        except Exception:
            logger.exception(
                "Failed to link recommendation to profile",
                extra={"profile_id": str(profile_id)},
            )
