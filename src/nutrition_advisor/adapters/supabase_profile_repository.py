"""Supabase-backed diet profile repository."""

from dataclasses import dataclass
from uuid import UUID

from supabase import Client

from nutrition_advisor.domain.profiles import UserProfile, row_to_profile
from nutrition_advisor.services.profiles import ProfileRepository

_TABLE = "user_diet_profiles"


@dataclass
class SupabaseProfileRepository(ProfileRepository):
    """Supabase implementation for diet profiles."""

    client: Client

    def get_latest(self, user_id: UUID) -> UserProfile | None:
        """Return the most recently updated profile for a user."""
        response = (
            self.client.table(_TABLE)
            .select("*")
            .eq("user_id", str(user_id))
            .order("updated_at", desc=True)
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return row_to_profile(response.data[0])

    def get_version(self, profile_id: UUID) -> int | None:
        """Return the stored version of a profile."""
        response = (
            self.client.table(_TABLE)
            .select("version")
            .eq("id", str(profile_id))
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return int(response.data[0].get("version") or 0)

    def insert(self, user_id: UUID, payload: dict[str, object]) -> UserProfile:
        """Create a profile row and return it."""
        response = (
            self.client.table(_TABLE)
            .insert({**payload, "user_id": str(user_id)})
            .execute()
        )
        if not response.data:
            raise RuntimeError("Failed to create profile")
        return row_to_profile(response.data[0])

    def update(self, profile_id: UUID, payload: dict[str, object]) -> UserProfile:
        """Update a profile row and return it."""
        response = (
            self.client.table(_TABLE)
            .update(payload)
            .eq("id", str(profile_id))
            .execute()
        )
        if not response.data:
            raise RuntimeError("Failed to update profile")
        return row_to_profile(response.data[0])

    def set_current_recommendation(
        self, profile_id: UUID, recommendation_id: UUID
    ) -> None:
        """Point a profile at its active recommendation."""
        self.client.table(_TABLE).update(
            {"current_recommendation_id": str(recommendation_id)}
        ).eq("id", str(profile_id)).execute()
