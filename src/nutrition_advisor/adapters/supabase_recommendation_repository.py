"""Supabase-backed recommendation repository."""

from dataclasses import dataclass
from datetime import datetime
from uuid import UUID

from supabase import Client

from nutrition_advisor.domain.recommendations import (
    HistoryEntry,
    Recommendation,
    RecommendationStatus,
)
from nutrition_advisor.services.recommendations import RecommendationRepository

_TABLE = "diet_recommendations"
_COLUMNS = "id, user_id, profile_id, recommendation_text, generated_at, status"
_PROFILE_COLUMNS = (
    "id, name, age, gender, weight, height, activity_level, dietary_restrictions, "
    "health_goals, current_diet, meals_per_day, cooking_time, budget, "
    "medical_conditions, food_preferences, additional_info, version"
)


@dataclass
class SupabaseRecommendationRepository(RecommendationRepository):
    """Supabase implementation for recommendations."""

    client: Client

    def archive_active(self, user_id: UUID) -> None:
        """Archive every active recommendation of the user."""
        self.client.table(_TABLE).update(
            {"status": RecommendationStatus.ARCHIVED.value}
        ).eq("user_id", str(user_id)).eq(
            "status", RecommendationStatus.ACTIVE.value
        ).execute()

    def create(self, user_id: UUID, profile_id: UUID, text: str) -> Recommendation:
        """Insert an active recommendation and return it."""
        response = (
            self.client.table(_TABLE)
            .insert(
                {
                    "user_id": str(user_id),
                    "profile_id": str(profile_id),
                    "recommendation_text": text,
                    "status": RecommendationStatus.ACTIVE.value,
                }
            )
            .execute()
        )
        if not response.data:
            raise RuntimeError("Failed to create recommendation")
        return _to_recommendation(response.data[0])

    def get(self, recommendation_id: UUID) -> Recommendation | None:
        """Return a recommendation by id, if present."""
        response = (
            self.client.table(_TABLE)
            .select(_COLUMNS)
            .eq("id", str(recommendation_id))
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return _to_recommendation(response.data[0])

    def list_history(self, user_id: UUID) -> list[HistoryEntry]:
        """Return recommendations joined with their profile, newest first."""
        response = (
            self.client.table(_TABLE)
            .select(f"{_COLUMNS}, user_diet_profiles!inner ({_PROFILE_COLUMNS})")
            .eq("user_id", str(user_id))
            .order("generated_at", desc=True)
            .execute()
        )
        entries = []
        for row in response.data or []:
            profile = row.get("user_diet_profiles") or {}
            entries.append(
                HistoryEntry(
                    recommendation=_to_recommendation(row),
                    profile=dict(profile) if isinstance(profile, dict) else {},
                )
            )
        return entries


def _to_recommendation(row: dict[str, object]) -> Recommendation:
    return Recommendation(
        id=UUID(str(row["id"])),
        user_id=UUID(str(row["user_id"])),
        profile_id=UUID(str(row["profile_id"])),
        text=str(row.get("recommendation_text") or ""),
        generated_at=datetime.fromisoformat(str(row["generated_at"])),
        status=RecommendationStatus(row.get("status") or "active"),
    )
