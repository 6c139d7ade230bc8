"""Domain models for generated recommendations."""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from uuid import UUID


class RecommendationStatus(str, Enum):
    """Lifecycle of a recommendation; only the status ever changes."""

    ACTIVE = "active"
    ARCHIVED = "archived"


@dataclass(frozen=True)
class Recommendation:
    """A generated recommendation tied to the profile that produced it."""

    id: UUID
    user_id: UUID
    profile_id: UUID
    text: str
    generated_at: datetime
    status: RecommendationStatus = RecommendationStatus.ACTIVE


@dataclass(frozen=True)
class HistoryEntry:
    """Recommendation joined with the profile snapshot it was generated from."""

    recommendation: Recommendation
    profile: dict[str, object]
    is_current: bool = False


_SNAPSHOT_LABELS = (
    ("name", "Name"),
    ("age", "Age"),
    ("gender", "Gender"),
    ("weight", "Weight"),
    ("height", "Height"),
    ("activity_level", "Activity Level"),
    ("dietary_restrictions", "Dietary Restrictions"),
    ("health_goals", "Health Goals"),
    ("current_diet", "Current Diet"),
    ("meals_per_day", "Meals per Day"),
    ("cooking_time", "Cooking Time"),
    ("budget", "Budget"),
)

_OPTIONAL_LABELS = (
    ("medical_conditions", "Medical Conditions"),
    ("food_preferences", "Food Preferences"),
    ("additional_info", "Additional Info"),
)


def format_profile_snapshot(profile: dict[str, object]) -> str:
    """Summarize a profile snapshot on one line."""
    parts = []
    for key, label in _SNAPSHOT_LABELS:
        value = profile.get(key)
        if key == "dietary_restrictions":
            restrictions = value if isinstance(value, list) else []
            value = ", ".join(str(item) for item in restrictions) or "None"
        parts.append(f"{label}: {'' if value is None else value}")
    for key, label in _OPTIONAL_LABELS:
        value = profile.get(key)
        if value:
            parts.append(f"{label}: {value}")
    return " • ".join(parts)
