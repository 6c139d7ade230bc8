"""Domain models for diet profiles."""

import math
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from uuid import UUID

from pydantic import BaseModel, Field

from nutrition_advisor.errors import ValidationError


class Gender(str, Enum):
    """Gender options offered by the questionnaire."""

    MALE = "male"
    FEMALE = "female"
    OTHER = "other"
    UNSET = ""


class ActivityLevel(str, Enum):
    """Self-reported activity levels."""

    SEDENTARY = "sedentary"
    LIGHT = "light"
    MODERATE = "moderate"
    ACTIVE = "active"
    VERY_ACTIVE = "very-active"


class MealsPerDay(str, Enum):
    """Meals per day; ``"5"`` stands for five or more."""

    TWO = "2"
    THREE = "3"
    FOUR = "4"
    FIVE_PLUS = "5"


class CookingTime(str, Enum):
    """Time available for cooking."""

    MINIMAL = "minimal"
    MODERATE = "moderate"
    FLEXIBLE = "flexible"


class Budget(str, Enum):
    """Food budget."""

    LOW = "low"
    MODERATE = "moderate"
    FLEXIBLE = "flexible"


DIETARY_RESTRICTIONS: tuple[str, ...] = (
    "Vegetarian",
    "Vegan",
    "Gluten-free",
    "Dairy-free",
    "Nut-free",
    "Low-carb",
    "Keto",
    "Paleo",
    "Halal",
    "Kosher",
)

_COMPLETION_FIELDS = (
    "age",
    "gender",
    "weight",
    "height",
    "activity_level",
    "health_goals",
    "current_diet",
    "meals_per_day",
    "cooking_time",
    "budget",
)

_ENUM_FIELDS: dict[str, type[Enum]] = {
    "gender": Gender,
    "activity_level": ActivityLevel,
    "meals_per_day": MealsPerDay,
    "cooking_time": CookingTime,
    "budget": Budget,
}


class ProfileForm(BaseModel):
    """Questionnaire answers as entered, before conversion."""

    name: str = ""
    age: str = ""
    gender: str = ""
    weight: str = ""
    height: str = ""
    activity_level: str = ""
    dietary_restrictions: list[str] = Field(default_factory=list)
    health_goals: str = ""
    current_diet: str = ""
    meals_per_day: str = ""
    cooking_time: str = ""
    budget: str = ""
    medical_conditions: str = ""
    food_preferences: str = ""
    additional_info: str = ""


@dataclass(frozen=True)
class UserProfile:
    """Persisted diet profile row."""

    id: UUID
    user_id: UUID
    name: str
    age: int | None
    gender: str
    weight: float | None
    height: float | None
    activity_level: str
    dietary_restrictions: list[str] = field(default_factory=list)
    health_goals: str = ""
    current_diet: str = ""
    meals_per_day: str = ""
    cooking_time: str = ""
    budget: str = ""
    medical_conditions: str = ""
    food_preferences: str = ""
    additional_info: str = ""
    version: int = 1
    current_recommendation_id: UUID | None = None
    updated_at: datetime | None = None


def profile_to_form(profile: UserProfile) -> ProfileForm:
    """Load a stored profile back into questionnaire answers."""
    return ProfileForm(
        name=profile.name or "",
        age=_number_text(profile.age),
        gender=profile.gender or "",
        weight=_number_text(profile.weight),
        height=_number_text(profile.height),
        activity_level=profile.activity_level or "",
        dietary_restrictions=list(profile.dietary_restrictions or []),
        health_goals=profile.health_goals or "",
        current_diet=profile.current_diet or "",
        meals_per_day=profile.meals_per_day or "",
        cooking_time=profile.cooking_time or "",
        budget=profile.budget or "",
        medical_conditions=profile.medical_conditions or "",
        food_preferences=profile.food_preferences or "",
        additional_info=profile.additional_info or "",
    )


def form_to_row(form: ProfileForm) -> dict[str, object]:
    """Convert questionnaire answers into a storable row payload."""
    for name, enum_type in _ENUM_FIELDS.items():
        value = getattr(form, name)
        if value and value not in {member.value for member in enum_type}:
            raise ValidationError(f"Unsupported {name.replace('_', ' ')}: {value}")
    age = _parse_number(form.age, "age", int)
    if age is not None and age < 0:
        raise ValidationError("Age cannot be negative")
    weight = _parse_number(form.weight, "weight", float)
    height = _parse_number(form.height, "height", float)
    for label, value in (("weight", weight), ("height", height)):
        if value is not None and value <= 0:
            raise ValidationError(f"{label.capitalize()} must be positive")
    return {
        "name": form.name,
        "age": age,
        "gender": form.gender,
        "weight": weight,
        "height": height,
        "activity_level": form.activity_level,
        "dietary_restrictions": list(dict.fromkeys(form.dietary_restrictions)),
        "health_goals": form.health_goals,
        "current_diet": form.current_diet,
        "meals_per_day": form.meals_per_day,
        "cooking_time": form.cooking_time,
        "budget": form.budget,
        "medical_conditions": form.medical_conditions,
        "food_preferences": form.food_preferences,
        "additional_info": form.additional_info,
    }


def row_to_profile(row: dict[str, object]) -> UserProfile:
    """Build a profile record from a database row."""
    current = row.get("current_recommendation_id")
    updated_at = row.get("updated_at")
    return UserProfile(
        id=UUID(str(row["id"])),
        user_id=UUID(str(row["user_id"])),
        name=str(row.get("name") or ""),
        age=row.get("age"),
        gender=str(row.get("gender") or ""),
        weight=row.get("weight"),
        height=row.get("height"),
        activity_level=str(row.get("activity_level") or ""),
        dietary_restrictions=list(row.get("dietary_restrictions") or []),
        health_goals=str(row.get("health_goals") or ""),
        current_diet=str(row.get("current_diet") or ""),
        meals_per_day=str(row.get("meals_per_day") or ""),
        cooking_time=str(row.get("cooking_time") or ""),
        budget=str(row.get("budget") or ""),
        medical_conditions=str(row.get("medical_conditions") or ""),
        food_preferences=str(row.get("food_preferences") or ""),
        additional_info=str(row.get("additional_info") or ""),
        version=int(row.get("version") or 1),
        current_recommendation_id=UUID(str(current)) if current else None,
        updated_at=(
            datetime.fromisoformat(str(updated_at)) if updated_at else None
        ),
    )


def completion_percentage(form: ProfileForm) -> int:
    """Percent of the core profile fields that are filled in."""
    filled = sum(1 for name in _COMPLETION_FIELDS if getattr(form, name).strip())
    return round(filled / len(_COMPLETION_FIELDS) * 100)


def _number_text(value: float | None) -> str:
    if value is None:
        return ""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def _parse_number(raw: str, label: str, kind: type) -> float | None:
    cleaned = raw.strip()
    if not cleaned:
        return None
    try:
        value = float(cleaned)
    except ValueError as exc:
        raise ValidationError(f"{label.capitalize()} must be a number") from exc
    if not math.isfinite(value):
        raise ValidationError(f"{label.capitalize()} must be a number")
    return kind(value)
