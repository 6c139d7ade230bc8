"""Pydantic models for API request bodies."""

from pydantic import BaseModel


class ProfileUpdate(BaseModel):
    """Partial questionnaire edits; omitted fields stay unchanged."""

    name: str | None = None
    age: str | None = None
    gender: str | None = None
    weight: str | None = None
    height: str | None = None
    activity_level: str | None = None
    dietary_restrictions: list[str] | None = None
    health_goals: str | None = None
    current_diet: str | None = None
    meals_per_day: str | None = None
    cooking_time: str | None = None
    budget: str | None = None
    medical_conditions: str | None = None
    food_preferences: str | None = None
    additional_info: str | None = None


class RestrictionToggle(BaseModel):
    """Checkbox state for one dietary restriction."""

    checked: bool


class RedirectUrl(BaseModel):
    """URL the client should open."""

    url: str
