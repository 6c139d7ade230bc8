"""Questionnaire state machine and the generate action."""

import logging
from dataclasses import dataclass, field
from enum import Enum, IntEnum
from uuid import UUID

import pydantic

from nutrition_advisor.domain.models import UserRecord
from nutrition_advisor.domain.profiles import (
    DIETARY_RESTRICTIONS,
    ProfileForm,
    profile_to_form,
)
from nutrition_advisor.domain.recommendations import Recommendation
from nutrition_advisor.errors import (
    AdvisorError,
    QuotaExceededError,
    ValidationError,
)
from nutrition_advisor.services.access import AccessContext
from nutrition_advisor.services.generation import GenerationService
from nutrition_advisor.services.profiles import ProfileService
from nutrition_advisor.services.recommendations import RecommendationService

logger = logging.getLogger(__name__)


class WizardStep(IntEnum):
    """Linear questionnaire steps."""

    WELCOME = 0
    BASIC_INFO = 1
    PHYSICAL_DETAILS = 2
    LIFESTYLE = 3
    DIETARY_PREFERENCES = 4
    HEALTH_GOALS = 5
    ADDITIONAL_INFO = 6
    RESULTS = 7


class Mode(Enum):
    """Top-level view the session is in."""

    DASHBOARD = "dashboard"
    WIZARD = "wizard"


STEP_TITLES: dict[WizardStep, str] = {
    WizardStep.WELCOME: "Welcome",
    WizardStep.BASIC_INFO: "Basic Info",
    WizardStep.PHYSICAL_DETAILS: "Physical Details",
    WizardStep.LIFESTYLE: "Lifestyle",
    WizardStep.DIETARY_PREFERENCES: "Dietary Preferences",
    WizardStep.HEALTH_GOALS: "Health & Goals",
    WizardStep.ADDITIONAL_INFO: "Additional Info",
    WizardStep.RESULTS: "Results",
}

_REQUIRED_FIELDS: dict[WizardStep, tuple[str, ...]] = {
    WizardStep.BASIC_INFO: ("name", "age", "gender"),
    WizardStep.PHYSICAL_DETAILS: ("weight", "height", "activity_level"),
    WizardStep.LIFESTYLE: ("current_diet", "meals_per_day", "cooking_time"),
    WizardStep.HEALTH_GOALS: ("health_goals",),
}

QUESTION_STEPS = WizardStep.ADDITIONAL_INFO - WizardStep.WELCOME
QUOTA_MESSAGE = (
    "You've used your free recommendation for today. "
    "Upgrade to Premium for unlimited recommendations."
)


def can_advance(step: int, form: ProfileForm | dict[str, object]) -> bool:
    """Return True when every required field of ``step`` is filled in."""
    try:
        required = _REQUIRED_FIELDS.get(WizardStep(step), ())
    except ValueError:
        return True
    values = form if isinstance(form, dict) else form.model_dump()
    return all(_filled(values.get(name)) for name in required)


def _filled(value: object) -> bool:
    return value is not None and bool(str(value).strip())


@dataclass
class WizardController:
    """One user's questionnaire session.

    The controller owns the unsaved form. Leaving for the dashboard restores
    the last saved answers; only ``generate`` persists anything.
    """

    user: UserRecord
    profile_service: ProfileService
    recommendation_service: RecommendationService
    generation_service: GenerationService
    access: AccessContext
    form: ProfileForm = field(default_factory=ProfileForm)
    step: WizardStep = WizardStep.WELCOME
    mode: Mode = Mode.WIZARD
    profile_id: UUID | None = None
    profile_version: int | None = None
    recommendation: Recommendation | None = None
    is_loading: bool = False
    notice: str | None = None
    _saved_form: ProfileForm = field(
        default_factory=ProfileForm, init=False, repr=False
    )

    async def load(self) -> bool:
        """Load the stored profile and quota state; open the dashboard if known.

        Returns False when the profile could not be read, so callers can avoid
        keeping a session that does not know whether a profile exists.
        """
        loaded = True
        try:
            profile = self.profile_service.load_profile(self.user.id)
            if profile is not None:
                self.form = profile_to_form(profile)
                self._saved_form = self.form.model_copy(deep=True)
                self.profile_id = profile.id
                self.profile_version = profile.version
                self.recommendation = self.recommendation_service.get(
                    profile.current_recommendation_id
                )
                self.mode = Mode.DASHBOARD
        except AdvisorError as exc:
            self.notice = exc.message
            loaded = False
        await self.access.refresh()
        return loaded

    @property
    def saved_form(self) -> ProfileForm:
        """Answers as last loaded from or written to the store."""
        return self._saved_form

    @property
    def has_profile(self) -> bool:
        """Return True once a profile has been saved."""
        return self.profile_id is not None

    @property
    def next_enabled(self) -> bool:
        """Whether the Next affordance should be enabled."""
        return (
            self.mode is Mode.WIZARD
            and self.step < WizardStep.ADDITIONAL_INFO
            and can_advance(self.step, self.form)
        )

    @property
    def generate_enabled(self) -> bool:
        """Whether the Generate affordance should be enabled."""
        return (
            self.mode is Mode.WIZARD
            and self.step == WizardStep.ADDITIONAL_INFO
            and not self.is_loading
            and self.access.can_use_feature()
        )

    @property
    def progress(self) -> dict[str, object] | None:
        """Progress through the question steps, hidden on welcome and results."""
        if self.step in {WizardStep.WELCOME, WizardStep.RESULTS}:
            return None
        return {
            "step": int(self.step),
            "of": int(QUESTION_STEPS),
            "percent": round(self.step / QUESTION_STEPS * 100),
            "label": f"Step {int(self.step)} of {int(QUESTION_STEPS)}",
        }

    def start_questionnaire(self) -> None:
        """Enter the questionnaire at the welcome step."""
        self.mode = Mode.WIZARD
        self.step = WizardStep.WELCOME
        self.notice = None

    def back_to_dashboard(self) -> bool:
        """Leave the questionnaire, dropping unsaved edits."""
        if not self.has_profile:
            return False
        self.form = self._saved_form.model_copy(deep=True)
        self.mode = Mode.DASHBOARD
        self.notice = None
        return True

    def update_fields(self, values: dict[str, object]) -> None:
        """Apply edits to the unsaved form."""
        unknown = set(values) - set(ProfileForm.model_fields)
        if unknown:
            names = ", ".join(sorted(unknown))
            raise ValidationError(f"Unknown profile fields: {names}")
        try:
            self.form = ProfileForm.model_validate(
                {**self.form.model_dump(), **values}
            )
        except pydantic.ValidationError as exc:
            raise ValidationError("Invalid profile answers") from exc

    def toggle_restriction(self, restriction: str, checked: bool) -> None:
        """Add or remove a dietary restriction tag."""
        if restriction not in DIETARY_RESTRICTIONS:
            raise ValidationError(f"Unknown dietary restriction: {restriction}")
        current = [tag for tag in self.form.dietary_restrictions if tag != restriction]
        if checked:
            current.append(restriction)
        self.form = self.form.model_copy(update={"dietary_restrictions": current})

    def reset_form(self) -> None:
        """Clear the answers; the next save still updates the same profile."""
        self.form = ProfileForm()
        self.step = WizardStep.WELCOME
        self.mode = Mode.WIZARD

    def advance(self) -> bool:
        """Move to the next step when the current step's guard passes."""
        if not self.next_enabled:
            return False
        self.step = WizardStep(self.step + 1)
        return True

    def back(self) -> bool:
        """Move to the previous question step."""
        if self.mode is not Mode.WIZARD or self.step in {
            WizardStep.WELCOME,
            WizardStep.RESULTS,
        }:
            return False
        self.step = WizardStep(self.step - 1)
        return True

    async def generate(self) -> Recommendation | None:
        """Save the profile, generate and store a recommendation.

        Returns None when a generation is already in flight. On any failure
        the step is unchanged and the usage counter is untouched; a profile
        saved before the failure stays saved.
        """
        if self.is_loading:
            logger.info(
                "Ignoring generate while one is in flight",
                extra={"user_id": str(self.user.id)},
            )
            return None
        if self.mode is not Mode.WIZARD or self.step != WizardStep.ADDITIONAL_INFO:
            raise ValidationError("Finish the questionnaire before generating")
        self.is_loading = True
        self.notice = None
        try:
            if not self.access.can_use_feature():
                raise QuotaExceededError(QUOTA_MESSAGE)
            profile = self.profile_service.save_profile(
                self.user.id, self.form, self.profile_id
            )
            self.profile_id = profile.id
            self.profile_version = profile.version
            self._saved_form = self.form.model_copy(deep=True)
            text = await self.generation_service.generate(self.form)
            recommendation = self.recommendation_service.save(
                self.user.id, profile.id, text
            )
            self.recommendation = recommendation
            self.step = WizardStep.RESULTS
            if not self.access.subscription.subscribed:
                await self.access.record_usage()
        except AdvisorError as exc:
            self.notice = exc.message
            raise
        finally:
            self.is_loading = False
        return recommendation
