"""Recommendation text generation using LLMs."""

import asyncio
import logging
from dataclasses import dataclass
from typing import Protocol

from nutrition_advisor.domain.profiles import ProfileForm
from nutrition_advisor.errors import GenerationError

logger = logging.getLogger(__name__)

SYSTEM_INSTRUCTIONS = (
    "You are a professional nutritionist and dietitian with expertise in "
    "creating personalized dietary recommendations. Provide comprehensive, "
    "evidence-based advice that is practical and achievable for the individual."
)


class TextGenerationClient(Protocol):
    """Interface for LLM text completion."""

    async def complete(  # noqa: PLR0913
        self,
        *,
        model: str,
        instructions: str,
        prompt: str,
        max_output_tokens: int,
        temperature: float,
        store: bool,
    ) -> str:
        """Return the generated text."""


@dataclass
class GenerationService:
    """Builds the recommendation prompt and bounds the generation call."""

    client: TextGenerationClient
    model: str
    max_output_tokens: int
    temperature: float
    store: bool
    timeout_seconds: float

    async def generate(self, form: ProfileForm) -> str:
        """Generate recommendation text for the questionnaire answers."""
        try:
            text = await asyncio.wait_for(
                self.client.complete(
                    model=self.model,
                    instructions=SYSTEM_INSTRUCTIONS,
                    prompt=build_prompt(form),
                    max_output_tokens=self.max_output_tokens,
                    temperature=self.temperature,
                    store=self.store,
                ),
                timeout=self.timeout_seconds,
            )
        except TimeoutError as exc:
            logger.warning(
                "Recommendation generation timed out",
                extra={"timeout_seconds": self.timeout_seconds},
            )
            raise GenerationError(
                "Generating your recommendation took too long. Please try again.",
                timed_out=True,
            ) from exc
        except Exception as exc:
            logger.exception("Recommendation generation failed")
            raise GenerationError(
                "Failed to generate recommendation. Please try again."
            ) from exc
        if not text or not text.strip():
            raise GenerationError("No recommendation received from AI")
        return text


def build_prompt(form: ProfileForm) -> str:
    """Render the questionnaire answers into the generation prompt."""
    restrictions = ", ".join(form.dietary_restrictions) or "None"
    return f"""Based on the following user information, create a comprehensive, personalized dietary recommendation:

Personal Details:
- Name: {form.name}
- Age: {form.age}
- Gender: {form.gender}
- Weight: {_with_unit(form.weight, "kg")}
- Height: {_with_unit(form.height, "cm")}
- Activity Level: {form.activity_level}

Dietary Information:
- Current Diet: {form.current_diet}
- Dietary Restrictions: {restrictions}
- Meals per Day: {form.meals_per_day}
- Cooking Time Available: {form.cooking_time}
- Budget: {form.budget}

Health & Goals:
- Health Goals: {form.health_goals}
- Medical Conditions: {form.medical_conditions or "None mentioned"}
- Food Preferences: {form.food_preferences}
- Additional Information: {form.additional_info or "None"}

Please provide a detailed dietary recommendation that includes:
1. A summary of their current situation
2. Specific dietary recommendations tailored to their goals
3. Sample meal ideas for different times of day
4. Nutritional guidelines and portion suggestions
5. Tips for implementation and sustainability
6. Any important considerations based on their restrictions or conditions

Format the response in a clear, encouraging, and actionable way using markdown formatting for headers and lists."""  # noqa: E501


def _with_unit(value: str, unit: str) -> str:
    return f"{value} {unit}" if value.strip() else "Not provided"
