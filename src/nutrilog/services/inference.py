"""Nutrition estimates and goal recommendations from an LLM."""

import logging
from dataclasses import dataclass
from typing import Protocol

from pydantic import ValidationError

from nutrilog.domain.goals import Goals, Profile
from nutrilog.domain.inference import GoalRecommendation, NutritionEstimate
from nutrilog.errors import InferenceError

_logger = logging.getLogger(__name__)

_NUMBER: dict[str, object] = {"type": "number", "minimum": 0}

NUTRITION_SCHEMA: dict[str, object] = {
    "type": "object",
    "properties": {
        "food_name": {"type": "string"},
        "calories": _NUMBER,
        "protein_g": _NUMBER,
        "carbs_g": _NUMBER,
        "fat_g": _NUMBER,
        "fiber_g": _NUMBER,
    },
    "required": ["food_name", "calories", "protein_g", "carbs_g", "fat_g", "fiber_g"],
    "additionalProperties": False,
}

GOALS_SCHEMA: dict[str, object] = {
    "type": "object",
    "properties": {
        "calories": _NUMBER,
        "protein_g": _NUMBER,
        "carbs_g": _NUMBER,
        "fat_g": _NUMBER,
        "fiber_g": _NUMBER,
    },
    "required": ["calories", "protein_g", "carbs_g", "fat_g", "fiber_g"],
    "additionalProperties": False,
}

ANALYSIS_SYSTEM_PROMPT = (
    "You are a nutritional analysis expert. Respond ONLY with a JSON object."
)

GOALS_SYSTEM_PROMPT = (
    "You are a nutritional expert. Calculate BMR using Mifflin-St Jeor, then "
    "daily calories using the Harris-Benedict activity multiplier. Adjust "
    "calories based on fitness goal (-500 for weight loss, +300 for muscle "
    "gain). Set protein to 1.6g/kg for muscle gain, 1.2g/kg otherwise. Set fat "
    "to 25% of calories. Fill the rest with carbs. Fiber should be 14g per 1000 "
    "calories. Respond ONLY with a JSON object with integer values."
)


class NutritionModelClient(Protocol):
    """Interface for structured LLM generation."""

    async def generate(  # noqa: PLR0913
        self,
        *,
        model: str,
        system_prompt: str,
        prompt: str,
        schema: dict[str, object],
        schema_name: str,
    ) -> dict[str, object]:
        """Return a JSON object matching `schema`."""


@dataclass
class InferenceService:
    """Builds prompts for the nutrition model and validates its answers."""

    client: NutritionModelClient
    model: str

    async def analyze_food(self, description: str) -> NutritionEstimate:
        """Estimate nutrition facts for a free-text food description."""
        raw = await self._generate(
            system_prompt=ANALYSIS_SYSTEM_PROMPT,
            prompt=(
                "Analyze the following food item and provide its nutritional "
                f'information: "{description}"'
            ),
            schema=NUTRITION_SCHEMA,
            schema_name="nutrition_estimate",
        )
        try:
            return NutritionEstimate.model_validate(raw)
        except ValidationError as exc:
            _logger.warning("Invalid nutrition estimate: %s", exc)
            raise InferenceError("Invalid response from nutrition service.") from exc

    async def recommend_goals(self, profile: Profile) -> Goals:
        """Recommend daily goals for a profile."""
        raw = await self._generate(
            system_prompt=GOALS_SYSTEM_PROMPT,
            prompt=_profile_prompt(profile),
            schema=GOALS_SCHEMA,
            schema_name="goal_recommendation",
        )
        try:
            recommendation = GoalRecommendation.model_validate(raw)
        except ValidationError as exc:
            _logger.warning("Invalid goal recommendation: %s", exc)
            raise InferenceError("Invalid response from AI goal service.") from exc
        return Goals(
            calories=recommendation.calories,
            protein_g=recommendation.protein_g,
            carbs_g=recommendation.carbs_g,
            fat_g=recommendation.fat_g,
            fiber_g=recommendation.fiber_g,
        )

    async def _generate(
        self,
        *,
        system_prompt: str,
        prompt: str,
        schema: dict[str, object],
        schema_name: str,
    ) -> dict[str, object]:
        try:
            return await self.client.generate(
                model=self.model,
                system_prompt=system_prompt,
                prompt=prompt,
                schema=schema,
                schema_name=schema_name,
            )
        except InferenceError:
            raise
        except Exception as exc:
            _logger.warning("Nutrition model call failed (%s): %s", schema_name, exc)
            raise InferenceError(f"Nutrition model call failed: {exc}") from exc


def _profile_prompt(profile: Profile) -> str:
    return (
        "Based on the following user profile, calculate their nutritional goals "
        "(calories, protein, carbs, fat, fiber).\n"
        f"- Age: {profile.age}\n"
        f"- Gender: {profile.gender}\n"
        f"- Height: {profile.height_cm:g} cm\n"
        f"- Weight: {profile.weight_kg:g} kg\n"
        f"- Activity Level: {profile.activity_level}\n"
        f"- Fitness Goal: {profile.fitness_goal}"
    )
