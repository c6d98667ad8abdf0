"""Models for structured nutrition model outputs."""

from pydantic import BaseModel, Field


class NutritionEstimate(BaseModel):
    """Nutrition facts estimated for a free-text food description."""

    food_name: str = Field(min_length=1)
    calories: float = Field(ge=0.0)
    protein_g: float = Field(ge=0.0)
    carbs_g: float = Field(ge=0.0)
    fat_g: float = Field(ge=0.0)
    fiber_g: float = Field(default=0.0, ge=0.0)


class GoalRecommendation(BaseModel):
    """Daily targets recommended for a user profile."""

    calories: float = Field(ge=0.0)
    protein_g: float = Field(ge=0.0)
    carbs_g: float = Field(ge=0.0)
    fat_g: float = Field(ge=0.0)
    fiber_g: float = Field(ge=0.0)
