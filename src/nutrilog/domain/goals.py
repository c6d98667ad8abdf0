"""Domain models for nutrition goals and the user profile."""

from dataclasses import dataclass

ACTIVITY_LEVELS: tuple[str, ...] = (
    "sedentary",
    "lightly_active",
    "moderately_active",
    "very_active",
)
FITNESS_GOALS: tuple[str, ...] = ("lose", "maintain", "gain")
GENDERS: tuple[str, ...] = ("male", "female")


@dataclass(frozen=True)
class Goals:
    """Daily nutrient targets; 0 means no target is set."""

    calories: float = 2000
    protein_g: float = 100
    carbs_g: float = 250
    fat_g: float = 70
    fiber_g: float = 30


@dataclass(frozen=True)
class Profile:
    """Biometric and activity profile used for goal recommendations."""

    age: int = 30
    gender: str = "male"
    height_cm: float = 180
    weight_kg: float = 80
    activity_level: str = "sedentary"
    fitness_goal: str = "maintain"


DEFAULT_GOALS = Goals()
DEFAULT_PROFILE = Profile()
