"""Persisted goal and profile records."""

import json
import logging
import math
from dataclasses import dataclass

from nutrilog.domain.goals import (
    ACTIVITY_LEVELS,
    DEFAULT_GOALS,
    DEFAULT_PROFILE,
    FITNESS_GOALS,
    GENDERS,
    Goals,
    Profile,
)
from nutrilog.errors import LoadError, SaveError
from nutrilog.services.storage import KeyValueStorage

GOALS_KEY = "nutritionGoals"
PROFILE_KEY = "userProfile"

_logger = logging.getLogger(__name__)


@dataclass
class GoalStore:
    """Loads and saves the user's daily nutrient goals."""

    storage: KeyValueStorage

    def load(self) -> Goals:
        """Return saved goals, or the defaults when missing or malformed."""
        try:
            raw = self.storage.get(GOALS_KEY)
            if raw is None:
                return DEFAULT_GOALS
            return parse_goals(raw)
        except LoadError as exc:
            _logger.warning("Falling back to default goals: %s", exc)
            return DEFAULT_GOALS

    def save(self, goals: Goals) -> None:
        """Persist goals."""
        _write(self.storage, GOALS_KEY, goals_to_row(goals))


@dataclass
class ProfileStore:
    """Loads and saves the user's biometric profile."""

    storage: KeyValueStorage

    def load(self) -> Profile:
        """Return the saved profile, or the default when missing or malformed."""
        try:
            raw = self.storage.get(PROFILE_KEY)
            if raw is None:
                return DEFAULT_PROFILE
            return parse_profile(raw)
        except LoadError as exc:
            _logger.warning("Falling back to default profile: %s", exc)
            return DEFAULT_PROFILE

    def save(self, profile: Profile) -> None:
        """Persist the profile."""
        _write(self.storage, PROFILE_KEY, profile_to_row(profile))


def parse_goals(raw: str) -> Goals:
    """Parse persisted goals; absent or blank targets mean no target."""
    try:
        payload = json.loads(raw)
        if not isinstance(payload, dict):
            raise TypeError("goals must be a JSON object")
        return Goals(
            calories=_target(payload.get("calories")),
            protein_g=_target(payload.get("protein_g")),
            carbs_g=_target(payload.get("carbs_g")),
            fat_g=_target(payload.get("fat_g")),
            fiber_g=_target(payload.get("fiber_g")),
        )
    except (TypeError, ValueError) as exc:
        raise LoadError(f"Malformed goals: {exc}") from exc


def parse_profile(raw: str) -> Profile:
    """Parse a persisted profile."""
    try:
        payload = json.loads(raw)
        if not isinstance(payload, dict):
            raise TypeError("profile must be a JSON object")
        activity_level = str(payload["activityLevel"])
        fitness_goal = str(payload["fitnessGoal"])
        gender = str(payload["gender"])
        if activity_level not in ACTIVITY_LEVELS:
            raise ValueError(f"unknown activity level {activity_level!r}")
        if fitness_goal not in FITNESS_GOALS:
            raise ValueError(f"unknown fitness goal {fitness_goal!r}")
        if gender not in GENDERS:
            raise ValueError(f"unknown gender {gender!r}")
        return Profile(
            age=_age(payload.get("age")),
            gender=gender,
            height_cm=float(payload["height"]),
            weight_kg=float(payload["weight"]),
            activity_level=activity_level,
            fitness_goal=fitness_goal,
        )
    except (KeyError, TypeError, ValueError) as exc:
        raise LoadError(f"Malformed profile: {exc}") from exc


def goals_to_row(goals: Goals) -> dict[str, object]:
    """Return the persisted form of goals."""
    return {
        "calories": goals.calories,
        "protein_g": goals.protein_g,
        "carbs_g": goals.carbs_g,
        "fat_g": goals.fat_g,
        "fiber_g": goals.fiber_g,
    }


def profile_to_row(profile: Profile) -> dict[str, object]:
    """Return the persisted form of a profile."""
    return {
        "age": profile.age,
        "gender": profile.gender,
        "height": profile.height_cm,
        "weight": profile.weight_kg,
        "activityLevel": profile.activity_level,
        "fitnessGoal": profile.fitness_goal,
    }


def _target(value: object) -> float:
    if value is None or value == "":
        return 0.0
    return float(value)  # type: ignore[arg-type]


def _age(value: object) -> int:
    if value is None or value == "":
        return DEFAULT_PROFILE.age
    age = float(value)  # type: ignore[arg-type]
    if not math.isfinite(age):
        raise ValueError(f"invalid age {value!r}")
    return int(age)


def _write(storage: KeyValueStorage, key: str, row: dict[str, object]) -> None:
    try:
        payload = json.dumps(row)
    except (TypeError, ValueError) as exc:
        raise SaveError(f"Could not serialize {key}: {exc}") from exc
    storage.set(key, payload)
