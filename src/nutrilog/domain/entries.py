"""Domain models for logged food entries."""

from dataclasses import dataclass
from datetime import date, datetime

NUTRIENTS: tuple[str, ...] = ("calories", "protein_g", "carbs_g", "fat_g", "fiber_g")


@dataclass(frozen=True)
class Entry:
    """One logged food item with its estimated nutrition."""

    id: str
    food_name: str
    calories: float
    protein_g: float
    carbs_g: float
    fat_g: float
    original_query: str
    timestamp: datetime
    fiber_g: float = 0.0


DailyLog = list[Entry]
WeeklyLog = dict[str, DailyLog]


@dataclass(frozen=True)
class Totals:
    """Summed nutrient values for a daily log."""

    calories: float = 0.0
    protein_g: float = 0.0
    carbs_g: float = 0.0
    fat_g: float = 0.0
    fiber_g: float = 0.0


@dataclass(frozen=True)
class DaySummary:
    """Compact view of a past day for history display."""

    day: date
    item_count: int
    calories: float
    protein_g: float
