"""Single-user coordinator for logging food against daily goals."""

import dataclasses
import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import UTC, datetime
from uuid import uuid4
from zoneinfo import ZoneInfo

from nutrilog.domain.entries import DailyLog, DaySummary, Entry, Totals
from nutrilog.domain.goals import DEFAULT_GOALS, DEFAULT_PROFILE, Goals, Profile
from nutrilog.domain.inference import NutritionEstimate
from nutrilog.errors import BusyError, InferenceError, LoadError, SaveError
from nutrilog.services import aggregation, scoring
from nutrilog.services.goals import GoalStore, ProfileStore
from nutrilog.services.inference import InferenceService
from nutrilog.services.log_store import LogStore
from nutrilog.services.scoring import MetricProgress

_logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Notice:
    """User-visible error notice."""

    title: str
    message: str


def _new_entry_id() -> str:
    return str(uuid4())


@dataclass
class Tracker:
    """Drives the log, goals and profile for one user.

    `now` is passed into every call and converted to the configured timezone,
    so the day key never depends on the host clock or zone.
    """

    log_store: LogStore
    goal_store: GoalStore
    profile_store: ProfileStore
    inference: InferenceService
    timezone_name: str = "UTC"
    goals: Goals = DEFAULT_GOALS
    profile: Profile = DEFAULT_PROFILE
    busy: bool = False
    editing: str | None = None
    notice: Notice | None = None
    id_factory: Callable[[], str] = field(default=_new_entry_id)

    def load(self, now: datetime) -> None:
        """Load persisted state, recovering from unreadable data."""
        try:
            self.log_store.load(self._local(now))
        except LoadError as exc:
            _logger.warning("Failed to load saved log: %s", exc)
            self.notice = Notice("Load Error", "Could not load your saved data.")
        except SaveError as exc:
            _logger.warning("Failed to write back pruned log: %s", exc)
            self.notice = Notice("Save Error", "Could not save your log.")
        self.goals = self.goal_store.load()
        self.profile = self.profile_store.load()

    async def submit(self, description: str, now: datetime) -> Entry | None:
        """Analyze a description and log it, or apply it to the edited entry.

        Returns the logged entry, or None when nothing was logged.
        """
        if not description.strip():
            return None
        if self.busy:
            raise BusyError("A submission is already in progress")
        self.busy = True
        self.notice = None
        try:
            return await self._submit(description, now)
        finally:
            self.busy = False

    def start_edit(self, entry_id: str, now: datetime) -> str | None:
        """Enter edit mode for today's entry and return its original query."""
        entry = self.log_store.find(self._local(now), entry_id)
        if entry is None:
            return None
        self.editing = entry_id
        return entry.original_query

    def cancel_edit(self) -> None:
        """Leave edit mode without changing the log."""
        self.editing = None

    def delete(self, entry_id: str, now: datetime) -> bool:
        """Delete today's entry; unknown ids are ignored."""
        if self.editing == entry_id:
            self.editing = None
        local = self._local(now)
        found = self.log_store.find(local, entry_id) is not None
        self._persist(
            lambda: self.log_store.remove(local, entry_id), "Could not save your log."
        )
        return found

    def save_goals(self, goals: Goals) -> None:
        """Apply and persist new goals."""
        self.goals = goals
        self._persist(lambda: self.goal_store.save(goals), "Could not save goals.")

    def save_profile(self, profile: Profile) -> None:
        """Apply and persist a new profile."""
        self.profile = profile
        self._persist(
            lambda: self.profile_store.save(profile), "Could not save profile."
        )

    async def recommend_goals(self, profile: Profile) -> Goals | None:
        """Ask the model for goals suited to `profile` without applying them."""
        try:
            return await self.inference.recommend_goals(profile)
        except InferenceError as exc:
            _logger.warning("Goal recommendation failed: %s", exc)
            self.notice = Notice(
                "AI Error", "Failed to get a goal recommendation. Please try again."
            )
            return None

    def today(self, now: datetime) -> DailyLog:
        """Return today's entries, newest first."""
        return self.log_store.today(self._local(now))

    def totals(self, now: datetime) -> Totals:
        """Return today's nutrient totals."""
        return aggregation.totals(self.today(now))

    def score(self, now: datetime) -> int:
        """Return today's 0-100 health score."""
        return scoring.score(self.totals(now), self.goals)

    def progress(self, now: datetime) -> list[MetricProgress]:
        """Return today's per-metric progress toward goals."""
        return scoring.metric_progress(self.totals(now), self.goals)

    def history(self, now: datetime) -> list[DaySummary]:
        """Return summaries of the days before today."""
        return aggregation.history(self.log_store.weekly_log, self._local(now))

    async def _submit(self, description: str, now: datetime) -> Entry | None:
        editing = self.editing
        try:
            estimate = await self.inference.analyze_food(description)
        except InferenceError as exc:
            _logger.warning("Food analysis failed: %s", exc)
            self.notice = Notice(
                "AI Error", "Failed to analyze food. The AI service may be busy."
            )
            return None

        local = self._local(now)
        if editing is None:
            entry = _entry_from_estimate(
                estimate, self.id_factory(), description, local
            )
            self._persist(
                lambda: self.log_store.append(local, entry), "Could not save your log."
            )
            return entry

        if self.editing != editing:
            _logger.info("Discarding result for abandoned edit of %s", editing)
            return None
        self.editing = None

        def update(existing: Entry) -> Entry:
            return _apply_estimate(existing, estimate, description)

        self._persist(
            lambda: self.log_store.replace(local, editing, update),
            "Could not save your log.",
        )
        return self.log_store.find(local, editing)

    def _persist(self, action: Callable[[], object], message: str) -> None:
        try:
            action()
        except SaveError as exc:
            _logger.warning("Save failed: %s", exc)
            self.notice = Notice("Save Error", message)

    def _local(self, now: datetime) -> datetime:
        if now.tzinfo is None:
            now = now.replace(tzinfo=UTC)
        return now.astimezone(ZoneInfo(self.timezone_name))


def _entry_from_estimate(
    estimate: NutritionEstimate, entry_id: str, query: str, timestamp: datetime
) -> Entry:
    return Entry(
        id=entry_id,
        food_name=estimate.food_name,
        calories=estimate.calories,
        protein_g=estimate.protein_g,
        carbs_g=estimate.carbs_g,
        fat_g=estimate.fat_g,
        fiber_g=estimate.fiber_g,
        original_query=query,
        timestamp=timestamp,
    )


def _apply_estimate(entry: Entry, estimate: NutritionEstimate, query: str) -> Entry:
    return dataclasses.replace(
        entry,
        food_name=estimate.food_name,
        calories=estimate.calories,
        protein_g=estimate.protein_g,
        carbs_g=estimate.carbs_g,
        fat_g=estimate.fat_g,
        fiber_g=estimate.fiber_g,
        original_query=query,
    )
