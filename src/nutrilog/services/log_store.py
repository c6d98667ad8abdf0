"""Date-keyed weekly log with trailing-window retention."""

import dataclasses
import json
import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import UTC, date, datetime, timedelta

from nutrilog.domain.entries import DailyLog, Entry, WeeklyLog
from nutrilog.errors import LoadError, SaveError
from nutrilog.services.storage import KeyValueStorage

WEEKLY_LOG_KEY = "weeklyLog"
RETENTION_DAYS = 7

_logger = logging.getLogger(__name__)


def day_key(now: datetime) -> str:
    """Return the `YYYY-MM-DD` log key for the local date of `now`."""
    return now.date().isoformat()


def prune(now: datetime, weekly_log: WeeklyLog) -> WeeklyLog:
    """Drop every day outside `[now - 7 days, now]`.

    A date exactly seven days back is kept. Keys that are not valid ISO dates
    are dropped as well.
    """
    today = now.date()
    cutoff = today - timedelta(days=RETENTION_DAYS)
    kept: WeeklyLog = {}
    for key, entries in weekly_log.items():
        key_date = parse_day_key(key)
        if key_date is None or not cutoff <= key_date <= today:
            continue
        kept[key] = entries
    return kept


def append_entry(weekly_log: WeeklyLog, today_key: str, entry: Entry) -> WeeklyLog:
    """Insert an entry into today's log, newest timestamp first."""
    day = sorted(
        [entry, *weekly_log.get(today_key, [])],
        key=lambda item: _sort_key(item.timestamp),
        reverse=True,
    )
    return {**weekly_log, today_key: day}


def replace_entry(
    weekly_log: WeeklyLog,
    today_key: str,
    entry_id: str,
    updater: Callable[[Entry], Entry],
) -> WeeklyLog:
    """Replace today's entry with `entry_id` using `updater`.

    The entry keeps its id and timestamp whatever the updater returns. An
    unknown id leaves the log unchanged, so a late edit of a deleted entry is
    harmless.
    """
    day = weekly_log.get(today_key, [])
    for index, existing in enumerate(day):
        if existing.id != entry_id:
            continue
        updated = dataclasses.replace(
            updater(existing), id=existing.id, timestamp=existing.timestamp
        )
        new_day = [*day[:index], updated, *day[index + 1 :]]
        return {**weekly_log, today_key: new_day}
    return weekly_log


def remove_entry(weekly_log: WeeklyLog, today_key: str, entry_id: str) -> WeeklyLog:
    """Remove today's entry with `entry_id`; unknown ids are a no-op."""
    day = weekly_log.get(today_key, [])
    if not any(entry.id == entry_id for entry in day):
        return weekly_log
    return {**weekly_log, today_key: [entry for entry in day if entry.id != entry_id]}


def parse_weekly_log(raw: str) -> WeeklyLog:
    """Parse a persisted weekly log blob."""
    try:
        payload = json.loads(raw)
        if not isinstance(payload, dict):
            raise TypeError("weekly log must be a JSON object")
        weekly_log: WeeklyLog = {}
        for key, rows in payload.items():
            if not isinstance(rows, list):
                raise TypeError(f"day {key!r} must be a list")
            weekly_log[str(key)] = [_parse_entry(row) for row in rows]
    except (KeyError, TypeError, ValueError) as exc:
        raise LoadError(f"Malformed weekly log: {exc}") from exc
    return weekly_log


def serialize_weekly_log(weekly_log: WeeklyLog) -> str:
    """Serialize the weekly log to its persisted JSON form."""
    return json.dumps(
        {
            key: [_entry_to_row(entry) for entry in day]
            for key, day in weekly_log.items()
        }
    )


@dataclass
class LogStore:
    """Stateful weekly log persisted after every change."""

    storage: KeyValueStorage
    weekly_log: WeeklyLog = field(default_factory=dict)

    def load(self, now: datetime) -> WeeklyLog:
        """Load, prune and write back the persisted log.

        On `LoadError` the in-memory log is left empty before re-raising.
        """
        self.weekly_log = {}
        raw = self.storage.get(WEEKLY_LOG_KEY)
        loaded = parse_weekly_log(raw) if raw is not None else {}
        self.weekly_log = prune(now, loaded)
        dropped = sorted(set(loaded) - set(self.weekly_log))
        if dropped:
            _logger.info("Pruned expired log days: %s", ", ".join(dropped))
        self._persist()
        return self.weekly_log

    def day(self, key: str) -> DailyLog:
        """Return a copy of the entries logged under `key`."""
        return list(self.weekly_log.get(key, []))

    def today(self, now: datetime) -> DailyLog:
        """Return today's entries, newest first."""
        return self.day(day_key(now))

    def find(self, now: datetime, entry_id: str) -> Entry | None:
        """Return today's entry with `entry_id`, if present."""
        for entry in self.weekly_log.get(day_key(now), []):
            if entry.id == entry_id:
                return entry
        return None

    def append(self, now: datetime, entry: Entry) -> None:
        """Add an entry to today's log and persist."""
        self._commit(now, append_entry(self.weekly_log, day_key(now), entry))

    def replace(
        self, now: datetime, entry_id: str, updater: Callable[[Entry], Entry]
    ) -> bool:
        """Update today's entry and persist; return False if it was not found."""
        found = self.find(now, entry_id) is not None
        self._commit(
            now, replace_entry(self.weekly_log, day_key(now), entry_id, updater)
        )
        return found

    def remove(self, now: datetime, entry_id: str) -> bool:
        """Delete today's entry and persist; return False if it was not found."""
        found = self.find(now, entry_id) is not None
        self._commit(now, remove_entry(self.weekly_log, day_key(now), entry_id))
        return found

    def _commit(self, now: datetime, weekly_log: WeeklyLog) -> None:
        # In-memory state is kept even when the write below fails.
        self.weekly_log = prune(now, weekly_log)
        self._persist()

    def _persist(self) -> None:
        try:
            payload = serialize_weekly_log(self.weekly_log)
        except (TypeError, ValueError) as exc:
            raise SaveError(f"Could not serialize weekly log: {exc}") from exc
        self.storage.set(WEEKLY_LOG_KEY, payload)


def parse_day_key(key: str) -> date | None:
    """Return the date for a log key, or None when it is not `YYYY-MM-DD`."""
    try:
        return date.fromisoformat(key)
    except ValueError:
        return None


def _sort_key(timestamp: datetime) -> datetime:
    if timestamp.tzinfo is None:
        return timestamp.replace(tzinfo=UTC)
    return timestamp


def _parse_entry(row: object) -> Entry:
    if not isinstance(row, dict):
        raise TypeError("entry must be a JSON object")
    timestamp_raw = row["timestamp"]
    if not isinstance(timestamp_raw, str):
        raise TypeError("entry timestamp must be a string")
    return Entry(
        id=str(row["id"]),
        food_name=str(row.get("food_name") or ""),
        calories=_as_float(row.get("calories")),
        protein_g=_as_float(row.get("protein_g")),
        carbs_g=_as_float(row.get("carbs_g")),
        fat_g=_as_float(row.get("fat_g")),
        fiber_g=_as_float(row.get("fiber_g")),
        original_query=str(row.get("originalQuery") or ""),
        timestamp=_sort_key(datetime.fromisoformat(timestamp_raw)),
    )


def _as_float(value: object) -> float:
    if value is None or value == "":
        return 0.0
    return float(value)  # type: ignore[arg-type]


def _entry_to_row(entry: Entry) -> dict[str, object]:
    return {
        "id": entry.id,
        "food_name": entry.food_name,
        "calories": entry.calories,
        "protein_g": entry.protein_g,
        "carbs_g": entry.carbs_g,
        "fat_g": entry.fat_g,
        "fiber_g": entry.fiber_g,
        "originalQuery": entry.original_query,
        "timestamp": _sort_key(entry.timestamp)
        .astimezone(UTC)
        .isoformat()
        .replace("+00:00", "Z"),
    }
