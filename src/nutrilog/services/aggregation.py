"""Daily totals and history summaries."""

import math
from datetime import datetime

from nutrilog.domain.entries import (
    NUTRIENTS,
    DailyLog,
    DaySummary,
    Totals,
    WeeklyLog,
)
from nutrilog.services.log_store import parse_day_key

HISTORY_DAYS = 6


def totals(daily_log: DailyLog) -> Totals:
    """Sum nutrients across a day's entries; missing values count as 0."""
    sums = dict.fromkeys(NUTRIENTS, 0.0)
    for entry in daily_log:
        for name in NUTRIENTS:
            sums[name] += _amount(entry, name)
    return Totals(**sums)


def history(weekly_log: WeeklyLog, now: datetime) -> list[DaySummary]:
    """Summarize the days before today, newest first."""
    today = now.date()
    summaries = []
    for key in sorted(weekly_log, reverse=True):
        key_date = parse_day_key(key)
        if key_date is None or key_date >= today:
            continue
        day_log = weekly_log[key]
        day_totals = totals(day_log)
        summaries.append(
            DaySummary(
                day=key_date,
                item_count=len(day_log),
                calories=day_totals.calories,
                protein_g=day_totals.protein_g,
            )
        )
    return summaries[:HISTORY_DAYS]


def _amount(entry: object, name: str) -> float:
    value = getattr(entry, name, None)
    if not isinstance(value, int | float) or not math.isfinite(value):
        return 0.0
    return float(value)
