"""Goal-adherence scoring for daily totals."""

import math
from collections.abc import Mapping
from dataclasses import dataclass

from nutrilog.domain.entries import Totals
from nutrilog.domain.goals import Goals

CEILING = "ceiling"
FLOOR = "floor"

MAX_SCORE = 100
OVERSHOOT_PENALTY = 2.0

CEILING_OVER_PERCENT = 105
CEILING_NEAR_PERCENT = 90
FLOOR_NEAR_PERCENT = 75


@dataclass(frozen=True)
class MetricPolicy:
    """How a metric's percent of goal turns into a 0-100 score."""

    kind: str
    weight: float = 1.0


METRIC_POLICIES: dict[str, MetricPolicy] = {
    "calories": MetricPolicy(CEILING),
    "protein_g": MetricPolicy(FLOOR),
    "carbs_g": MetricPolicy(FLOOR),
    "fat_g": MetricPolicy(CEILING),
    "fiber_g": MetricPolicy(FLOOR),
}


@dataclass(frozen=True)
class MetricProgress:
    """Progress of one metric toward its goal."""

    metric: str
    current: float
    goal: float
    percent: float
    status: str


def metric_score(kind: str, percent: float) -> float:
    """Score a single metric from its percent of goal.

    Ceiling metrics earn the percent up to the goal and lose twice as fast past
    it. Floor metrics are capped at the maximum with no overshoot penalty.
    """
    if kind == CEILING and percent > MAX_SCORE:
        value = MAX_SCORE - OVERSHOOT_PENALTY * (percent - MAX_SCORE)
    else:
        value = min(MAX_SCORE, percent)
    return max(0.0, value)


def score(
    totals: Totals | Mapping[str, object] | None,
    goals: Goals | Mapping[str, object] | None,
    policies: Mapping[str, MetricPolicy] = METRIC_POLICIES,
) -> int:
    """Return a 0-100 health score for totals measured against goals.

    Only metrics with a positive goal count. The result is the weighted mean
    of the counted metric scores, rounded half up; 0 when nothing counts.
    """
    if not goals:
        return 0
    weighted_sum = 0.0
    weight_total = 0.0
    for metric, policy in policies.items():
        goal = _value(goals, metric)
        if goal <= 0 or policy.weight <= 0:
            continue
        percent = 100 * _value(totals, metric) / goal
        weighted_sum += metric_score(policy.kind, percent) * policy.weight
        weight_total += policy.weight
    if weight_total == 0:
        return 0
    mean = weighted_sum / weight_total
    return min(MAX_SCORE, max(0, math.floor(mean + 0.5)))


def metric_progress(
    totals: Totals | Mapping[str, object] | None,
    goals: Goals | Mapping[str, object] | None,
    policies: Mapping[str, MetricPolicy] = METRIC_POLICIES,
) -> list[MetricProgress]:
    """Return per-metric progress toward goals in policy order."""
    progress = []
    for metric, policy in policies.items():
        current = _value(totals, metric)
        goal = _value(goals, metric)
        percent = 100 * current / goal if goal > 0 else 0.0
        progress.append(
            MetricProgress(
                metric=metric,
                current=current,
                goal=goal,
                percent=percent,
                status=_status(policy.kind, percent) if goal > 0 else "unset",
            )
        )
    return progress


def _status(kind: str, percent: float) -> str:
    if kind == CEILING:
        if percent > CEILING_OVER_PERCENT:
            return "over"
        if percent > CEILING_NEAR_PERCENT:
            return "near"
        return "under"
    if percent >= MAX_SCORE:
        return "met"
    if percent > FLOOR_NEAR_PERCENT:
        return "near"
    return "under"


def _value(source: object, metric: str) -> float:
    """Read a metric as a finite float; anything else counts as 0."""
    if source is None:
        return 0.0
    if isinstance(source, Mapping):
        value = source.get(metric)
    else:
        value = getattr(source, metric, None)
    if isinstance(value, str):
        try:
            value = float(value)
        except ValueError:
            return 0.0
    if not isinstance(value, int | float) or not math.isfinite(value):
        return 0.0
    return float(value)
