"""Tests for the tracker coordinator."""

import asyncio
import json
from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta

import pytest

from nutrilog.domain.goals import Goals, Profile
from nutrilog.errors import BusyError, InferenceError
from nutrilog.services.inference import NutritionModelClient
from nutrilog.services.log_store import WEEKLY_LOG_KEY, serialize_weekly_log
from nutrilog.services.storage import InMemoryStorage
from tests.conftest import (
    NOW,
    OATMEAL_PAYLOAD,
    FailingStorage,
    FakeModelClient,
    build_tracker,
    make_entry,
)


@dataclass
class GatedModelClient(NutritionModelClient):
    """Model client that blocks until released."""

    gate: asyncio.Event = field(default_factory=asyncio.Event)

    async def generate(  # noqa: PLR0913
        self,
        *,
        model: str,
        system_prompt: str,
        prompt: str,
        schema: dict[str, object],
        schema_name: str,
    ) -> dict[str, object]:
        await self.gate.wait()
        return dict(OATMEAL_PAYLOAD)


def test_submit_logs_new_entry(tracker, storage) -> None:
    entry = asyncio.run(tracker.submit("a bowl of oatmeal", NOW))

    assert entry is not None
    assert entry.id == "entry-1"
    assert entry.original_query == "a bowl of oatmeal"
    assert entry.timestamp == NOW
    assert tracker.today(NOW) == [entry]
    assert tracker.busy is False
    persisted = json.loads(storage.get(WEEKLY_LOG_KEY))
    assert persisted["2026-10-19"][0]["food_name"] == "Oatmeal with blueberries"


def test_submit_ignores_blank_input(tracker, model_client) -> None:
    assert asyncio.run(tracker.submit("   ", NOW)) is None
    assert model_client.calls == []


def test_submit_rejects_second_request_while_busy(storage) -> None:
    async def scenario():
        client = GatedModelClient()
        tracker = build_tracker(storage, client)
        first = asyncio.create_task(tracker.submit("oatmeal", NOW))
        await asyncio.sleep(0)
        assert tracker.busy is True
        with pytest.raises(BusyError):
            await tracker.submit("banana", NOW)
        client.gate.set()
        await first
        return tracker

    tracker = asyncio.run(scenario())

    assert tracker.busy is False
    assert len(tracker.today(NOW)) == 1


def test_inference_failure_sets_notice_and_clears_busy(storage) -> None:
    client = FakeModelClient(error=InferenceError("503"))
    tracker = build_tracker(storage, client)

    result = asyncio.run(tracker.submit("pizza", NOW))

    assert result is None
    assert tracker.busy is False
    assert tracker.notice is not None
    assert tracker.notice.title == "AI Error"
    assert tracker.today(NOW) == []


def test_edit_replaces_nutrition_and_keeps_identity(tracker, model_client) -> None:
    original = asyncio.run(tracker.submit("oatmeal", NOW))
    model_client.payloads.append(
        {
            "food_name": "Large oatmeal",
            "calories": 450,
            "protein_g": 15,
            "carbs_g": 80,
            "fat_g": 8,
            "fiber_g": 12,
        }
    )

    assert tracker.start_edit(original.id, NOW) == "oatmeal"
    later = NOW + timedelta(hours=1)
    edited = asyncio.run(tracker.submit("a large bowl of oatmeal", later))

    assert edited is not None
    assert edited.id == original.id
    assert edited.timestamp == original.timestamp
    assert edited.calories == 450
    assert edited.original_query == "a large bowl of oatmeal"
    assert tracker.editing is None
    assert len(tracker.today(NOW)) == 1


def test_edit_of_deleted_entry_is_noop(storage) -> None:
    async def scenario():
        client = GatedModelClient()
        tracker = build_tracker(storage, client)
        client.gate.set()
        first = await tracker.submit("oatmeal", NOW)
        second = await tracker.submit("more oatmeal", NOW)
        client.gate.clear()
        tracker.start_edit(first.id, NOW)
        pending = asyncio.create_task(tracker.submit("edited oatmeal", NOW))
        await asyncio.sleep(0)
        tracker.log_store.remove(NOW, first.id)
        client.gate.set()
        return tracker, second, await pending

    tracker, second, result = asyncio.run(scenario())

    assert result is None
    assert [entry.id for entry in tracker.today(NOW)] == [second.id]


def test_abandoned_edit_result_is_discarded(storage) -> None:
    async def scenario():
        client = GatedModelClient()
        tracker = build_tracker(storage, client)
        client.gate.set()
        first = await tracker.submit("oatmeal", NOW)
        client.gate.clear()
        tracker.start_edit(first.id, NOW)
        pending = asyncio.create_task(tracker.submit("edited oatmeal", NOW))
        await asyncio.sleep(0)
        tracker.cancel_edit()
        client.gate.set()
        return tracker, first, await pending

    tracker, first, result = asyncio.run(scenario())

    assert result is None
    assert tracker.today(NOW)[0].original_query == first.original_query


def test_delete_removes_entry_and_leaves_edit_mode(tracker) -> None:
    entry = asyncio.run(tracker.submit("oatmeal", NOW))
    tracker.start_edit(entry.id, NOW)

    assert tracker.delete(entry.id, NOW) is True
    assert tracker.delete("missing", NOW) is False
    assert tracker.editing is None
    assert tracker.today(NOW) == []


def test_save_failure_keeps_entry_and_sets_notice(model_client) -> None:
    tracker = build_tracker(FailingStorage(), model_client)

    entry = asyncio.run(tracker.submit("oatmeal", NOW))

    assert entry is not None
    assert tracker.today(NOW) == [entry]
    assert tracker.notice is not None
    assert tracker.notice.title == "Save Error"


def test_load_recovers_from_malformed_log(model_client) -> None:
    storage = InMemoryStorage({WEEKLY_LOG_KEY: "{not json"})
    tracker = build_tracker(storage, model_client)

    tracker.load(NOW)

    assert tracker.notice is not None
    assert tracker.notice.title == "Load Error"
    assert tracker.today(NOW) == []
    assert tracker.goals == Goals()


def test_load_write_back_failure_keeps_entries_and_reports_save_error(
    model_client,
) -> None:
    raw = serialize_weekly_log({"2026-10-19": [make_entry("x")]})
    storage = FailingStorage(values={WEEKLY_LOG_KEY: raw})
    tracker = build_tracker(storage, model_client)

    tracker.load(NOW)

    assert [entry.id for entry in tracker.today(NOW)] == ["x"]
    assert tracker.notice is not None
    assert tracker.notice.title == "Save Error"
    assert storage.write_attempts == 1


def test_day_key_follows_configured_timezone(storage, model_client) -> None:
    tracker = build_tracker(storage, model_client, timezone_name="America/Los_Angeles")
    evening_in_la = datetime(2026, 10, 19, 3, 0, tzinfo=UTC)

    asyncio.run(tracker.submit("oatmeal", evening_in_la))

    assert list(tracker.log_store.weekly_log) == ["2026-10-18"]


def test_views_combine_totals_score_and_history(tracker) -> None:
    asyncio.run(tracker.submit("oatmeal", NOW - timedelta(days=1)))
    asyncio.run(tracker.submit("oatmeal", NOW))
    tracker.save_goals(Goals(calories=600, protein_g=0, carbs_g=0, fat_g=0, fiber_g=0))

    assert tracker.totals(NOW).calories == 300
    assert tracker.score(NOW) == 50
    assert tracker.progress(NOW)[0].status == "under"
    history = tracker.history(NOW)
    assert [summary.item_count for summary in history] == [1]


def test_goals_and_profile_persist_across_reload(storage, model_client) -> None:
    tracker = build_tracker(storage, model_client)
    goals = Goals(calories=2500, protein_g=150, carbs_g=300, fat_g=80, fiber_g=35)
    profile = Profile(age=25, fitness_goal="gain")

    tracker.save_goals(goals)
    tracker.save_profile(profile)
    reloaded = build_tracker(storage, model_client)
    reloaded.load(NOW)

    assert reloaded.goals == goals
    assert reloaded.profile == profile
    assert reloaded.notice is None


def test_recommend_goals_failure_sets_notice(storage) -> None:
    tracker = build_tracker(storage, FakeModelClient(error=RuntimeError("boom")))

    assert asyncio.run(tracker.recommend_goals(Profile())) is None
    assert tracker.notice is not None
    assert tracker.notice.title == "AI Error"
    assert tracker.goals == Goals()
