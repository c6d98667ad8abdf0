"""Shared test fixtures."""

import itertools
from dataclasses import dataclass, field
from datetime import UTC, datetime

import pytest

from nutrilog.config import Settings
from nutrilog.domain.entries import Entry
from nutrilog.errors import SaveError
from nutrilog.services.goals import GoalStore, ProfileStore
from nutrilog.services.inference import InferenceService, NutritionModelClient
from nutrilog.services.log_store import LogStore
from nutrilog.services.storage import InMemoryStorage, KeyValueStorage
from nutrilog.services.tracker import Tracker

NOW = datetime(2026, 10, 19, 12, 0, tzinfo=UTC)

OATMEAL_PAYLOAD: dict[str, object] = {
    "food_name": "Oatmeal with blueberries",
    "calories": 300,
    "protein_g": 10,
    "carbs_g": 54,
    "fat_g": 5,
    "fiber_g": 8,
}


def make_entry(
    entry_id: str, timestamp: datetime = NOW, **overrides: object
) -> Entry:
    """Build an entry with sensible nutrition defaults."""
    values: dict[str, object] = {
        "food_name": "Apple",
        "calories": 95.0,
        "protein_g": 0.5,
        "carbs_g": 25.0,
        "fat_g": 0.3,
        "fiber_g": 4.4,
        "original_query": "an apple",
    }
    values.update(overrides)
    return Entry(id=entry_id, timestamp=timestamp, **values)  # type: ignore[arg-type]


@dataclass
class FailingStorage(KeyValueStorage):
    """Storage whose writes always fail."""

    values: dict[str, str] = field(default_factory=dict)
    write_attempts: int = 0

    def get(self, key: str) -> str | None:
        return self.values.get(key)

    def set(self, key: str, value: str) -> None:
        self.write_attempts += 1
        raise SaveError("quota exceeded")


@dataclass
class FakeModelClient(NutritionModelClient):
    """Fake model client returning queued payloads."""

    payloads: list[dict[str, object]] = field(default_factory=list)
    error: Exception | None = None
    calls: list[dict[str, object]] = field(default_factory=list)

    async def generate(  # noqa: PLR0913
        self,
        *,
        model: str,
        system_prompt: str,
        prompt: str,
        schema: dict[str, object],
        schema_name: str,
    ) -> dict[str, object]:
        self.calls.append(
            {
                "model": model,
                "system_prompt": system_prompt,
                "prompt": prompt,
                "schema": schema,
                "schema_name": schema_name,
            }
        )
        if self.error is not None:
            raise self.error
        if self.payloads:
            return self.payloads.pop(0)
        return dict(OATMEAL_PAYLOAD)


def build_tracker(
    storage: KeyValueStorage, client: NutritionModelClient, timezone_name: str = "UTC"
) -> Tracker:
    counter = itertools.count(1)
    return Tracker(
        log_store=LogStore(storage),
        goal_store=GoalStore(storage),
        profile_store=ProfileStore(storage),
        inference=InferenceService(client=client, model="test-model"),
        timezone_name=timezone_name,
        id_factory=lambda: f"entry-{next(counter)}",
    )


@pytest.fixture
def settings() -> Settings:
    return Settings(
        storage_backend="memory",
        inference_provider="openai",
        openai_api_key="openai-key",
    )


@pytest.fixture
def storage() -> InMemoryStorage:
    return InMemoryStorage()


@pytest.fixture
def model_client() -> FakeModelClient:
    return FakeModelClient()


@pytest.fixture
def tracker(storage: InMemoryStorage, model_client: FakeModelClient) -> Tracker:
    return build_tracker(storage, model_client)
