"""Dependency container wiring for the application."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from supabase import create_client

from nutrilog.adapters.gemini_client import HttpxGeminiClient
from nutrilog.adapters.json_file_storage import JsonFileStorage
from nutrilog.adapters.openai_nutrition_client import OpenAINutritionClient
from nutrilog.adapters.supabase_storage import SupabaseKeyValueStorage
from nutrilog.app_logging import configure_logging
from nutrilog.config import Settings, require
from nutrilog.services.goals import GoalStore, ProfileStore
from nutrilog.services.inference import InferenceService
from nutrilog.services.log_store import LogStore
from nutrilog.services.storage import InMemoryStorage, KeyValueStorage
from nutrilog.services.tracker import Tracker


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    storage: KeyValueStorage
    log_store: LogStore
    goal_store: GoalStore
    profile_store: ProfileStore
    inference_service: InferenceService
    tracker: Tracker
    close_resources: Callable[[], Awaitable[None]]


def build_storage(settings: Settings) -> KeyValueStorage:
    """Create the configured key-value storage backend."""
    if settings.storage_backend == "memory":
        return InMemoryStorage()
    if settings.storage_backend == "file":
        return JsonFileStorage(settings.data_path)
    if settings.storage_backend == "supabase":
        client = create_client(
            require(settings.supabase_url, "supabase_url"),
            require(settings.supabase_service_key, "supabase_service_key"),
        )
        return SupabaseKeyValueStorage(client, namespace=settings.supabase_namespace)
    raise ValueError(f"Unknown storage backend: {settings.storage_backend}")


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    configure_logging(debug=resolved_settings.debug)
    storage = build_storage(resolved_settings)
    log_store = LogStore(storage)
    goal_store = GoalStore(storage)
    profile_store = ProfileStore(storage)

    if resolved_settings.inference_provider == "openai":
        model_client: OpenAINutritionClient | HttpxGeminiClient = (
            OpenAINutritionClient.create(
                require(resolved_settings.openai_api_key, "openai_api_key"),
                reasoning_effort=resolved_settings.openai_reasoning_effort,
                store=resolved_settings.openai_store,
            )
        )
        model = resolved_settings.openai_model
    elif resolved_settings.inference_provider == "gemini":
        model_client = HttpxGeminiClient.create(
            api_key=require(resolved_settings.gemini_api_key, "gemini_api_key"),
            base_url=resolved_settings.gemini_base_url,
        )
        model = resolved_settings.gemini_model
    else:
        raise ValueError(
            f"Unknown inference provider: {resolved_settings.inference_provider}"
        )

    inference_service = InferenceService(client=model_client, model=model)
    tracker = Tracker(
        log_store=log_store,
        goal_store=goal_store,
        profile_store=profile_store,
        inference=inference_service,
        timezone_name=resolved_settings.timezone,
    )

    async def close_resources() -> None:
        await model_client.close()

    return AppContainer(
        settings=resolved_settings,
        storage=storage,
        log_store=log_store,
        goal_store=goal_store,
        profile_store=profile_store,
        inference_service=inference_service,
        tracker=tracker,
        close_resources=close_resources,
    )
