"""Supabase-backed key-value storage."""

from dataclasses import dataclass
from datetime import UTC, datetime

import httpx
from postgrest.exceptions import APIError
from supabase import Client

from nutrilog.errors import LoadError, SaveError
from nutrilog.services.storage import KeyValueStorage


@dataclass
class SupabaseKeyValueStorage(KeyValueStorage):
    """Stores values in the `kv_store` table under a namespace."""

    client: Client
    namespace: str = "default"
    table_name: str = "kv_store"

    def get(self, key: str) -> str | None:
        """Return the stored value for `key`."""
        try:
            response = (
                self.client.table(self.table_name)
                .select("value")
                .eq("namespace", self.namespace)
                .eq("key", key)
                .limit(1)
                .execute()
            )
        except (APIError, httpx.HTTPError) as exc:
            raise LoadError(f"Supabase read of {key!r} failed: {exc}") from exc
        if not response.data:
            return None
        value = response.data[0].get("value")
        if not isinstance(value, str):
            raise LoadError(f"Supabase value for {key!r} is not a string")
        return value

    def set(self, key: str, value: str) -> None:
        """Upsert the value for `key`."""
        try:
            self.client.table(self.table_name).upsert(
                {
                    "namespace": self.namespace,
                    "key": key,
                    "value": value,
                    "updated_at": datetime.now(tz=UTC).isoformat(),
                },
                on_conflict="namespace,key",
            ).execute()
        except (APIError, httpx.HTTPError) as exc:
            raise SaveError(f"Supabase write of {key!r} failed: {exc}") from exc
