"""Key-value storage port used by the persisted stores."""

from dataclasses import dataclass
from typing import Protocol


class KeyValueStorage(Protocol):
    """String-valued key-value store that survives restarts."""

    def get(self, key: str) -> str | None:
        """Return the stored value, or None when the key is absent."""

    def set(self, key: str, value: str) -> None:
        """Store a value, replacing any previous one."""


@dataclass
class InMemoryStorage(KeyValueStorage):
    """Dict-backed storage for tests and ephemeral sessions."""

    _values: dict[str, str]

    def __init__(self, values: dict[str, str] | None = None) -> None:
        self._values = dict(values or {})

    def get(self, key: str) -> str | None:
        """Return the stored value if present."""
        return self._values.get(key)

    def set(self, key: str, value: str) -> None:
        """Store a value in memory."""
        self._values[key] = value
