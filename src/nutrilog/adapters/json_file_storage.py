"""Key-value storage kept in a single JSON file."""

import json
from dataclasses import dataclass
from pathlib import Path

from nutrilog.errors import LoadError, SaveError
from nutrilog.services.storage import KeyValueStorage


@dataclass
class JsonFileStorage(KeyValueStorage):
    """Stores every key as a string value in one JSON document."""

    path: Path

    def get(self, key: str) -> str | None:
        """Return the stored value for `key`."""
        value = self._read().get(key)
        if value is None:
            return None
        if not isinstance(value, str):
            raise LoadError(f"Stored value for {key!r} is not a string")
        return value

    def set(self, key: str, value: str) -> None:
        """Store `value` and rewrite the file atomically."""
        try:
            values = self._read()
        except LoadError as exc:
            raise SaveError(f"Refusing to overwrite unreadable {self.path}") from exc
        values[key] = value
        tmp_path = self.path.with_name(f"{self.path.name}.tmp")
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            tmp_path.write_text(
                json.dumps(values, ensure_ascii=False, indent=2), encoding="utf-8"
            )
            tmp_path.replace(self.path)
        except OSError as exc:
            raise SaveError(f"Could not write {self.path}: {exc}") from exc

    def _read(self) -> dict[str, object]:
        if not self.path.exists():
            return {}
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as exc:
            raise LoadError(f"Could not read {self.path}: {exc}") from exc
        if not isinstance(data, dict):
            raise LoadError(f"{self.path} does not contain a JSON object")
        return data
