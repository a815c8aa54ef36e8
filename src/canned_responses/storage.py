"""Key/value persistence for the canned response library.

Backends mirror a browser localStorage wrapper: keys are namespaced with a
prefix, values are stored as JSON, and failures are logged and reported as a
False/default return rather than raised.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Protocol

from .models import CannedResponse

logger = logging.getLogger(__name__)

KEY_PREFIX = "btw_"
STORAGE_KEY = "triage-wizard-canned-responses"


class KeyValueStore(Protocol):
    def get(self, key: str, default: Any = None) -> Any: ...

    def set(self, key: str, value: Any) -> bool: ...

    def remove(self, key: str) -> bool: ...


class MemoryStore:
    """In-process store; values are JSON round-tripped like the file backend."""

    def __init__(self) -> None:
        self._data: dict[str, str] = {}

    def get(self, key: str, default: Any = None) -> Any:
        raw = self._data.get(KEY_PREFIX + key)
        if raw is None:
            return default
        return json.loads(raw)

    def set(self, key: str, value: Any) -> bool:
        try:
            self._data[KEY_PREFIX + key] = json.dumps(value)
        except (TypeError, ValueError) as e:
            logger.warning(f"Failed to store '{key}': {e}")
            return False
        return True

    def remove(self, key: str) -> bool:
        return self._data.pop(KEY_PREFIX + key, None) is not None

    def keys(self) -> list[str]:
        return [k[len(KEY_PREFIX):] for k in self._data]


class JsonFileStore:
    """Store backed by a single JSON object file."""

    def __init__(self, path: Path):
        """
        Args:
            path: JSON file holding all keys; created on first write
        """
        self.path = Path(path)

    def _read_all(self) -> dict[str, Any] | None:
        """Return all stored keys, {} for a missing file, None if unreadable."""
        if not self.path.exists():
            return {}
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
            logger.warning(f"Failed to read store {self.path}: {e}")
            return None
        if not isinstance(data, dict):
            logger.warning(f"Ignoring store {self.path}: expected a JSON object")
            return None
        return data

    def _write_all(self, data: dict[str, Any]) -> bool:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_text(json.dumps(data, indent=2), encoding="utf-8")
        except (OSError, TypeError, ValueError) as e:
            logger.warning(f"Failed to write store {self.path}: {e}")
            return False
        return True

    def get(self, key: str, default: Any = None) -> Any:
        data = self._read_all()
        if data is None:
            return default
        return data.get(KEY_PREFIX + key, default)

    def set(self, key: str, value: Any) -> bool:
        data = self._read_all()
        if data is None:
            logger.warning(f"Not writing '{key}': {self.path} exists but could not be read")
            return False
        data[KEY_PREFIX + key] = value
        return self._write_all(data)

    def remove(self, key: str) -> bool:
        data = self._read_all()
        if data is None or KEY_PREFIX + key not in data:
            return False
        del data[KEY_PREFIX + key]
        return self._write_all(data)


class LibraryStore:
    """Reads and writes full library snapshots through a key/value backend."""

    def __init__(self, backend: KeyValueStore, key: str = STORAGE_KEY):
        self.backend = backend
        self.key = key

    def read_library(self) -> list[CannedResponse] | None:
        """Return the stored snapshot, or None if nothing usable is stored."""
        stored = self.backend.get(self.key)
        if not isinstance(stored, list):
            if stored is not None:
                logger.warning(f"Ignoring stored library under '{self.key}': not a list")
            return None

        responses: list[CannedResponse] = []
        seen_ids: set[str] = set()
        for entry in stored:
            try:
                response = CannedResponse.from_dict(entry)
            except (KeyError, TypeError, AttributeError) as e:
                logger.warning(f"Skipping malformed stored response {entry!r}: {e}")
                continue
            if not isinstance(response.id, str) or not response.id:
                logger.warning(f"Skipping stored response without a usable id: {entry!r}")
                continue
            if response.id in seen_ids:
                logger.warning(f"Skipping stored response with duplicate id '{response.id}'")
                continue
            seen_ids.add(response.id)
            responses.append(response)
        return responses

    def write_library(self, responses: list[CannedResponse]) -> bool:
        return self.backend.set(self.key, [r.to_dict() for r in responses])
