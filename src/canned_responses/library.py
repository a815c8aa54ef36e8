"""Canned response library.

Holds the ordered collection of responses for one user and keeps it in sync
with a persistence collaborator. The in-memory list is authoritative: every
mutation is applied first and then written as a full snapshot; a failed write
is reported as a diagnostic and never raised.
"""

from __future__ import annotations

import logging
from dataclasses import fields
from typing import Any, Iterator, Mapping, Protocol

from .models import (
    CannedResponse,
    DiagnosticCallback,
    coerce_categories,
    emit_diagnostic,
    extract_categories,
)
from .parser import parse_canned_responses

logger = logging.getLogger(__name__)

# JSON key -> dataclass attribute
_FIELD_ALIASES = {"bodyTemplate": "body_template"}
_FIELD_NAMES = {f.name for f in fields(CannedResponse)}


class LibraryPersistence(Protocol):
    def read_library(self) -> list[CannedResponse] | None: ...

    def write_library(self, responses: list[CannedResponse]) -> bool: ...


class ResponseLibrary:
    """Ordered collection of canned responses with unique ids."""

    def __init__(
        self,
        store: LibraryPersistence | None = None,
        on_diagnostic: DiagnosticCallback | None = None,
    ):
        """
        Args:
            store: Persistence collaborator; when None the library is memory-only
            on_diagnostic: Optional callback receiving every Diagnostic
        """
        self._store = store
        self._on_diagnostic = on_diagnostic
        self._responses: list[CannedResponse] = []

    def __len__(self) -> int:
        return len(self._responses)

    def __iter__(self) -> Iterator[CannedResponse]:
        return iter(self.get_all())

    def __contains__(self, response_id: object) -> bool:
        return self._index_of(response_id) >= 0

    def _diagnose(self, level: str, message: str) -> None:
        emit_diagnostic(logger, self._on_diagnostic, level, message)

    def _index_of(self, response_id: object) -> int:
        for index, response in enumerate(self._responses):
            if response.id == response_id:
                return index
        return -1

    def _persist(self) -> bool:
        if self._store is None:
            return True
        snapshot = [r.copy() for r in self._responses]
        try:
            ok = self._store.write_library(snapshot)
        except Exception as e:
            self._diagnose("warning", f"Failed to persist canned responses: {e}")
            return False
        if not ok:
            self._diagnose("warning", "Failed to persist canned responses")
        return ok

    def parse(self, document: str | None) -> list[CannedResponse]:
        """Parse a document without touching the library."""
        return parse_canned_responses(document, self._on_diagnostic)

    def load(self) -> list[CannedResponse]:
        """Restore the library from the store, if it holds a snapshot."""
        if self._store is None:
            return self.get_all()

        try:
            stored = self._store.read_library()
        except Exception as e:
            self._diagnose("warning", f"Failed to read stored canned responses: {e}")
            stored = None

        if stored is not None:
            self._responses = [r.copy() for r in stored]
            logger.debug(f"Loaded {len(self._responses)} canned responses from store")
        return self.get_all()

    def import_markdown(self, document: str | None, replace: bool = False) -> list[CannedResponse]:
        """Import responses from Markdown.

        Args:
            document: Markdown text
            replace: Discard the existing library (True) or merge by id (False).
                Merging replaces a matching record wholesale and appends new ids
                in document order.

        Returns:
            Snapshot of the updated library
        """
        parsed = self.parse(document)

        if replace:
            self._responses = parsed
        else:
            for response in parsed:
                index = self._index_of(response.id)
                if index >= 0:
                    self._responses[index] = response
                else:
                    self._responses.append(response)

        logger.info(
            f"Imported {len(parsed)} canned responses ({'replace' if replace else 'merge'})"
        )
        self._persist()
        return self.get_all()

    def merge_defaults(self, document: str | None) -> list[CannedResponse]:
        """Add default responses whose ids are not in the library yet.

        Existing responses are never overwritten, so user edits survive a
        reload of the defaults.

        Returns:
            The parsed default responses
        """
        parsed = self.parse(document)

        added = 0
        for response in parsed:
            if self._index_of(response.id) < 0:
                self._responses.append(response.copy())
                added += 1

        logger.info(f"Merged defaults: {added} of {len(parsed)} added")
        self._persist()
        return parsed

    def save_response(self, response: CannedResponse | Mapping[str, Any]) -> list[CannedResponse]:
        """Add a response, or shallow-merge it into the existing one with the same id.

        Fields missing from a mapping keep their previous value. A
        comma-separated categories string is split like a Categories: line. A
        response without an id, or with categories of any other type, is
        ignored with a warning.

        Returns:
            Snapshot of the library
        """
        if isinstance(response, CannedResponse):
            data = response.to_dict()
        elif isinstance(response, Mapping):
            data = dict(response)
        else:
            data = {}

        if not data.get("id"):
            self._diagnose("warning", "Cannot save canned response without an id")
            return self.get_all()

        index = self._index_of(data["id"])
        try:
            if index >= 0:
                updates: dict[str, Any] = {}
                for key, value in data.items():
                    name = _FIELD_ALIASES.get(key, key)
                    if name == "categories":
                        updates[name] = coerce_categories(value)
                    elif name == "description":
                        updates[name] = value or None
                    elif name in _FIELD_NAMES:
                        updates[name] = value
                existing = self._responses[index]
                for name, value in updates.items():
                    setattr(existing, name, value)
            else:
                self._responses.append(CannedResponse.from_dict(data))
        except TypeError as e:
            self._diagnose("warning", f"Cannot save canned response '{data['id']}': {e}")
            return self.get_all()

        self._persist()
        return self.get_all()

    def delete_response(self, response_id: str) -> bool:
        """Delete a response by id. Returns True if it existed."""
        index = self._index_of(response_id)
        if index < 0:
            return False

        del self._responses[index]
        self._persist()
        return True

    def get_all(self) -> list[CannedResponse]:
        return [r.copy() for r in self._responses]

    def get_by_id(self, response_id: str) -> CannedResponse | None:
        index = self._index_of(response_id)
        if index < 0:
            return None
        return self._responses[index].copy()

    def get_by_category(self, category: str) -> list[CannedResponse]:
        return [r.copy() for r in self._responses if category in r.categories]

    def categories(self) -> list[str]:
        """Sorted unique categories across the library."""
        return extract_categories(self._responses)
