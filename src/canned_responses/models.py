"""Canned response record and its JSON shape.

A canned response serializes as a flat record::

    {"id": ..., "title": ..., "bodyTemplate": ..., "description": ..., "categories": [...]}

``description`` is omitted (never null) when the response has none.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from typing import Any, Callable, Iterable, Mapping

LOG_LEVELS = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warning": logging.WARNING,
}


@dataclass
class Diagnostic:
    """A non-fatal problem found while parsing or updating a library.

    Attributes:
        level: Logging level name ('debug', 'info' or 'warning')
        message: Human-readable description
    """
    level: str
    message: str


DiagnosticCallback = Callable[[Diagnostic], None]


def emit_diagnostic(
    log: logging.Logger,
    on_diagnostic: DiagnosticCallback | None,
    level: str,
    message: str,
) -> None:
    """Log a diagnostic and hand it to the callback, if any."""
    log.log(LOG_LEVELS[level], message)
    if on_diagnostic is not None:
        on_diagnostic(Diagnostic(level=level, message=message))


def split_categories(value: str | None) -> list[str]:
    """Split a comma-separated category string, dropping empty pieces."""
    if value is None or not value.strip():
        return []
    return [part.strip() for part in value.split(",") if part.strip()]


def coerce_categories(value: Any) -> list[str]:
    """Normalise a categories value to a list of strings.

    Strings are split on commas; lists and tuples must hold strings only.

    Raises:
        TypeError: For any other value
    """
    if value is None:
        return []
    if isinstance(value, str):
        return split_categories(value)
    if isinstance(value, (list, tuple)) and all(isinstance(c, str) for c in value):
        return list(value)
    raise TypeError(f"categories must be a string or a list of strings, not {value!r}")


@dataclass
class CannedResponse:
    """A reusable reply template.

    Attributes:
        id: Unique identifier within a library
        title: Display title
        body_template: Reply text (Markdown), verbatim
        description: Optional triager-facing note
        categories: Category tags in input order
    """
    id: str
    title: str
    body_template: str = ""
    description: str | None = None
    categories: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        """Convert to the flat JSON shape."""
        data: dict[str, Any] = {
            "id": self.id,
            "title": self.title,
            "bodyTemplate": self.body_template,
        }
        if self.description is not None:
            data["description"] = self.description
        data["categories"] = list(self.categories)
        return data

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> CannedResponse:
        """Build a response from its JSON shape.

        Accepts ``bodyTemplate`` or ``body_template`` for the body, and treats a
        missing ``categories`` key as an empty list.

        Raises:
            KeyError: If ``id`` is missing
            TypeError: If ``categories`` is neither a string nor a list of strings
        """
        body = data.get("bodyTemplate")
        if body is None:
            body = data.get("body_template", "")
        return cls(
            id=data["id"],
            title=data.get("title") or "",
            body_template=body or "",
            description=data.get("description") or None,
            categories=coerce_categories(data.get("categories")),
        )

    def copy(self) -> CannedResponse:
        """Return a copy that shares no mutable state with this record."""
        return replace(self, categories=list(self.categories))


def _categories_of(response: CannedResponse | Mapping[str, Any]) -> Iterable[str]:
    if isinstance(response, CannedResponse):
        return response.categories
    categories = response.get("categories")
    if isinstance(categories, (list, tuple)):
        return categories
    return []


def extract_categories(
    responses: Iterable[CannedResponse | Mapping[str, Any]] | None,
) -> list[str]:
    """Return the sorted, de-duplicated union of categories across responses."""
    if not responses:
        return []

    categories: set[str] = set()
    for response in responses:
        categories.update(_categories_of(response))

    return sorted(categories)
