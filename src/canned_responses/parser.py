"""Markdown parser for canned response documents.

Each level-2 heading (``## ``) starts a response. The lines right after the
heading may carry ``Key: value`` metadata (``ID``, ``Title``, ``Categories``,
``Description``, case-insensitive); the first other non-blank line starts the
body, which runs to the next level-2 heading. Anything before the first
level-2 heading is ignored.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field

from .models import CannedResponse, DiagnosticCallback, emit_diagnostic, split_categories

logger = logging.getLogger(__name__)

METADATA_KEYS = ("id", "title", "categories", "description")

SECTION_SPLIT_PATTERN = re.compile(r"^## ", re.MULTILINE)
METADATA_LINE_PATTERN = re.compile(r"^([A-Za-z]+):\s*(.*)$")


@dataclass
class RawSection:
    """Text of one level-2 section, split into its heading and following lines."""
    heading: str
    lines: list[str] = field(default_factory=list)


def _report(on_diagnostic: DiagnosticCallback | None, level: str, message: str) -> None:
    emit_diagnostic(logger, on_diagnostic, level, message)


def slugify(text: str | None) -> str:
    if not text:
        return ""
    slug = text.lower()
    slug = re.sub(r"[^a-z0-9]+", "-", slug)
    slug = re.sub(r"-+", "-", slug)
    slug = slug.strip("-")
    return slug


def sectionize(
    document: str | None,
    on_diagnostic: DiagnosticCallback | None = None,
) -> list[RawSection]:
    """Split a document into one RawSection per level-2 heading."""
    if not document:
        return []

    text = document.replace("\r\n", "\n").replace("\r", "\n")
    chunks = SECTION_SPLIT_PATTERN.split(text)

    sections: list[RawSection] = []
    # chunks[0] is whatever precedes the first heading
    for chunk in chunks[1:]:
        lines = chunk.split("\n")
        # the newline that ends the section is not a line of its own
        if len(lines) > 1 and lines[-1] == "":
            lines.pop()
        heading = lines[0].strip()
        if not heading:
            _report(on_diagnostic, "info", "Skipping section with an empty heading")
            continue
        sections.append(RawSection(heading=heading, lines=lines[1:]))

    if not sections:
        _report(on_diagnostic, "info", "No level-2 headings found in document")

    return sections


def split_metadata(lines: list[str]) -> tuple[dict[str, str], int]:
    """Scan the leading metadata block of a section.

    Returns (metadata, body_start), where metadata maps lower-cased recognised
    keys to trimmed values and body_start is the index of the first body line.
    Unrecognised keys and blank lines are consumed without being recorded.
    """
    metadata: dict[str, str] = {}
    body_start = 0

    for index, line in enumerate(lines):
        match = METADATA_LINE_PATTERN.match(line)
        if match:
            key = match.group(1).lower()
            if key in METADATA_KEYS:
                metadata[key] = match.group(2).strip()
            body_start = index + 1
        elif not line.strip():
            body_start = index + 1
        else:
            break

    return metadata, body_start


def extract_body(lines: list[str], body_start: int = 0) -> str:
    """Join the body lines, dropping leading and trailing blank lines only."""
    body_lines = lines[body_start:]

    start = 0
    end = len(body_lines)
    while start < end and not body_lines[start].strip():
        start += 1
    while end > start and not body_lines[end - 1].strip():
        end -= 1

    return "\n".join(body_lines[start:end])


def parse_categories(value: str | None) -> list[str]:
    return split_categories(value)


def build_response(heading: str, metadata: dict[str, str], body: str) -> CannedResponse:
    """Assemble a candidate response; its id is not yet collision-resolved."""
    description = metadata.get("description")
    return CannedResponse(
        id=metadata.get("id") or slugify(heading),
        title=metadata.get("title") or heading,
        body_template=body,
        description=description or None,
        categories=parse_categories(metadata.get("categories")),
    )


def resolve_duplicate_ids(responses: list[CannedResponse]) -> list[CannedResponse]:
    """Suffix repeated ids with -2, -3, ... so every id in the batch is distinct.

    Responses are renamed in place and returned in the same order.
    """
    used_ids: set[str] = set()

    for response in responses:
        candidate = response.id
        if candidate in used_ids:
            counter = 2
            while f"{candidate}-{counter}" in used_ids:
                counter += 1
            logger.debug(f"Duplicate id '{candidate}' renamed to '{candidate}-{counter}'")
            candidate = f"{candidate}-{counter}"
            response.id = candidate
        used_ids.add(candidate)

    return responses


def parse_canned_responses(
    document: str | None,
    on_diagnostic: DiagnosticCallback | None = None,
) -> list[CannedResponse]:
    """Parse a Markdown document into a list of canned responses.

    Never raises on malformed input: degenerate sections are skipped and
    reported through logging and the optional on_diagnostic callback.
    """
    if not document:
        _report(on_diagnostic, "info", "Empty canned response document")
        return []

    candidates: list[CannedResponse] = []
    for section in sectionize(document, on_diagnostic):
        metadata, body_start = split_metadata(section.lines)
        body = extract_body(section.lines, body_start)
        response = build_response(section.heading, metadata, body)

        if not response.id:
            _report(
                on_diagnostic,
                "warning",
                f"Skipping section '{section.heading}': no usable id",
            )
            continue
        if not body:
            _report(on_diagnostic, "info", f"Response '{response.id}' has an empty body")

        candidates.append(response)

    return resolve_duplicate_ids(candidates)
