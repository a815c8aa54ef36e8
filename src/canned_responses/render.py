"""Markdown export and HTML preview for canned responses.

``render_markdown`` writes the same document format the parser reads, so an
exported library re-imports to the same ids, titles, categories and
descriptions. Two body shapes cannot be written verbatim and are escaped:

- a first body line that looks like ``Key: value`` has its colon written as
  the ``&#58;`` entity, so it is not read back as metadata but still displays
  as a colon;
- a body line starting with ``## `` is indented by one space, so it does not
  start a new response (CommonMark still renders it as a heading).

Each escape is reported as a warning diagnostic.
"""

from __future__ import annotations

import logging
from typing import Iterable

import markdown

from .models import CannedResponse, DiagnosticCallback, emit_diagnostic
from .parser import METADATA_LINE_PATTERN

logger = logging.getLogger(__name__)


def escape_body(body: str) -> tuple[str, list[str]]:
    """Escape the body lines the parser would not read back as body text.

    Returns:
        Tuple of (escaped body, descriptions of what was escaped)
    """
    lines = body.split("\n")
    escaped: list[str] = []
    reasons: list[str] = []
    first_text_seen = False

    for line in lines:
        if not first_text_seen and line.strip():
            first_text_seen = True
            match = METADATA_LINE_PATTERN.match(line)
            if match:
                key_end = len(match.group(1))
                line = f"{line[:key_end]}&#58;{line[key_end + 1:]}"
                reasons.append("first body line looks like metadata")
        if line.startswith("## "):
            line = " " + line
            reasons.append("body line starts a level-2 heading")
        escaped.append(line)

    return "\n".join(escaped), reasons


def render_response(
    response: CannedResponse,
    on_diagnostic: DiagnosticCallback | None = None,
) -> str:
    """Render one response as a level-2 section with its metadata lines.

    Args:
        response: Response to render
        on_diagnostic: Optional callback told about escaped body lines

    Returns:
        Markdown section in the format:
        ## <id>
        ID: <id>
        Title: <title>
        Categories: a, b
        Description: <description>

        <body>
    """
    lines = [
        f"## {response.id}",
        f"ID: {response.id}",
        f"Title: {response.title}",
    ]
    if response.categories:
        lines.append(f"Categories: {', '.join(response.categories)}")
    if response.description:
        lines.append(f"Description: {response.description}")

    if response.body_template:
        body, reasons = escape_body(response.body_template)
        for reason in dict.fromkeys(reasons):
            emit_diagnostic(
                logger,
                on_diagnostic,
                "warning",
                f"Escaped body of '{response.id}' on export: {reason}",
            )
        lines.append("")
        lines.append(body)

    return "\n".join(lines)


def render_markdown(
    responses: Iterable[CannedResponse],
    title: str | None = "Canned Responses",
    on_diagnostic: DiagnosticCallback | None = None,
) -> str:
    """Render a whole library as a canned response document."""
    parts = []
    if title:
        parts.append(f"# {title}")
    parts.extend(render_response(r, on_diagnostic) for r in responses)
    return "\n\n".join(parts) + "\n"


def render_html(response: CannedResponse) -> str:
    """Render a response body from Markdown to HTML."""
    md = markdown.Markdown(extensions=["tables", "fenced_code"])
    return md.convert(response.body_template)
