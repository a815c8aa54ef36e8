"""Tests for Markdown export and HTML preview."""

from canned_responses.library import ResponseLibrary
from canned_responses.models import CannedResponse
from canned_responses.parser import parse_canned_responses
from canned_responses.render import escape_body, render_html, render_markdown, render_response


class TestRenderResponse:
    def test_full_response(self):
        response = CannedResponse(
            id="need-str",
            title="Ask for Steps to Reproduce",
            body_template="Hi!\n\nPlease provide **STR**.",
            description="Ask the reporter for STR",
            categories=["need-info", "str"],
        )
        assert render_response(response) == (
            "## need-str\n"
            "ID: need-str\n"
            "Title: Ask for Steps to Reproduce\n"
            "Categories: need-info, str\n"
            "Description: Ask the reporter for STR\n"
            "\n"
            "Hi!\n\nPlease provide **STR**."
        )

    def test_optional_lines_omitted(self):
        rendered = render_response(CannedResponse(id="bare", title="Bare"))
        assert rendered == "## bare\nID: bare\nTitle: Bare"


class TestRenderMarkdown:
    def test_title_heading_is_ignored_on_import(self):
        document = render_markdown([CannedResponse(id="a", title="A", body_template="a")])
        assert document.startswith("# Canned Responses\n\n## a\n")
        assert len(parse_canned_responses(document)) == 1

    def test_without_title(self):
        document = render_markdown([CannedResponse(id="a", title="A")], title=None)
        assert document.startswith("## a\n")

    def test_roundtrip(self):
        responses = [
            CannedResponse(
                id="need-str",
                title="Ask for Steps to Reproduce",
                body_template="Hi, and thanks!\n\n---\n\n1. Open\n2. Crash\n\nNote: attach logs.",
                description="Ask the reporter for STR",
                categories=["need-info", "str"],
            ),
            CannedResponse(id="wontfix", title="Won't Fix", body_template="Closing.\n\n```\ncode\n```"),
            CannedResponse(id="empty", title="Empty body", categories=["misc"]),
            CannedResponse(id="spaced", title="Indented", body_template="    indented code\nnext"),
        ]

        assert parse_canned_responses(render_markdown(responses)) == responses

    def test_parse_then_render_then_parse(self):
        document = (
            "# Team replies\n\n"
            "## Duplicate\nID: dup\n\nFirst.\n\n"
            "## Duplicate again\nID: dup\nCategories: a,, b\n\n\nSecond.\n\n"
        )
        parsed = parse_canned_responses(document)
        assert parse_canned_responses(render_markdown(parsed)) == parsed

    def test_saved_metadata_like_first_line_survives_reimport(self):
        library = ResponseLibrary()
        library.save_response({"id": "x", "title": "X", "bodyTemplate": "Note: attach logs.\nThanks"})

        reimported = parse_canned_responses(render_markdown(library.get_all()))

        assert [r.id for r in reimported] == ["x"]
        assert reimported[0].body_template == "Note&#58; attach logs.\nThanks"

    def test_level_two_heading_in_body_stays_in_one_record(self):
        responses = [CannedResponse(id="y", title="Y", body_template="Intro\n## Details\nmore")]

        reimported = parse_canned_responses(render_markdown(responses))

        assert [r.id for r in reimported] == ["y"]
        assert reimported[0].body_template == "Intro\n ## Details\nmore"

    def test_escapes_reported_once_per_kind(self):
        seen = []
        responses = [CannedResponse(id="y", title="Y", body_template="Step: one\n## A\n## B")]

        render_markdown(responses, on_diagnostic=seen.append)

        assert [d.level for d in seen] == ["warning", "warning"]
        assert all("'y'" in d.message for d in seen)


class TestEscapeBody:
    def test_plain_body_untouched(self):
        body = "Hi!\n\nPlease provide **STR**.\n### Subheading"
        assert escape_body(body) == (body, [])

    def test_only_first_text_line_checked_for_metadata(self):
        escaped, reasons = escape_body("\nTitle: x\nNote: keep")
        assert escaped == "\nTitle&#58; x\nNote: keep"
        assert reasons == ["first body line looks like metadata"]

    def test_every_heading_line_indented(self):
        escaped, reasons = escape_body("## a\ntext\n## b")
        assert escaped == " ## a\ntext\n ## b"
        assert len(reasons) == 2

    def test_html_preview_shows_colon_entity(self):
        escaped, _ = escape_body("Note: attach logs.")
        html = render_html(CannedResponse(id="a", title="A", body_template=escaped))
        assert "Note&#58; attach logs." in html
        assert "&amp;" not in html


class TestRenderHtml:
    def test_markdown_body(self):
        html = render_html(CannedResponse(id="a", title="A", body_template="Please provide **STR**."))
        assert html == "<p>Please provide <strong>STR</strong>.</p>"

    def test_fenced_code(self):
        html = render_html(CannedResponse(id="a", title="A", body_template="```\nx = 1\n```"))
        assert "<code>x = 1" in html
