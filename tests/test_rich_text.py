"""Unit tests for notion_pull.rich_text."""

from builders import text
from notion_pull.models import parse_rich_text
from notion_pull.rich_text import render_rich_text


def render(*items):
    return render_rich_text(parse_rich_text(items))


class TestAnnotations:
    """Annotation composition on a single span."""

    def test_plain_text(self):
        assert render(text("hello")) == "hello"

    def test_code_suppresses_other_annotations(self):
        assert render(text("x", code=True, bold=True, italic=True, underline=True)) == "`x`"

    def test_bold_and_italic(self):
        assert render(text("x", bold=True, italic=True)) == "***x***"

    def test_bold_only(self):
        assert render(text("x", bold=True)) == "**x**"

    def test_italic_only(self):
        assert render(text("x", italic=True)) == "*x*"

    def test_strikethrough_inside_emphasis(self):
        assert render(text("x", strikethrough=True, bold=True)) == "**~~x~~**"

    def test_underline_is_outermost(self):
        assert render(text("x", underline=True, italic=True)) == "<u>*x*</u>"

    def test_empty_text_gets_no_markers(self):
        assert render(text("", bold=True)) == ""

    def test_color_is_ignored(self):
        assert render(text("x", color="red")) == "x"


class TestLinks:
    def test_plain_span_with_href(self):
        assert render(text("docs", href="https://example.com")) == "[docs](https://example.com)"

    def test_link_wraps_annotated_text(self):
        assert render(text("docs", href="https://e.com", bold=True)) == "[**docs**](https://e.com)"


class TestMentionsAndEquations:
    def test_page_mention_renders_label(self):
        item = {
            "type": "mention",
            "mention": {"type": "page", "page": {"id": "abc"}},
            "plain_text": "Other page",
            "href": None,
            "annotations": {},
        }
        assert render(item) == "Other page"

    def test_date_mention_with_range(self):
        item = {
            "type": "mention",
            "mention": {"type": "date", "date": {"start": "2024-01-01", "end": "2024-01-05"}},
            "plain_text": "January 1, 2024 → January 5, 2024",
            "annotations": {},
        }
        assert render(item) == "2024-01-01 → 2024-01-05"

    def test_date_mention_without_end(self):
        item = {
            "type": "mention",
            "mention": {"type": "date", "date": {"start": "2024-01-01", "end": None}},
            "plain_text": "January 1, 2024",
        }
        assert render(item) == "2024-01-01"

    def test_inline_equation_bypasses_annotations_and_links(self):
        item = {
            "type": "equation",
            "equation": {"expression": "e=mc^2"},
            "plain_text": "e=mc^2",
            "href": "https://example.com",
            "annotations": {"bold": True},
        }
        assert render(item) == "$e=mc^2$"

    def test_spans_are_concatenated_in_order(self):
        assert render(text("a "), text("b", bold=True), text(" c")) == "a **b** c"
