"""
Module for rendering Notion rich text into inline Markdown.
"""

from typing import Sequence

from .models import Annotations, RichTextSpan


def render_rich_text(spans: Sequence[RichTextSpan]) -> str:
    """Render a sequence of rich text spans, in order, with no separator."""
    return "".join(render_span(span) for span in spans)


def render_span(span: RichTextSpan) -> str:
    """Render a single span: content, then annotations, then its link."""
    if span.type == "equation":
        return f"${span.expression}$"

    if span.type == "mention":
        text = render_mention(span)
    elif span.type == "text":
        text = span.content
    else:
        text = span.plain_text

    text = apply_annotations(text, span.annotations)

    if span.href:
        text = f"[{text}]({span.href})"
    return text


def render_mention(span: RichTextSpan) -> str:
    """Mentions render their display label; dates render their range."""
    mention = span.mention
    if mention.get("type") == "date":
        date = mention.get("date") or {}
        start = date.get("start") or ""
        end = date.get("end")
        return f"{start} → {end}" if end else start
    return span.plain_text


def apply_annotations(text: str, annotations: Annotations) -> str:
    if not text:
        return text

    # Nothing else is applied inside or around inline code
    if annotations.code:
        return f"`{text}`"

    if annotations.strikethrough:
        text = f"~~{text}~~"

    if annotations.bold and annotations.italic:
        text = f"***{text}***"
    elif annotations.bold:
        text = f"**{text}**"
    elif annotations.italic:
        text = f"*{text}*"

    # No Markdown syntax for underline
    if annotations.underline:
        text = f"<u>{text}</u>"

    return text
