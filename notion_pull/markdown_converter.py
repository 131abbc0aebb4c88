"""
Module for converting Notion block trees into Markdown documents.
"""

import re
from typing import List, Optional
from urllib.parse import quote

from .constants import (
    DATABASE_INDEX_FILENAME,
    FILE_BLOCK_TYPES,
    LIST_ITEM_TYPES,
    MARKDOWN_INDENT,
    NESTING_TYPES,
    STRUCTURAL_BLOCK_TYPES,
)
from .models import Block, Page, parse_rich_text
from .rich_text import render_rich_text


def _heading(prefix):
    def render(block):
        return f"{prefix} {render_rich_text(block.rich_text())}"
    return render


def _paragraph(block):
    return render_rich_text(block.rich_text())


def _bulleted_list_item(block):
    return f"- {render_rich_text(block.rich_text())}"


def _numbered_list_item(block):
    return f"1. {render_rich_text(block.rich_text())}"


def _to_do(block):
    checkbox = "[x]" if block.payload.get("checked") else "[ ]"
    return f"- {checkbox} {render_rich_text(block.rich_text())}"


def _code(block):
    language = block.payload.get("language") or ""
    if language == "plain text":
        language = ""
    code = render_rich_text(block.rich_text())
    caption = render_rich_text(block.rich_text("caption"))
    markdown = f"```{language}\n{code}\n```"
    if caption:
        markdown += f"\n*{caption}*"
    return markdown


def _quote(block):
    text = render_rich_text(block.rich_text())
    return "\n".join(f"> {line}" for line in text.split("\n"))


def _callout(block):
    icon = block.payload.get("icon") or {}
    emoji = f"{icon['emoji']} " if icon.get("type") == "emoji" and icon.get("emoji") else ""
    return f"> {emoji}{render_rich_text(block.rich_text())}"


def _divider(block):
    return "---"


def _file_url(payload):
    """URL of an external or Notion-hosted file payload."""
    if payload.get("type") == "external":
        return (payload.get("external") or {}).get("url", "")
    if payload.get("type") == "file":
        return (payload.get("file") or {}).get("url", "")
    return ""


def _image(block):
    label = render_rich_text(block.rich_text("caption")) or block.type
    return f"![{label}]({_file_url(block.payload)})"


def _file_block(block):
    label = render_rich_text(block.rich_text("caption")) or block.type
    url = _file_url(block.payload)
    return f"[{label}]({url})" if url else label


def _bookmark(block):
    url = block.payload.get("url") or ""
    label = render_rich_text(block.rich_text("caption")) or url
    return f"[{label}]({url})"


def _embed(block):
    label = render_rich_text(block.rich_text("caption")) or "embed"
    return f"[{label}]({block.payload.get('url') or ''})"


def _link_preview(block):
    url = block.payload.get("url") or ""
    return f"[{url}]({url})"


def _toggle(block):
    # Children are rendered by the assembler
    return f"**{render_rich_text(block.rich_text())}**"


def _equation(block):
    return f"$$\n{block.payload.get('expression', '')}\n$$"


def _structural(block):
    return ""


def _encode_title(title):
    # Same unreserved set as JavaScript's encodeURIComponent
    return quote(title, safe="!*'()")


def _child_page(block):
    title = block.payload.get("title", "")
    return f"**[{title}](./{_encode_title(title)}.md)**"


def _child_database(block):
    title = block.payload.get("title", "")
    return f"**[{title}](./{_encode_title(title)}/{DATABASE_INDEX_FILENAME})**"


def render_table(block):
    """
    Render a table block and its table_row children as a pipe table.

    The first row is always treated as the header.
    """
    lines = []
    for index, row in enumerate(block.children):
        if row.type != "table_row":
            continue
        cells = [
            render_rich_text(parse_rich_text(cell)).replace("|", "\\|")
            for cell in row.payload.get("cells", [])
        ]
        lines.append(f"| {' | '.join(cells)} |")
        if index == 0:
            lines.append(f"| {' | '.join('---' for _ in cells)} |")
    return "\n".join(lines)


BLOCK_RENDERERS = {
    "paragraph": _paragraph,
    "heading_1": _heading("#"),
    "heading_2": _heading("##"),
    "heading_3": _heading("###"),
    "bulleted_list_item": _bulleted_list_item,
    "numbered_list_item": _numbered_list_item,
    "to_do": _to_do,
    "code": _code,
    "quote": _quote,
    "callout": _callout,
    "divider": _divider,
    "image": _image,
    "bookmark": _bookmark,
    "embed": _embed,
    "link_preview": _link_preview,
    "toggle": _toggle,
    "equation": _equation,
    "table": render_table,
    "child_page": _child_page,
    "child_database": _child_database,
}
BLOCK_RENDERERS.update({block_type: _file_block for block_type in FILE_BLOCK_TYPES})
BLOCK_RENDERERS.update({block_type: _structural for block_type in STRUCTURAL_BLOCK_TYPES})


def convert_block_to_markdown(block: Block) -> str:
    """Convert a single Notion block, without its children, to Markdown."""
    renderer = BLOCK_RENDERERS.get(block.type)
    if renderer is None:
        return f"<!-- unsupported: {block.type} -->"
    return renderer(block)


def escape_yaml(value: str) -> str:
    return value.replace("\\", "\\\\").replace('"', '\\"')


def build_frontmatter(page: Page) -> str:
    lines = [
        "---",
        f'title: "{escape_yaml(page.title)}"',
        f"created: {page.created_time}",
        f"last_edited: {page.last_edited_time}",
        "---",
        "",
    ]
    return "\n".join(lines)


def _indent_lines(text, indent):
    if not indent:
        return text
    return "\n".join(indent + line if line else line for line in text.split("\n"))


def _render_blocks(blocks: List[Block], depth: int) -> str:
    lines = []
    indent = MARKDOWN_INDENT * depth

    for index, block in enumerate(blocks):
        previous = blocks[index - 1] if index > 0 else None

        # Tables consume their own rows
        if block.type == "table":
            lines.append(_indent_lines(convert_block_to_markdown(block), indent))
            lines.append("")
            continue

        rendered = convert_block_to_markdown(block)
        is_list = block.type in LIST_ITEM_TYPES
        previous_is_list = previous is not None and previous.type in LIST_ITEM_TYPES

        if rendered and not (is_list and previous_is_list) and lines and lines[-1] != "":
            lines.append("")
        if rendered:
            lines.append(_indent_lines(rendered, indent))

        if block.children:
            child_depth = depth + 1 if block.type in NESTING_TYPES else depth
            child_markdown = _render_blocks(block.children, child_depth)
            if child_markdown.strip():
                lines.append(child_markdown)

    return "\n".join(lines)


def convert_blocks_to_markdown(blocks: List[Block], page: Optional[Page] = None) -> str:
    """
    Assemble a complete Markdown document from a block tree.

    Args:
        blocks: top-level blocks with their children attached
        page: when given, a frontmatter block is prepended

    Returns:
        str: the document, ending with exactly one newline
    """
    parts = []
    if page is not None:
        parts.append(build_frontmatter(page))
    parts.append(_render_blocks(blocks, 0))

    document = re.sub(r"\n{3,}", "\n\n", "\n".join(parts))
    return document.rstrip() + "\n"
