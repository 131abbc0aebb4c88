"""
Typed views over the Notion API objects used during a pull.

The API hands back plain dictionaries; these classes pick out the fields the
renderers and the traversal need and keep the rest of a block's payload as-is.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

from .constants import CHILD_RESOURCE_TYPES, UNTITLED_DATABASE, UNTITLED_PAGE


class ResourceKind(str, Enum):
    """The two kinds of resource a traversal can visit."""

    PAGE = "page"
    DATABASE = "database"


def join_plain_text(items) -> str:
    """Concatenate the ``plain_text`` of raw rich text items."""
    return "".join(item.get("plain_text", "") for item in items or [])


@dataclass
class Annotations:
    bold: bool = False
    italic: bool = False
    strikethrough: bool = False
    underline: bool = False
    code: bool = False
    color: str = "default"

    @classmethod
    def from_api(cls, data: Optional[Dict[str, Any]]) -> "Annotations":
        data = data or {}
        return cls(
            bold=bool(data.get("bold")),
            italic=bool(data.get("italic")),
            strikethrough=bool(data.get("strikethrough")),
            underline=bool(data.get("underline")),
            code=bool(data.get("code")),
            color=data.get("color") or "default",
        )


@dataclass
class RichTextSpan:
    """One styled run of inline text: literal text, a mention, or an equation."""

    type: str
    plain_text: str = ""
    content: str = ""
    expression: str = ""
    mention: Dict[str, Any] = field(default_factory=dict)
    annotations: Annotations = field(default_factory=Annotations)
    href: Optional[str] = None

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> "RichTextSpan":
        span_type = data.get("type", "text")
        plain_text = data.get("plain_text", "")
        return cls(
            type=span_type,
            plain_text=plain_text,
            content=(data.get("text") or {}).get("content", plain_text),
            expression=(data.get("equation") or {}).get("expression", ""),
            mention=data.get("mention") or {},
            annotations=Annotations.from_api(data.get("annotations")),
            href=data.get("href"),
        )


def parse_rich_text(items) -> List[RichTextSpan]:
    """Build spans from a raw rich text array (``None`` is treated as empty)."""
    return [RichTextSpan.from_api(item) for item in items or []]


@dataclass
class Block:
    """
    A content block and its already-fetched descendants.

    ``payload`` is the kind-specific object the API stores under the key named
    by ``type`` (e.g. ``block["paragraph"]``).
    """

    id: str
    type: str
    payload: Dict[str, Any] = field(default_factory=dict)
    has_children: bool = False
    children: List["Block"] = field(default_factory=list)

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> "Block":
        block_type = data["type"]
        return cls(
            id=data.get("id", ""),
            type=block_type,
            payload=data.get(block_type) or {},
            has_children=bool(data.get("has_children")),
        )

    @property
    def is_child_resource(self) -> bool:
        return self.type in CHILD_RESOURCE_TYPES

    def rich_text(self, key: str = "rich_text") -> List[RichTextSpan]:
        return parse_rich_text(self.payload.get(key))


def count_blocks(blocks: List[Block]) -> int:
    """Count blocks in a tree, descendants included."""
    return sum(1 + count_blocks(block.children) for block in blocks)


@dataclass
class Page:
    """A page or database entry with its property values."""

    id: str
    created_time: str = ""
    last_edited_time: str = ""
    properties: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> "Page":
        return cls(
            id=data["id"],
            created_time=data.get("created_time", ""),
            last_edited_time=data.get("last_edited_time", ""),
            properties=data.get("properties") or {},
        )

    @property
    def title(self) -> str:
        for prop in self.properties.values():
            if prop.get("type") == "title" and prop.get("title"):
                return join_plain_text(prop["title"])
        return UNTITLED_PAGE


@dataclass
class PropertyDefinition:
    """One column of a data source schema."""

    name: str
    id: str
    type: str
    config: Dict[str, Any] = field(default_factory=dict)


# Property name -> definition, in schema order
PropertySchema = Dict[str, PropertyDefinition]


def build_property_schema(properties: Dict[str, Any]) -> PropertySchema:
    """Build a schema from a data source's raw ``properties`` map."""
    schema = {}
    for name, prop in (properties or {}).items():
        prop_type = prop.get("type", "")
        schema[name] = PropertyDefinition(
            name=name,
            id=prop.get("id", ""),
            type=prop_type,
            config=prop.get(prop_type) or {},
        )
    return schema


@dataclass
class RelationEdge:
    source_database_id: str
    property_name: str
    target_database_id: str


@dataclass
class Database:
    """A database container, its primary data source schema and all entries."""

    id: str
    title: str
    data_source_id: str
    schema: PropertySchema = field(default_factory=dict)
    entries: List[Page] = field(default_factory=list)

    @staticmethod
    def title_from_api(data: Dict[str, Any]) -> str:
        return join_plain_text(data.get("title")) or UNTITLED_DATABASE

    def relation_edges(self) -> List[RelationEdge]:
        """Relation properties of the schema, in schema order."""
        edges = []
        for name, prop in self.schema.items():
            if prop.type != "relation":
                continue
            target = prop.config.get("database_id")
            if target:
                edges.append(RelationEdge(self.id, name, target))
        return edges
