"""
Module for converting Notion database entries into CSV tables.
"""

import csv
import io
import json
import unicodedata
from typing import Any, Dict, List

from .models import Page, PropertySchema, join_plain_text


def _format_number(value) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def _format_date(date) -> str:
    if not date:
        return ""
    start = date.get("start") or ""
    end = date.get("end")
    return f"{start} → {end}" if end else start


def _format_user(user) -> str:
    if not user:
        return ""
    return user.get("name") or user.get("id", "")


def _format_file(item) -> str:
    if item.get("type") == "external":
        return (item.get("external") or {}).get("url", "")
    if item.get("type") == "file":
        return (item.get("file") or {}).get("url", "")
    return ""


def _format_formula(formula) -> str:
    formula = formula or {}
    formula_type = formula.get("type")
    if formula_type == "string":
        return formula.get("string") or ""
    if formula_type == "number":
        return _format_number(formula.get("number"))
    if formula_type == "boolean":
        return "true" if formula.get("boolean") else "false"
    if formula_type == "date":
        return _format_date(formula.get("date"))
    return ""


def _format_rollup_item(item) -> str:
    if isinstance(item, dict):
        if "type" in item and item["type"] in PROPERTY_EXTRACTORS:
            return extract_property_value(item)
        if "plain_text" in item:
            return item["plain_text"]
        if "name" in item:
            return item["name"]
    return json.dumps(item, ensure_ascii=False)


def _format_rollup(rollup) -> str:
    rollup = rollup or {}
    rollup_type = rollup.get("type")
    if rollup_type == "number":
        return _format_number(rollup.get("number"))
    if rollup_type == "date":
        return _format_date(rollup.get("date"))
    if rollup_type == "array":
        return "; ".join(_format_rollup_item(item) for item in rollup.get("array") or [])
    return ""


def _format_unique_id(unique_id) -> str:
    unique_id = unique_id or {}
    number = _format_number(unique_id.get("number"))
    prefix = unique_id.get("prefix")
    return f"{prefix}-{number}" if prefix else number


PROPERTY_EXTRACTORS = {
    "title": lambda value: join_plain_text(value),
    "rich_text": lambda value: join_plain_text(value),
    "number": _format_number,
    "select": lambda value: (value or {}).get("name", ""),
    "status": lambda value: (value or {}).get("name", ""),
    "multi_select": lambda value: "; ".join(option.get("name", "") for option in value or []),
    "date": _format_date,
    "checkbox": lambda value: "true" if value else "false",
    "url": lambda value: value or "",
    "email": lambda value: value or "",
    "phone_number": lambda value: value or "",
    "formula": _format_formula,
    "relation": lambda value: "; ".join(item.get("id", "") for item in value or []),
    "rollup": _format_rollup,
    "people": lambda value: "; ".join(_format_user(person) for person in value or []),
    "files": lambda value: "; ".join(_format_file(item) for item in value or []),
    "created_time": lambda value: value or "",
    "last_edited_time": lambda value: value or "",
    "created_by": _format_user,
    "last_edited_by": _format_user,
    "unique_id": _format_unique_id,
}


def extract_property_value(prop: Dict[str, Any]) -> str:
    """Flatten a page property value into a string suitable for CSV."""
    extractor = PROPERTY_EXTRACTORS.get(prop.get("type"))
    if extractor is None:
        return ""
    return extractor(prop.get(prop["type"]))


def _collation_key(name: str):
    decomposed = unicodedata.normalize("NFKD", name.casefold())
    base = "".join(char for char in decomposed if not unicodedata.combining(char))
    return (base, name)


def sort_columns(schema: PropertySchema) -> List[str]:
    """Title column first, then the remaining names in collation order."""
    title_column = None
    others = []
    for name, definition in schema.items():
        if definition.type == "title":
            title_column = name
        else:
            others.append(name)

    others.sort(key=_collation_key)
    return [title_column] + others if title_column else others


# Both CR and LF in the terminator make the writer quote fields holding either
_FIELD_TERMINATOR = "\r\n"


def escape_field(value: str) -> str:
    """Quote a field per RFC 4180 when it holds a comma, newline or quote."""
    if not value:
        return ""
    buffer = io.StringIO()
    csv.writer(buffer, lineterminator=_FIELD_TERMINATOR).writerow([value])
    return buffer.getvalue()[: -len(_FIELD_TERMINATOR)]


def convert_entries_to_csv(entries: List[Page], schema: PropertySchema) -> str:
    """
    Convert database entries into a CSV document.

    A property missing from an entry yields an empty field.
    """
    columns = sort_columns(schema)
    lines = [",".join(escape_field(column) for column in columns)]

    for entry in entries:
        row = []
        for column in columns:
            prop = entry.properties.get(column)
            row.append(escape_field(extract_property_value(prop)) if prop else "")
        lines.append(",".join(row))

    return "\n".join(lines) + "\n"
