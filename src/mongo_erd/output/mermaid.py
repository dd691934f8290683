"""
Mermaid ER diagram renderer.

Turns collection schemas, detected relationships and junction flags into
``erDiagram`` text for a Mermaid front end.
"""

from __future__ import annotations

import logging
import re
from typing import Iterable, List, Mapping, Set

from mongo_erd.models import CollectionSchema, FieldType, Relationship

logger = logging.getLogger(__name__)

HEADER = "erDiagram"
JUNCTION_SUFFIX = " [junction]"

_UNSAFE_CHARS = re.compile(r"[^a-zA-Z0-9_]")
_SAFE_NAME = re.compile(r"^[a-zA-Z0-9_]+$")


def to_safe_id(name: str) -> str:
    """Mermaid entity names must be alphanumeric plus underscore."""
    return _UNSAFE_CHARS.sub("_", name)


def sanitize_type(type_label: str) -> str:
    """Escape generic brackets the way Mermaid expects (``Array~ObjectId~``)."""
    if not type_label:
        return FieldType.UNKNOWN.value
    return type_label.replace("<", "~").replace(">", "~")


def sanitize_field(field_name: str) -> str:
    """Mermaid rejects dots even in quoted names, so flatten them to underscores."""
    if not field_name:
        return FieldType.UNKNOWN.value

    name = field_name.replace(".", "_")
    if _SAFE_NAME.match(name):
        return name
    return _UNSAFE_CHARS.sub("_", name)


def entity_header(collection: str) -> str:
    """Entity identifier, aliased to the original name when sanitizing changed it."""
    safe_id = to_safe_id(collection)
    if safe_id != collection:
        return f'{safe_id}["{collection}"]'
    return safe_id


class DiagramRenderer:
    """
    Renders the Mermaid ``erDiagram`` grammar.

    Layout:
        erDiagram
            users {
                ObjectId _id
                String name
            }
            users ||--o{ orders : "userId"
    """

    def __init__(self, indent: str = "    "):
        self.indent = indent

    def render(
        self,
        schemas: Mapping[str, CollectionSchema],
        relationships: Iterable[Relationship],
        junction_tables: Set[str],
    ) -> str:
        lines = [HEADER]
        for name, schema in schemas.items():
            lines.extend(self.entity_lines(name, schema))
        lines.extend(self.relationship_lines(relationships, junction_tables))

        logger.debug(f"Rendered {len(schemas)} entities")
        return "\n".join(lines) + "\n"

    def entity_lines(self, collection: str, schema: CollectionSchema) -> List[str]:
        """Lines for one entity block."""
        lines = [f"{self.indent}{entity_header(collection)} {{"]
        for field_name, type_label in schema.items():
            if not field_name.strip():
                continue
            lines.append(f"{self.indent * 2}{sanitize_type(type_label)} {sanitize_field(field_name)}")
        lines.append(f"{self.indent}}}")
        return lines

    def relationship_lines(
        self,
        relationships: Iterable[Relationship],
        junction_tables: Set[str],
    ) -> List[str]:
        """Relationship lines, deduplicated as exact strings in first-seen order."""
        seen = {}
        for rel in relationships:
            suffix = JUNCTION_SUFFIX if rel.source_collection in junction_tables else ""
            line = (
                f"{self.indent}{to_safe_id(rel.target_collection)} {rel.cardinality.notation} "
                f'{to_safe_id(rel.source_collection)} : "{sanitize_field(rel.source_field)}{suffix}"'
            )
            seen.setdefault(line, None)
        return list(seen)
