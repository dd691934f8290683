"""
Schema Inferer - Builds an approximate flat schema for a collection.

Each sampled document is folded into a mapping of dot-joined field paths
to type labels. Nested objects are flattened; arrays are typed from their
first element only. The first concrete type seen for a path wins.
"""

from __future__ import annotations

import logging
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Iterable, Mapping, Optional

from bson import ObjectId
from bson.decimal128 import Decimal128
from bson.int64 import Int64

from mongo_erd.models import CollectionSchema, FieldType

logger = logging.getLogger(__name__)

NUMERIC_TYPES = (int, float, Decimal, Decimal128, Int64)


def join_path(prefix: str, key: str) -> str:
    """Join a field path prefix and a key with a dot."""
    return f"{prefix}.{key}" if prefix else key


def is_nested_document(value: Any) -> bool:
    """True for plain sub-documents (mappings), never for arrays or dates."""
    return isinstance(value, Mapping)


def scalar_type(value: Any) -> str:
    """Type label of a non-container value."""
    if value is None:
        return FieldType.UNKNOWN.value
    if isinstance(value, ObjectId):
        return FieldType.IDENTIFIER.value
    if isinstance(value, (datetime, date)):
        return FieldType.DATE.value
    # bool is an int subclass
    if isinstance(value, bool):
        return FieldType.BOOLEAN.value
    if isinstance(value, NUMERIC_TYPES):
        return FieldType.NUMBER.value
    return FieldType.STRING.value


def primitive_name(value: Any) -> str:
    """Lowercase primitive name of an array element."""
    if value is None:
        return "object"
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, NUMERIC_TYPES):
        return "number"
    return "string"


def array_type(values: list) -> str:
    """
    Type label of an array, looking at its first element only.

    Identifiers give Array<ObjectId>; documents, nested arrays, dates and
    other structured values give Array<Object>; primitives give their
    lowercase name (Array<string>, Array<number>, Array<boolean>).
    """
    if not values:
        return FieldType.ARRAY.value

    first = values[0]
    if isinstance(first, ObjectId):
        return FieldType.array_of(FieldType.IDENTIFIER.value)
    if first is not None and not isinstance(first, (str, bool) + NUMERIC_TYPES):
        return FieldType.array_of(FieldType.OBJECT.value)
    return FieldType.array_of(primitive_name(first))


class SchemaInferer:
    """
    Infers a collection schema from sampled documents.

    Merge rule: a path's type is written only while the path is absent or
    still holds the Unknown placeholder, so a later conflicting value never
    replaces a concrete type.
    """

    def __init__(self, max_depth: int = 32):
        """
        Args:
            max_depth: Nesting depth at which sub-documents are recorded as
                Object instead of being flattened further
        """
        self.max_depth = max_depth

    def infer(self, documents: Iterable[Mapping[str, Any]]) -> CollectionSchema:
        """Build a schema from a sequence of documents."""
        schema: CollectionSchema = {}
        for doc in documents:
            self.analyze(doc, schema)
        return schema

    def analyze(
        self,
        document: Mapping[str, Any],
        schema: CollectionSchema,
        prefix: str = "",
        _depth: int = 0,
    ) -> None:
        """
        Fold one document into ``schema`` in place.

        Args:
            document: Raw document or sub-document
            schema: Schema being built (field path -> type label)
            prefix: Field path of ``document`` inside the top-level document
        """
        for key, value in document.items():
            if not key:
                continue
            path = join_path(prefix, str(key))

            if is_nested_document(value):
                if _depth + 1 < self.max_depth:
                    # Flattened: the parent path itself gets no type
                    self.analyze(value, schema, path, _depth + 1)
                    continue
                logger.debug(f"Depth limit reached at '{path}', recording as Object")
                type_label = FieldType.OBJECT.value
            elif isinstance(value, (list, tuple)):
                type_label = array_type(list(value))
            else:
                type_label = scalar_type(value)

            self._merge(schema, path, type_label)

    @staticmethod
    def _merge(schema: CollectionSchema, path: str, type_label: str) -> None:
        current: Optional[str] = schema.get(path)
        if current is None or current == FieldType.UNKNOWN.value:
            schema[path] = type_label
