"""
Identifier Indexer - Collects ObjectId-like values per field path.

A value looks like an identifier when it is a native ObjectId or a string
of exactly 24 hexadecimal characters. Values are stored as lowercase
strings so native and textual forms compare equal.
"""

from __future__ import annotations

import logging
import re
from typing import Any, Iterable, Mapping, Optional

from bson import ObjectId

from mongo_erd.discovery.schema_inferer import is_nested_document, join_path
from mongo_erd.models import FieldMap, IdentifierEntry

logger = logging.getLogger(__name__)

OBJECT_ID_PATTERN = re.compile(r"^[a-f0-9]{24}$", re.IGNORECASE)

# Keys starting with this marker are internal and never indexed
RESERVED_KEY_PREFIX = "__"


def looks_like_identifier(value: Any) -> bool:
    """True for native ObjectIds and 24-hex-character strings."""
    if isinstance(value, ObjectId):
        return True
    return isinstance(value, str) and OBJECT_ID_PATTERN.match(value) is not None


def normalize_identifier(value: Any) -> str:
    """Stable lowercase string form of an identifier value."""
    return str(value).lower()


class IdentifierIndexer:
    """
    Builds the identifier index of one collection.

    Example:
        indexer = IdentifierIndexer()
        field_map = indexer.index(docs)
        field_map["userId"].ids  # {"64b7f0...", ...}
    """

    def __init__(self, max_depth: int = 32):
        self.max_depth = max_depth

    def index(self, documents: Iterable[Mapping[str, Any]]) -> FieldMap:
        """Fold every document into a fresh field map."""
        field_map: FieldMap = {}
        for doc in documents:
            self.traverse(doc, "", field_map)
        return field_map

    def traverse(
        self,
        document: Mapping[str, Any],
        prefix: str,
        field_map: FieldMap,
        _depth: int = 0,
    ) -> None:
        """
        Record identifier values found in ``document`` into ``field_map``.

        Arrays of identifiers mark the entry as array-valued; arrays of
        sub-documents are not descended into.
        """
        for key, value in document.items():
            key = str(key)
            if key.startswith(RESERVED_KEY_PREFIX):
                continue
            path = join_path(prefix, key)

            if looks_like_identifier(value):
                self._entry(field_map, path).add(normalize_identifier(value))

            elif isinstance(value, (list, tuple)):
                identifiers = [v for v in value if looks_like_identifier(v)]
                if identifiers:
                    entry = self._entry(field_map, path)
                    entry.is_array = True
                    for v in identifiers:
                        entry.add(normalize_identifier(v))

            elif is_nested_document(value):
                if _depth + 1 < self.max_depth:
                    self.traverse(value, path, field_map, _depth + 1)
                else:
                    logger.debug(f"Depth limit reached at '{path}', not indexing below it")

    @staticmethod
    def _entry(field_map: FieldMap, path: str) -> IdentifierEntry:
        entry: Optional[IdentifierEntry] = field_map.get(path)
        if entry is None:
            entry = field_map[path] = IdentifierEntry()
        return entry
