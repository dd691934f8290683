"""
Core data models for the mongo_erd package.

Defines the structures passed between the inference stages: field types,
identifier index entries, relationships, run configuration and the final
result of one ERD generation.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Set

from mongo_erd.exceptions import ConfigError

# Field name every MongoDB collection uses as its own identifier
ID_FIELD = "_id"

# Schema of one collection: field path -> type label
CollectionSchema = Dict[str, str]

# Identifier index of one collection: field path -> IdentifierEntry
FieldMap = Dict[str, "IdentifierEntry"]


class FieldType(str, Enum):
    """Type labels recorded in a collection schema."""
    IDENTIFIER = "ObjectId"
    DATE = "Date"
    NUMBER = "Number"
    BOOLEAN = "Boolean"
    STRING = "String"
    ARRAY = "Array"
    OBJECT = "Object"
    UNKNOWN = "Unknown"  # Placeholder until a concrete value is seen

    @staticmethod
    def array_of(element: str) -> str:
        """Label for an array whose first element has the given label."""
        return f"Array<{element}>"


class Cardinality(str, Enum):
    """Relationship cardinality classes."""
    ONE_TO_ONE = "one-to-one"
    ONE_TO_MANY = "one-to-many"
    MANY_TO_MANY = "many-to-many"

    @property
    def notation(self) -> str:
        """Mermaid notation, target side first and source side second."""
        return _NOTATIONS[self]


_NOTATIONS = {
    Cardinality.ONE_TO_ONE: "||--||",
    Cardinality.ONE_TO_MANY: "||--o{",
    Cardinality.MANY_TO_MANY: "}o--o{",
}


@dataclass
class IdentifierEntry:
    """Identifier values observed at one field path of one collection."""
    ids: Set[str] = field(default_factory=set)
    is_array: bool = False
    count: int = 0  # Raw occurrences, never less than len(ids)

    def add(self, value: str) -> None:
        self.ids.add(value)
        self.count += 1

    @property
    def unique_count(self) -> int:
        return len(self.ids)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "ids": sorted(self.ids),
            "is_array": self.is_array,
            "count": self.count,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> IdentifierEntry:
        """Create from dictionary."""
        return cls(
            ids=set(data.get("ids", [])),
            is_array=data.get("is_array", False),
            count=data.get("count", 0),
        )


@dataclass
class Relationship:
    """A reference from a source field to a target collection's identifier."""
    source_collection: str
    source_field: str
    target_collection: str
    target_field: str
    cardinality: Cardinality
    match_count: int
    confidence: float  # |matches| / |unique source ids|, two decimals
    is_self_reference: bool = False

    @property
    def name(self) -> str:
        return f"{self.source_collection}.{self.source_field}->{self.target_collection}.{self.target_field}"

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "source_collection": self.source_collection,
            "source_field": self.source_field,
            "target_collection": self.target_collection,
            "target_field": self.target_field,
            "cardinality": self.cardinality.value,
            "match_count": self.match_count,
            "confidence": self.confidence,
            "is_self_reference": self.is_self_reference,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> Relationship:
        """Create from dictionary."""
        return cls(
            source_collection=data["source_collection"],
            source_field=data["source_field"],
            target_collection=data["target_collection"],
            target_field=data.get("target_field", ID_FIELD),
            cardinality=Cardinality(data["cardinality"]),
            match_count=data.get("match_count", 0),
            confidence=data.get("confidence", 0.0),
            is_self_reference=data.get("is_self_reference", False),
        )


@dataclass
class ErdConfig:
    """Configuration for one ERD generation run."""
    url: str = "mongodb://localhost:27017"
    db_name: str = "test"
    sample_size: int = 100

    # Junction table heuristic
    junction_max_fields: int = 5
    junction_min_relationships: int = 2

    # 1 keeps collection sampling strictly sequential
    max_workers: int = 1

    # Nesting depth guard for document traversal
    max_depth: int = 32

    # HTTP shell
    host: str = "127.0.0.1"
    port: int = 3333

    def __post_init__(self):
        if not self.url or not str(self.url).strip():
            raise ConfigError("Connection URL cannot be empty")
        for name in ("sample_size", "max_workers", "max_depth", "junction_min_relationships"):
            value = getattr(self, name)
            if not isinstance(value, int) or value < 1:
                raise ConfigError(f"{name} must be a positive integer, got {value!r}")
        if self.junction_max_fields < 0:
            raise ConfigError(f"junction_max_fields must be >= 0, got {self.junction_max_fields}")

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "url": self.url,
            "db_name": self.db_name,
            "sample_size": self.sample_size,
            "junction_max_fields": self.junction_max_fields,
            "junction_min_relationships": self.junction_min_relationships,
            "max_workers": self.max_workers,
            "max_depth": self.max_depth,
            "host": self.host,
            "port": self.port,
        }


@dataclass
class ErdResult:
    """Everything produced by one ERD generation."""
    db_name: str
    schemas: Dict[str, CollectionSchema] = field(default_factory=dict)
    identifier_index: Dict[str, FieldMap] = field(default_factory=dict)
    relationships: List[Relationship] = field(default_factory=list)
    junction_tables: Set[str] = field(default_factory=set)
    diagram: Optional[str] = None

    @property
    def collection_names(self) -> List[str]:
        return list(self.schemas.keys())

    def get_relationships_for_collection(self, name: str) -> List[Relationship]:
        """Get all relationships involving a collection (as source or target)."""
        return [
            rel for rel in self.relationships
            if rel.source_collection == name or rel.target_collection == name
        ]

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization (identifier values omitted)."""
        return {
            "database": self.db_name,
            "collections": {name: dict(schema) for name, schema in self.schemas.items()},
            "relationships": [r.to_dict() for r in self.relationships],
            "junction_tables": sorted(self.junction_tables),
        }
