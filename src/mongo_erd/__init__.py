"""
MongoDB ERD - Entity-relationship diagrams for document databases

Samples each collection of a MongoDB database, infers an approximate
relational schema and renders it as Mermaid erDiagram text.

Features:
- Flattened per-collection schemas from bounded document samples
- Relationship detection by matching ObjectId values across collections
- One-to-one / one-to-many / many-to-many cardinality with confidence
- Junction (link) collection detection
- CLI and HTTP endpoint for the rendered diagram
"""

__version__ = "0.2.0"

from mongo_erd.models import (
    Cardinality,
    ErdConfig,
    ErdResult,
    FieldType,
    IdentifierEntry,
    Relationship,
)

from mongo_erd.discovery import (
    ErdPipeline,
    IdentifierIndexer,
    JunctionClassifier,
    RelationshipDetector,
    SchemaInferer,
    generate_erd,
)

from mongo_erd.output import DiagramRenderer, ReportWriter

__all__ = [
    # Core models
    "Cardinality",
    "ErdConfig",
    "ErdResult",
    "FieldType",
    "IdentifierEntry",
    "Relationship",
    # Discovery
    "ErdPipeline",
    "IdentifierIndexer",
    "JunctionClassifier",
    "RelationshipDetector",
    "SchemaInferer",
    "generate_erd",
    # Output
    "DiagramRenderer",
    "ReportWriter",
]
