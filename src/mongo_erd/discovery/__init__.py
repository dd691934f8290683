"""
Discovery module for inferring schemas and relationships from MongoDB samples.

Stages, leaves first:
- SchemaInferer: flat per-collection schema from sampled documents
- IdentifierIndexer: ObjectId-like values per collection and field path
- RelationshipDetector: id-set intersections with cardinality and confidence
- JunctionClassifier: narrow collections carrying >= 2 references

Usage:
    from mongo_erd.discovery import generate_erd

    text = generate_erd(config)
"""

from mongo_erd.discovery.schema_inferer import SchemaInferer
from mongo_erd.discovery.identifier_indexer import IdentifierIndexer, looks_like_identifier
from mongo_erd.discovery.relationship_detector import RelationshipDetector, determine_cardinality
from mongo_erd.discovery.junction import JunctionClassifier
from mongo_erd.discovery.pipeline import FALLBACK_DIAGRAM, ErdPipeline, generate_erd

__all__ = [
    "SchemaInferer",
    "IdentifierIndexer",
    "looks_like_identifier",
    "RelationshipDetector",
    "determine_cardinality",
    "JunctionClassifier",
    "ErdPipeline",
    "FALLBACK_DIAGRAM",
    "generate_erd",
]
