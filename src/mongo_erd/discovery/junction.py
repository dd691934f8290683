"""
Junction Classifier - Flags collections that mostly link two others.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from typing import Dict, List, Mapping, Set

from mongo_erd.models import CollectionSchema, Relationship

logger = logging.getLogger(__name__)


class JunctionClassifier:
    """
    Structural heuristic for many-to-many link tables.

    A collection is a junction when it is the source of at least
    ``min_relationships`` relationships and its schema has at most
    ``max_fields`` fields.
    """

    def __init__(self, max_fields: int = 5, min_relationships: int = 2):
        self.max_fields = max_fields
        self.min_relationships = min_relationships

    def classify(
        self,
        relationships: List[Relationship],
        schemas: Mapping[str, CollectionSchema],
    ) -> Set[str]:
        by_source: Dict[str, List[Relationship]] = defaultdict(list)
        for rel in relationships:
            by_source[rel.source_collection].append(rel)

        junctions: Set[str] = set()
        for name, rels in by_source.items():
            field_count = len(schemas.get(name, {}))
            if len(rels) >= self.min_relationships and field_count <= self.max_fields:
                junctions.add(name)

        if junctions:
            logger.info(f"Junction tables: {', '.join(sorted(junctions))}")
        return junctions
