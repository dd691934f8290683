"""
Relationship Detector - Discovers references between collections.

A field references a collection when some of its identifier values are
found among that collection's own ``_id`` values. Every non-empty match
becomes a candidate relationship scored by confidence; nothing is
deduplicated or suppressed here.
"""

from __future__ import annotations

import logging
from decimal import ROUND_HALF_UP, Decimal
from typing import Dict, List

from mongo_erd.models import (
    ID_FIELD,
    Cardinality,
    FieldMap,
    IdentifierEntry,
    Relationship,
)

logger = logging.getLogger(__name__)


def determine_cardinality(entry: IdentifierEntry) -> Cardinality:
    """
    Classify the cardinality of a reference from its source entry.

    Priority order:
    1. Array-valued anywhere -> many-to-many
    2. Same id referenced more than once -> one-to-many
    3. Otherwise -> one-to-one
    """
    if entry.is_array:
        return Cardinality.MANY_TO_MANY
    if entry.count > entry.unique_count:
        return Cardinality.ONE_TO_MANY
    return Cardinality.ONE_TO_ONE


def confidence(match_count: int, unique_count: int) -> float:
    """Share of unique source ids found in the target, rounded half up to 2 places."""
    ratio = Decimal(match_count) / Decimal(unique_count)
    return float(ratio.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP))


class RelationshipDetector:
    """
    Intersects identifier sets across collections.

    For each (collection, field) other than the collection's own id field,
    the field's ids are matched against every collection's id field,
    including its own collection (self references).
    """

    def __init__(self, id_field: str = ID_FIELD):
        self.id_field = id_field

    def detect(self, index: Dict[str, FieldMap]) -> List[Relationship]:
        """
        Detect relationships in a complete identifier index.

        Args:
            index: collection name -> field path -> IdentifierEntry

        Returns:
            Relationships in sorted source/field/target order
        """
        relationships: List[Relationship] = []

        targets = {
            name: fields[self.id_field].ids
            for name, fields in sorted(index.items())
            if self.id_field in fields and fields[self.id_field].ids
        }

        for source_col in sorted(index):
            for source_field, entry in sorted(index[source_col].items()):
                if source_field == self.id_field or not entry.ids:
                    continue

                for target_col, target_ids in targets.items():
                    matches = entry.ids & target_ids
                    if not matches:
                        continue

                    relationships.append(Relationship(
                        source_collection=source_col,
                        source_field=source_field,
                        target_collection=target_col,
                        target_field=self.id_field,
                        cardinality=determine_cardinality(entry),
                        match_count=len(matches),
                        confidence=confidence(len(matches), entry.unique_count),
                        is_self_reference=source_col == target_col,
                    ))

        logger.info(f"Detected {len(relationships)} candidate relationships")
        return relationships
