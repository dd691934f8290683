"""
Metadata module for MongoDB.

Provides the read-only database collaborator: database and collection
listing and bounded document sampling.
"""

from mongo_erd.metadata.mongo import DatabaseInfo, MongoMetadataExtractor, format_bytes

__all__ = [
    "DatabaseInfo",
    "MongoMetadataExtractor",
    "format_bytes",
]
