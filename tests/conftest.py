"""Shared fixtures: an in-memory stand-in for the MongoDB extractor."""

from datetime import datetime

import pytest
from bson import ObjectId

from mongo_erd.exceptions import ConnectivityError
from mongo_erd.metadata import DatabaseInfo


def oid(n: int) -> ObjectId:
    """Deterministic ObjectId for tests."""
    return ObjectId(f"{n:024x}")


class FakeExtractor:
    """Serves documents from a dict of collection name -> documents."""

    def __init__(self, collections, databases=None, fail_connect=False, fail_sample=None):
        self.collections = collections
        self.databases = databases or [DatabaseInfo("shop", 1536)]
        self.fail_connect = fail_connect
        self.fail_sample = fail_sample
        self.sample_calls = []
        self.connected = False

    def connect(self):
        if self.fail_connect:
            raise ConnectivityError("Cannot connect to MongoDB: connection refused")
        self.connected = True

    def disconnect(self):
        self.connected = False

    def __enter__(self):
        self.connect()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.disconnect()

    def list_databases(self):
        return list(self.databases)

    def list_collections(self, db_name):
        return sorted(self.collections)

    def sample_collection(self, db_name, collection, limit=100):
        self.sample_calls.append((db_name, collection, limit))
        if self.fail_sample is not None:
            raise self.fail_sample
        return list(self.collections[collection][:limit])


@pytest.fixture
def shop_collections():
    """users referenced by three orders of the same user."""
    return {
        "users": [
            {"_id": oid(1), "name": "Ada"},
            {"_id": oid(2), "name": "Grace"},
        ],
        "orders": [
            {"_id": oid(101), "userId": oid(1)},
            {"_id": oid(102), "userId": oid(1)},
            {"_id": oid(103), "userId": oid(1)},
        ],
    }


@pytest.fixture
def blog_collections():
    """posts and users linked through array-valued references on tags."""
    return {
        "users": [
            {"_id": oid(1), "name": "Ada", "createdAt": datetime(2024, 1, 1)},
            {"_id": oid(2), "name": "Grace", "createdAt": datetime(2024, 2, 1)},
        ],
        "posts": [
            {"_id": oid(11), "title": "Hello", "authorId": oid(1)},
            {"_id": oid(12), "title": "World", "authorId": oid(2)},
        ],
        "tags": [
            {"_id": oid(21), "name": "python", "postIds": [oid(11), oid(12)], "followerIds": [oid(1)]},
            {"_id": oid(22), "name": "mongo", "postIds": [oid(12)], "followerIds": [oid(1), oid(2)]},
        ],
    }


@pytest.fixture
def shop_extractor(shop_collections):
    return FakeExtractor(shop_collections)


@pytest.fixture
def blog_extractor(blog_collections):
    return FakeExtractor(blog_collections)
