"""Tests for the MongoDB metadata extractor."""

import pytest
from pymongo.errors import OperationFailure, ServerSelectionTimeoutError

from conftest import oid
from mongo_erd.exceptions import ConnectivityError, SamplingError
from mongo_erd.metadata import DatabaseInfo, MongoMetadataExtractor, format_bytes


class FakeCursor:
    def __init__(self, docs):
        self.docs = docs
        self.limit_value = None

    def limit(self, n):
        self.limit_value = n
        return iter(self.docs[:n])


class FakeCollection:
    def __init__(self, docs, error=None):
        self.docs = docs
        self.error = error

    def find(self, query):
        if self.error:
            raise self.error
        return FakeCursor(self.docs)


class FakeDatabase:
    def __init__(self, collections):
        self.collections = collections

    def list_collection_names(self):
        return list(self.collections)

    def __getitem__(self, name):
        return self.collections[name]


class FakeAdmin:
    def __init__(self, error=None):
        self.error = error

    def command(self, name):
        if self.error:
            raise self.error
        return {"ok": 1}


class FakeClient:
    def __init__(self, databases, ping_error=None):
        self.databases = databases
        self.admin = FakeAdmin(ping_error)
        self.closed = False

    def list_databases(self):
        return iter([
            {"name": "admin", "sizeOnDisk": 4096},
            {"name": "local", "sizeOnDisk": 4096},
            {"name": "shop", "sizeOnDisk": 1536},
        ])

    def __getitem__(self, name):
        return self.databases[name]

    def close(self):
        self.closed = True


@pytest.fixture
def client():
    return FakeClient({
        "shop": FakeDatabase({
            "users": FakeCollection([{"_id": oid(i)} for i in range(5)]),
            "system.views": FakeCollection([]),
            "broken": FakeCollection([], error=OperationFailure("cursor killed")),
            "orders": FakeCollection([]),
        }),
    })


class TestMongoMetadataExtractor:
    """Tests for MongoMetadataExtractor."""

    def test_connect_failure(self):
        client = FakeClient({}, ping_error=ServerSelectionTimeoutError("no servers"))
        extractor = MongoMetadataExtractor("mongodb://nowhere:1", client=client)

        with pytest.raises(ConnectivityError):
            extractor.connect()
        assert client.closed

    def test_malformed_url_is_connectivity_error(self):
        extractor = MongoMetadataExtractor("notaurl://x")

        with pytest.raises(ConnectivityError):
            extractor.connect()
        assert extractor._client is None

    def test_list_databases_excludes_system(self, client):
        with MongoMetadataExtractor("mongodb://x", client=client) as extractor:
            databases = extractor.list_databases()

        assert databases == [DatabaseInfo("shop", 1536)]
        assert databases[0].label == "shop (1.5 KB)"

    def test_list_collections_sorted_without_system(self, client):
        extractor = MongoMetadataExtractor("mongodb://x", client=client)
        assert extractor.list_collections("shop") == ["broken", "orders", "users"]

    def test_sample_collection_limit(self, client):
        extractor = MongoMetadataExtractor("mongodb://x", client=client)
        docs = extractor.sample_collection("shop", "users", limit=3)
        assert [d["_id"] for d in docs] == [oid(0), oid(1), oid(2)]

    def test_sample_failure(self, client):
        extractor = MongoMetadataExtractor("mongodb://x", client=client)
        with pytest.raises(SamplingError) as exc_info:
            extractor.sample_collection("shop", "broken")
        assert exc_info.value.collection == "broken"


class TestFormatBytes:
    @pytest.mark.parametrize("size,expected", [
        (0, "0 B"),
        (512, "512 B"),
        (1024, "1 KB"),
        (1536, "1.5 KB"),
        (5 * 1024 ** 2, "5 MB"),
        (3 * 1024 ** 4, "3072 GB"),
    ])
    def test_format(self, size, expected):
        assert format_bytes(size) == expected
