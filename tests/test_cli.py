"""Tests for the command-line interface."""

import pytest
from click.testing import CliRunner

import mongo_erd.config
import mongo_erd.metadata
from conftest import FakeExtractor
from mongo_erd.cli import cli
from mongo_erd.metadata import DatabaseInfo


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for var in ("MONGO_URL", "MONGO_DB", "ERD_SAMPLE_SIZE", "PORT"):
        monkeypatch.delenv(var, raising=False)


@pytest.fixture
def fake_extractor(monkeypatch, shop_collections):
    extractor = FakeExtractor(
        shop_collections,
        databases=[DatabaseInfo("crm", 0), DatabaseInfo("shop", 1536)],
    )
    monkeypatch.setattr(mongo_erd.metadata, "MongoMetadataExtractor", lambda url: extractor)
    return extractor


class TestCli:
    """Tests for CLI commands."""

    def test_generate_prints_diagram(self, fake_extractor):
        result = CliRunner().invoke(cli, ["generate", "--db", "shop"])

        assert result.exit_code == 0, result.output
        assert 'users ||--o{ orders : "userId"' in result.output
        assert fake_extractor.sample_calls[0][0] == "shop"

    def test_generate_prompts_for_database(self, fake_extractor):
        result = CliRunner().invoke(cli, ["generate"], input="2\n")

        assert result.exit_code == 0, result.output
        assert all(call[0] == "shop" for call in fake_extractor.sample_calls)

    def test_generate_writes_file(self, fake_extractor, tmp_path):
        out = tmp_path / "shop.mmd"
        result = CliRunner().invoke(cli, ["generate", "--db", "shop", "--sample-size", "2", "--output", str(out)])

        assert result.exit_code == 0, result.output
        assert out.read_text().startswith("erDiagram\n")
        assert all(call[2] == 2 for call in fake_extractor.sample_calls)

    def test_discover_writes_report(self, fake_extractor, tmp_path):
        result = CliRunner().invoke(cli, ["discover", "--db", "shop", "--output", str(tmp_path)])

        assert result.exit_code == 0, result.output
        assert (tmp_path / "erd.mmd").exists()
        assert (tmp_path / "relationships.yaml").exists()

    def test_databases(self, fake_extractor):
        result = CliRunner().invoke(cli, ["databases"])

        assert result.exit_code == 0, result.output
        assert "shop" in result.output
        assert "1.5 KB" in result.output

    def test_connectivity_failure_exits(self, monkeypatch, shop_collections):
        extractor = FakeExtractor(shop_collections, fail_connect=True)
        monkeypatch.setattr(mongo_erd.metadata, "MongoMetadataExtractor", lambda url: extractor)

        result = CliRunner().invoke(cli, ["generate", "--db", "shop"])
        assert result.exit_code == 1

    def test_generate_stdout_is_only_the_diagram(self, fake_extractor):
        result = CliRunner().invoke(cli, ["generate", "--db", "shop"])

        assert result.exit_code == 0, result.output
        assert result.stdout.startswith("erDiagram\n")
        assert "Connecting to MongoDB" not in result.stdout
        assert "Connecting to MongoDB" in result.stderr

    def test_malformed_url_exits(self):
        result = CliRunner().invoke(cli, ["generate", "--url", "notaurl://x", "--db", "shop"])

        assert result.exit_code == 1
        assert isinstance(result.exception, SystemExit)
        assert "Error connecting to MongoDB" in result.stderr

    def test_config_file_database_skips_prompt(self, monkeypatch, fake_extractor, tmp_path):
        path = tmp_path / "erd.yaml"
        path.write_text("db_name: crm\n")
        loads = []
        original = mongo_erd.config.load_config_file

        def counting_load(p):
            loads.append(p)
            return original(p)

        monkeypatch.setattr(mongo_erd.config, "load_config_file", counting_load)

        result = CliRunner().invoke(cli, ["generate", "--config", str(path)])

        assert result.exit_code == 0, result.output
        assert fake_extractor.sample_calls
        assert all(call[0] == "crm" for call in fake_extractor.sample_calls)
        assert len(loads) == 1
