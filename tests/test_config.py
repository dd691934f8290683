"""Tests for configuration resolution."""

import pytest

from mongo_erd.config import collect_values, resolve_config
from mongo_erd.exceptions import ConfigError


class TestResolveConfig:
    """Precedence: flag > environment > config file > default."""

    def test_defaults(self):
        config = resolve_config(environ={})
        assert config.url == "mongodb://localhost:27017"
        assert config.db_name == "test"
        assert config.sample_size == 100

    def test_environment_over_default(self):
        config = resolve_config(environ={"MONGO_URL": "mongodb://env:27017", "ERD_SAMPLE_SIZE": "250"})
        assert config.url == "mongodb://env:27017"
        assert config.sample_size == 250

    def test_flag_over_environment(self):
        config = resolve_config(
            {"url": "mongodb://flag:27017", "db_name": None},
            environ={"MONGO_URL": "mongodb://env:27017", "MONGO_DB": "envdb"},
        )
        assert config.url == "mongodb://flag:27017"
        assert config.db_name == "envdb"

    def test_config_file_below_environment(self, tmp_path):
        path = tmp_path / "erd.yaml"
        path.write_text("db_name: filedb\nsample_size: 50\njunction_max_fields: 4\nunknown_key: 1\n")

        config = resolve_config(config_file=path, environ={"MONGO_DB": "envdb"})

        assert config.db_name == "envdb"
        assert config.sample_size == 50
        assert config.junction_max_fields == 4

    def test_non_mapping_config_file(self, tmp_path):
        path = tmp_path / "erd.yaml"
        path.write_text("- a\n- b\n")
        with pytest.raises(ConfigError):
            resolve_config(config_file=path, environ={})

    def test_invalid_integer(self):
        with pytest.raises(ConfigError):
            resolve_config(environ={"ERD_SAMPLE_SIZE": "many"})

    def test_collect_values_leaves_defaults_out(self, tmp_path):
        path = tmp_path / "erd.yaml"
        path.write_text("db_name: filedb\n")

        values = collect_values({"sample_size": "20", "url": None}, config_file=path, environ={})

        assert values == {"db_name": "filedb", "sample_size": 20}
