"""Tests for stockroom configuration."""

import importlib

import pytest
from pydantic import ValidationError

import stockroom.config
from stockroom.config import Config


class TestConfigDefaults:
    """Tests for default configuration."""

    def test_defaults(self) -> None:
        """Test default values."""
        config = Config()

        assert config.database.backend == "direct"
        assert config.database.schema_name == "public"
        assert config.ids.max_retries == 3
        assert config.logging.level == "INFO"

    def test_env_override(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test STOCKROOM_ environment variables override defaults."""
        monkeypatch.setenv("STOCKROOM_IDS__MAX_RETRIES", "5")
        monkeypatch.setenv("STOCKROOM_DATABASE__BACKEND", "staging")

        config = Config()

        assert config.ids.max_retries == 5
        assert config.database.backend == "staging"

    def test_retries_must_be_positive(self) -> None:
        """Test invalid retry budget is rejected."""
        with pytest.raises(ValidationError):
            Config(ids={"max_retries": 0})

    def test_import_ignores_invalid_environment(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test importing the module builds no configuration from the environment."""
        monkeypatch.setenv("STOCKROOM_IDS__MAX_RETRIES", "zero")

        module = importlib.reload(stockroom.config)

        assert not hasattr(module, "DEFAULT_CONFIG")
        with pytest.raises(ValidationError):
            module.Config()


class TestConfigFiles:
    """Tests for loading and writing stockroom.toml."""

    def test_from_toml(self, tmp_path) -> None:
        """Test loading a partial file keeps defaults for the rest."""
        path = tmp_path / "stockroom.toml"
        path.write_text('[database]\nurl = "postgresql://db/inv"\n\n[ids]\nmax_retries = 7\n')

        config = Config.from_toml(path)

        assert config.database.url == "postgresql://db/inv"
        assert config.ids.max_retries == 7
        assert config.logging.level == "INFO"

    def test_from_toml_missing(self, tmp_path) -> None:
        """Test missing file."""
        with pytest.raises(FileNotFoundError):
            Config.from_toml(tmp_path / "nope.toml")

    def test_find_and_load_walks_up(self, tmp_path) -> None:
        """Test the file is found in a parent directory."""
        (tmp_path / "stockroom.toml").write_text('[logging]\nlevel = "DEBUG"\n')
        nested = tmp_path / "a" / "b"
        nested.mkdir(parents=True)

        assert Config.find_and_load(nested).logging.level == "DEBUG"

    def test_to_toml_round_trip(self, tmp_path) -> None:
        """Test a written file loads back to the same configuration."""
        config = Config()
        config.database.url = "postgresql://example/stock"
        config.ids.max_retries = 4
        path = tmp_path / "stockroom.toml"

        config.to_toml(path)

        assert Config.from_toml(path) == config
