"""Tests for the stockroom command line."""

import json

import pytest
from click.testing import CliRunner

from stockroom.cli import cli


@pytest.fixture
def staging_config(tmp_path) -> str:
    """Config file selecting the in-memory backend."""
    path = tmp_path / "stockroom.toml"
    path.write_text('[database]\nbackend = "staging"\n\n[logging]\nlevel = "WARNING"\n')
    return str(path)


class TestInitCommand:
    """Tests for `stockroom init`."""

    def test_init_writes_config(self) -> None:
        """Test a default config file is written once."""
        runner = CliRunner()
        with runner.isolated_filesystem():
            result = runner.invoke(cli, ["init", "--database-url", "postgresql://db/x"])
            again = runner.invoke(cli, ["init"])

            with open("stockroom.toml") as f:
                content = f.read()

        assert result.exit_code == 0
        assert 'url = "postgresql://db/x"' in content
        assert again.exit_code == 1
        assert "already exists" in again.output


class TestInventoryCommands:
    """Tests for inventory commands on the staging backend."""

    def test_create_inventory(self, staging_config: str, tmp_path) -> None:
        """Test creating an inventory with a format prints its id."""
        format_path = tmp_path / "format.json"
        format_path.write_text(json.dumps([{"type": "FixedText", "value": "A"}]))

        result = CliRunner().invoke(
            cli,
            ["--config", staging_config, "create-inventory", "Books", "--format", str(format_path)],
        )

        assert result.exit_code == 0
        assert len(result.output.strip()) == 36

    def test_create_inventory_malformed_format(self, staging_config: str, tmp_path) -> None:
        """Test malformed formats are reported."""
        format_path = tmp_path / "format.json"
        format_path.write_text('{"type": "FixedText"}')

        result = CliRunner().invoke(
            cli,
            ["--config", staging_config, "create-inventory", "Books", "--format", str(format_path)],
        )

        assert result.exit_code == 1
        assert "Malformed" in result.output

    @pytest.mark.parametrize("command", ["seed", "refresh-ids", "preview-id"])
    def test_unknown_inventory(self, staging_config: str, command: str) -> None:
        """Test commands on a missing inventory fail cleanly."""
        result = CliRunner().invoke(cli, ["--config", staging_config, command, "missing"])

        assert result.exit_code == 1
        assert "not found" in result.output

    def test_init_db_requires_direct_backend(self, staging_config: str) -> None:
        """Test init-db refuses the staging backend."""
        result = CliRunner().invoke(cli, ["--config", staging_config, "init-db"])

        assert result.exit_code == 1
        assert "direct" in result.output
