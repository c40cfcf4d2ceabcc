"""
Unit tests for the 'init' command.
"""

from unittest.mock import patch

import pytest
import yaml
from click.testing import CliRunner

from recall.cli.commands.initialize import check_server, init
from recall.config import DEFAULT_SERVER_URL
from recall.graph.loader import GraphLoadError


class TestInitCommand:
    """Test the init command."""

    @pytest.fixture
    def runner(self):
        return CliRunner()

    @pytest.fixture
    def config_path(self, tmp_path):
        return tmp_path / ".recall" / "config.yaml"

    @patch("recall.cli.commands.initialize.Confirm.ask", return_value=False)
    def test_init_writes_config(self, mock_confirm, runner, config_path):
        """Declining the server check still writes the config."""
        result = runner.invoke(init, ["--config", str(config_path)])

        assert result.exit_code == 0
        assert "Initialized successfully" in result.output
        with open(config_path) as f:
            config = yaml.safe_load(f)
        assert config["graph"]["server_url"] == DEFAULT_SERVER_URL
        assert config["graph"]["width"] == 1200

    @patch("recall.cli.commands.initialize.Confirm.ask", return_value=False)
    def test_init_custom_server(self, mock_confirm, runner, config_path):
        runner.invoke(init, ["--config", str(config_path), "--server-url", "http://box:9000/"])

        config = yaml.safe_load(config_path.read_text())
        assert config["graph"]["server_url"] == "http://box:9000"

    @patch("recall.cli.commands.initialize.Confirm.ask", return_value=False)
    def test_init_existing_config_aborts(self, mock_confirm, runner, config_path):
        config_path.parent.mkdir(parents=True)
        config_path.write_text("graph:\n  width: 640\n")

        result = runner.invoke(init, ["--config", str(config_path)])

        assert "Aborted" in result.output
        assert "640" in config_path.read_text()

    @patch("recall.cli.commands.initialize.Confirm.ask", return_value=False)
    def test_init_force_overwrites(self, mock_confirm, runner, config_path):
        config_path.parent.mkdir(parents=True)
        config_path.write_text("history:\n  keep: true\ngraph:\n  width: 640\n")

        result = runner.invoke(init, ["--config", str(config_path), "--force"])

        assert result.exit_code == 0
        config = yaml.safe_load(config_path.read_text())
        assert config["graph"]["width"] == 1200
        assert config["history"] == {"keep": True}

    @patch("recall.cli.commands.initialize.check_server", return_value="4 nodes, 4 edges")
    @patch("recall.cli.commands.initialize.Confirm.ask", return_value=True)
    def test_init_checks_server(self, mock_confirm, mock_check, runner, config_path):
        result = runner.invoke(init, ["--config", str(config_path)])

        assert result.exit_code == 0
        mock_check.assert_called_once_with(DEFAULT_SERVER_URL, 10.0)
        assert "Server answered" in result.output


class TestCheckServer:
    """The reachability probe."""

    def test_reachable(self, payload):
        with patch("recall.cli.commands.initialize.HttpGraphSource") as mock_source:
            mock_source.return_value.load.return_value = payload
            assert check_server("http://box:9000", 1.0) == "4 nodes, 4 edges"

    def test_unreachable(self):
        with patch("recall.cli.commands.initialize.HttpGraphSource") as mock_source:
            mock_source.return_value.load.side_effect = GraphLoadError("refused")
            assert check_server("http://box:9000", 1.0) is None
