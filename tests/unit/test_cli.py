"""Unit tests for the containerctl command line."""

import argparse
from unittest.mock import MagicMock, patch

import pytest
from docker.errors import APIError

from containerctl import cli
from containerctl.models.container import ContainerInspection, EnvironmentVariable
from containerctl.services.container import LogStream


@pytest.fixture(autouse=True)
def isolated_cli(monkeypatch, tmp_path):
    """Run without a .env file and without reconfiguring logging."""
    monkeypatch.chdir(tmp_path)
    with patch.object(cli, "load_dotenv"), patch.object(cli, "setup_logging"):
        yield


@pytest.fixture
def docker_env(monkeypatch):
    monkeypatch.setenv("DOCKER_API_VERSION", "1.41")
    monkeypatch.setenv("DOCKER_URI", "tcp://Engine.Internal:2376")
    monkeypatch.setenv("DOCKER_SERVER_ADDRESS", "")
    monkeypatch.setenv("DOCKER_CERT_PATH", "")


@pytest.fixture
def cli_manager():
    """Mock manager returned by open_manager."""
    manager = MagicMock()
    manager.__enter__.return_value = manager
    manager.__exit__.return_value = False
    with patch.object(cli, "open_manager", return_value=manager):
        yield manager


class TestParseEnvPair:
    """Tests for parse_env_pair."""

    def test_simple(self):
        assert cli.parse_env_pair("MYSQL_ROOT_PASSWORD=x") == EnvironmentVariable("MYSQL_ROOT_PASSWORD", "x")

    def test_value_with_equals(self):
        assert cli.parse_env_pair("OPTS=a=b") == EnvironmentVariable("OPTS", "a=b")

    def test_empty_value(self):
        assert cli.parse_env_pair("EMPTY=") == EnvironmentVariable("EMPTY", "")

    @pytest.mark.parametrize("value", ["NOEQUALS", "=value"])
    def test_invalid(self, value):
        with pytest.raises(argparse.ArgumentTypeError):
            cli.parse_env_pair(value)


class TestParser:
    """Tests for build_parser."""

    def test_create_env_order_kept(self):
        args = cli.build_parser().parse_args(["create", "mysql", "--tag", "5.7", "-e", "B=2", "--env", "A=1"])

        assert args.image == "mysql"
        assert args.tag == "5.7"
        assert args.env == [EnvironmentVariable("B", "2"), EnvironmentVariable("A", "1")]

    def test_tag_defaults_to_latest(self):
        args = cli.build_parser().parse_args(["pull", "nginx"])

        assert args.tag == "latest"

    def test_command_required(self):
        with pytest.raises(SystemExit):
            cli.build_parser().parse_args([])


class TestCommands:
    """Tests for main() dispatch."""

    def test_create(self, docker_env, cli_manager, container_id, capsys):
        cli_manager.create_container.return_value = container_id

        result = cli.main(["create", "mysql", "--tag", "5.7", "-e", "MYSQL_ROOT_PASSWORD=x"])

        assert result == cli.EXIT_OK
        cli_manager.create_container.assert_called_once_with(
            "mysql", "5.7", [EnvironmentVariable("MYSQL_ROOT_PASSWORD", "x")]
        )
        cli_manager.__exit__.assert_called_once()
        assert container_id in capsys.readouterr().out

    def test_pull(self, docker_env, cli_manager):
        assert cli.main(["pull", "nginx", "--tag", "alpine"]) == cli.EXIT_OK

        cli_manager.pull_image.assert_called_once_with("nginx", "alpine")

    @pytest.mark.parametrize(
        "command,method",
        [
            ("start", "start_container"),
            ("stop", "stop_container"),
            ("rm", "delete_container"),
        ],
    )
    def test_transitions(self, docker_env, cli_manager, container_id, command, method):
        assert cli.main([command, container_id]) == cli.EXIT_OK

        getattr(cli_manager, method).assert_called_once_with(container_id)

    def test_engine_error_exit_code(self, docker_env, cli_manager, container_id, capsys):
        cli_manager.delete_container.side_effect = APIError("You cannot remove a running container")

        result = cli.main(["rm", container_id])

        assert result == cli.EXIT_ERROR
        assert "Error" in capsys.readouterr().out

    def test_inspect_json(self, docker_env, cli_manager, container_id, container_attrs, capsys):
        cli_manager.inspect_container.return_value = ContainerInspection.from_engine(container_attrs())

        result = cli.main(["inspect", container_id, "--json"])

        assert result == cli.EXIT_OK
        assert container_id in capsys.readouterr().out

    def test_inspect_panel(self, docker_env, cli_manager, container_id, container_attrs, capsys):
        cli_manager.inspect_container.return_value = ContainerInspection.from_engine(container_attrs())

        assert cli.main(["inspect", container_id]) == cli.EXIT_OK

        output = capsys.readouterr().out
        assert "quirky_mysql" in output
        assert "running" in output

    def test_logs(self, docker_env, cli_manager, container_id, make_feed, capsys):
        feed = make_feed([b"mysqld: ready for connections.\n", b"[Note] shutting down\n"])
        cli_manager.log_container.return_value = LogStream(feed)

        assert cli.main(["logs", container_id]) == cli.EXIT_OK

        output = capsys.readouterr().out
        assert "mysqld: ready for connections." in output
        assert "[Note] shutting down" in output
        assert feed.closed is True


class TestConfiguration:
    """Tests for configuration handling in the CLI."""

    def test_missing_configuration_exit_code(self, capsys):
        result = cli.main(["start", "3f2c9a1b7d4e"])

        assert result == cli.EXIT_CONFIG
        output = capsys.readouterr().out
        assert "export DOCKER_API_VERSION=..." in output
        assert "export DOCKER_CERT_PATH=..." in output

    def test_open_manager_uses_settings(self, docker_env):
        with patch.object(cli.ContainerLifecycleManager, "from_settings") as from_settings:
            settings = cli.Settings()
            cli.open_manager(settings)

        from_settings.assert_called_once_with(settings)

    def test_host(self, docker_env, capsys):
        assert cli.main(["host"]) == cli.EXIT_OK

        assert capsys.readouterr().out.strip() == "engine.internal"

    def test_host_unix_socket(self, docker_env, monkeypatch, capsys):
        monkeypatch.setenv("DOCKER_URI", "unix:///var/run/docker.sock")

        assert cli.main(["host"]) == cli.EXIT_OK

        assert "no host" in capsys.readouterr().out

    def test_host_malformed_uri(self, docker_env, monkeypatch):
        monkeypatch.setenv("DOCKER_URI", "tcp://[::1:2376")

        assert cli.main(["host"]) == cli.EXIT_ERROR

    def test_config_valid(self, docker_env, capsys):
        assert cli.main(["config"]) == cli.EXIT_OK

        assert "tcp://Engine.Internal:2376" in capsys.readouterr().out

    def test_config_incomplete(self, monkeypatch):
        monkeypatch.setenv("DOCKER_URI", "tcp://localhost:2375")

        assert cli.main(["config"]) == cli.EXIT_CONFIG

    def test_malformed_api_version_exit_code(self, docker_env, monkeypatch, capsys):
        monkeypatch.setenv("DOCKER_API_VERSION", "")
        monkeypatch.setenv("DOCKER_URI", "tcp://127.0.0.1:1")

        assert cli.main(["start", "3f2c9a1b7d4e"]) == cli.EXIT_ERROR
        assert "Failed to connect" in capsys.readouterr().out

    def test_logging_configured_from_loaded_settings(self, docker_env, monkeypatch):
        monkeypatch.setenv("LOG_LEVEL", "DEBUG")

        with patch.object(cli, "setup_logging") as setup_logging:
            cli.main(["host"])

        settings = setup_logging.call_args.args[0]
        assert isinstance(settings, cli.Settings)
        assert settings.log_level == "DEBUG"
