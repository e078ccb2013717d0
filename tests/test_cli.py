"""Tests for CLI entry point - exit code mapping."""

import json
import logging
from unittest.mock import patch

import pytest

from dotnet_extension.__main__ import EXIT_CANCELLED, configure_logging, main, run


class TestMain:
    """Tests for the async main function."""

    @pytest.mark.asyncio
    async def test_success_returns_zero(self, workspace, runner):
        """Test a successful action exits with 0."""
        code = await main(
            ["--action", "build", "--workingDirectory", str(workspace)],
            environ={},
            runner=runner,
        )

        assert code == 0
        assert runner.calls[0][0] == "build"

    @pytest.mark.asyncio
    async def test_unknown_action_is_configuration_error(self, workspace, runner):
        """Test an unknown action exits with 2."""
        code = await main(
            ["--action", "deploy", "--workingDirectory", str(workspace)],
            environ={},
            runner=runner,
        )

        assert code == 2
        assert runner.calls == []

    @pytest.mark.asyncio
    async def test_missing_credential_exit_code(self, workspace, runner, write_json):
        """Test a missing named credential exits with 3."""
        path = write_json("nuget_server.json", [{"name": "other"}])

        code = await main(
            [
                "--action",
                "restore",
                "--workingDirectory",
                str(workspace),
                "--nugetServerCredentials-path",
                path,
            ],
            environ={"ESTAFETTE_EXTENSION_NUGET_SERVER_NAME": "github-nuget"},
            runner=runner,
        )

        assert code == 3

    @pytest.mark.asyncio
    async def test_discovery_error_exit_code(self, workspace, runner):
        """Test a missing publish project exits with 4."""
        code = await main(
            ["--action", "publish", "--workingDirectory", str(workspace)],
            environ={},
            runner=runner,
        )

        assert code == 4

    @pytest.mark.asyncio
    async def test_tool_failure_propagates_exit_code(self, workspace, make_runner):
        """Test the wrapped tool's exit code becomes the process exit code."""
        runner = make_runner(fail_on="build", exit_code=7)

        code = await main(
            ["--action", "build", "--workingDirectory", str(workspace)],
            environ={},
            runner=runner,
        )

        assert code == 7

    @pytest.mark.asyncio
    async def test_missing_working_directory(self, tmp_path, runner):
        """Test a missing working directory exits with 2."""
        code = await main(
            ["--action", "restore", "--workingDirectory", str(tmp_path / "missing")],
            environ={},
            runner=runner,
        )

        assert code == 2
        assert runner.calls == []

    @pytest.mark.asyncio
    async def test_credentials_read_from_given_environment(
        self, workspace, runner, monkeypatch, nuget_credentials_data
    ):
        """Test injected credentials come from the environ passed to main."""
        monkeypatch.setenv(
            "ESTAFETTE_CREDENTIALS_NUGET_SERVER", json.dumps(nuget_credentials_data)
        )
        argv = [
            "--action",
            "restore",
            "--workingDirectory",
            str(workspace),
            "--nugetServerCredentials-path",
            str(workspace / "missing.json"),
        ]

        code = await main(argv, environ={}, runner=runner)

        assert code == 0
        assert runner.calls == [["restore", "--packages", ".nuget/packages"]]

        runner.calls.clear()
        environ = {"ESTAFETTE_CREDENTIALS_NUGET_SERVER": json.dumps(nuget_credentials_data)}
        code = await main(argv, environ=environ, runner=runner)

        assert code == 0
        assert runner.calls[0][:3] == ["nuget", "add", "source"]

    @pytest.mark.asyncio
    async def test_action_from_environment(self, workspace, runner):
        """Test the action can come from the CI environment."""
        code = await main(
            ["--workingDirectory", str(workspace)],
            environ={"ESTAFETTE_EXTENSION_ACTION": "pack"},
            runner=runner,
        )

        assert code == 0
        assert runner.calls[0][0] == "pack"


class TestRun:
    """Tests for the synchronous run wrapper."""

    def test_exits_with_main_result(self):
        async def fake_main():
            return 4

        with patch("dotnet_extension.__main__.main", fake_main):
            with pytest.raises(SystemExit) as exc_info:
                run()

        assert exc_info.value.code == 4

    def test_keyboard_interrupt(self):
        with patch("dotnet_extension.__main__.asyncio.run", side_effect=KeyboardInterrupt):
            with patch("dotnet_extension.__main__.main"):
                with pytest.raises(SystemExit) as exc_info:
                    run()

        assert exc_info.value.code == EXIT_CANCELLED


class TestConfigureLogging:
    """Tests for logging configuration."""

    def test_invalid_level_falls_back_to_info(self, monkeypatch):
        monkeypatch.setenv("LOG_LEVEL", "chatty")
        with patch("logging.basicConfig") as basic_config:
            configure_logging()

        assert basic_config.call_args.kwargs["level"] == logging.INFO
