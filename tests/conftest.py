"""Pytest fixtures for dotnet-extension tests."""

import json
import os
import sys

import pytest

# Add src to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "src"))

from dotnet_extension.config import ExtensionConfig  # noqa: E402
from dotnet_extension.dotnet.runner import CommandResult  # noqa: E402
from dotnet_extension.errors import CommandFailedError  # noqa: E402


class RecordingRunner:
    """Runner double that records argument lists instead of executing them."""

    def __init__(self, fail_on: str | None = None, exit_code: int = 1):
        self.calls: list[list[str]] = []
        self.cwds: list[str | None] = []
        self._fail_on = fail_on
        self._exit_code = exit_code

    async def run(self, args, cwd=None, check=True):
        args = list(args)
        self.calls.append(args)
        self.cwds.append(cwd)
        if self._fail_on is not None and self._fail_on in args:
            result = CommandResult(command=["dotnet", *args], exit_code=self._exit_code)
            if check:
                raise CommandFailedError("Command failed", result)
            return result
        return CommandResult(command=["dotnet", *args], exit_code=0)


@pytest.fixture
def runner():
    """Recording runner that succeeds for every command."""
    return RecordingRunner()


@pytest.fixture
def workspace(tmp_path):
    """Repository root with a solution file."""
    (tmp_path / "Acme.FooApi.sln").touch()
    return tmp_path


@pytest.fixture
def make_config(workspace, tmp_path):
    """Factory for configs rooted at the workspace with no mounted credentials."""

    def factory(**overrides):
        values = {
            "working_dir": str(workspace),
            "nuget_server_credentials_path": str(tmp_path / "missing" / "nuget_server.json"),
            "nuget_server_credentials_env": "TEST_NUGET_CREDENTIALS_UNSET",
            "sonarqube_server_credentials_path": str(
                tmp_path / "missing" / "sonarqube_server.json"
            ),
            "sonarqube_server_credentials_env": "TEST_SONARQUBE_CREDENTIALS_UNSET",
        }
        values.update(overrides)
        return ExtensionConfig(**values)

    return factory


@pytest.fixture
def nuget_credentials_data():
    """NuGet server credentials as mounted by the CI server."""
    return [
        {
            "name": "github-nuget",
            "type": "nuget-server",
            "additionalProperties": {
                "apiUrl": "https://nuget.pkg.github.com/acme/index.json",
                "apiKey": "github-key",
            },
        },
        {
            "name": "myget",
            "type": "nuget-server",
            "additionalProperties": {
                "apiUrl": "https://www.myget.org/F/acme/api/v3/index.json",
                "apiKey": "myget-key",
            },
        },
    ]


@pytest.fixture
def sonarqube_credentials_data():
    """SonarQube server credentials as mounted by the CI server."""
    return [
        {
            "name": "sonarqube-main",
            "type": "sonarqube-server",
            "additionalProperties": {"apiUrl": "https://sonarqube.example.com"},
        },
        {
            "name": "sonarqube-staging",
            "type": "sonarqube-server",
            "additionalProperties": {"apiUrl": "https://sonarqube-staging.example.com"},
        },
    ]


@pytest.fixture
def write_json(tmp_path):
    """Write data as JSON into tmp_path and return the file path."""

    def writer(name, data):
        path = tmp_path / name
        path.write_text(json.dumps(data), encoding="utf-8")
        return str(path)

    return writer


@pytest.fixture
def make_runner():
    """Factory for recording runners, optionally failing on an argument."""
    return RecordingRunner
