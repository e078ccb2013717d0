"""Extension configuration.

Parameters come from command-line flags, each falling back to an
environment variable set by the CI server from the pipeline step definition.
The parsed values are frozen into an ExtensionConfig that is passed
explicitly to every action.
"""

from __future__ import annotations

import argparse
import os
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field

DEFAULT_NUGET_CREDENTIALS_PATH = "/credentials/nuget_server.json"
DEFAULT_SONARQUBE_CREDENTIALS_PATH = "/credentials/sonarqube_server.json"

NUGET_CREDENTIALS_ENV = "ESTAFETTE_CREDENTIALS_NUGET_SERVER"
SONARQUBE_CREDENTIALS_ENV = "ESTAFETTE_CREDENTIALS_SONARQUBE_SERVER"

DEFAULT_COVERAGE_EXCLUSIONS = "**Tests.cs"

_TRUE_VALUES = frozenset({"true", "1", "yes", "on"})


def parse_bool(value: str | None) -> bool:
    """Interpret an environment value as a boolean flag."""
    return (value or "").strip().lower() in _TRUE_VALUES


def split_list(value: str | None) -> tuple[str, ...]:
    """Split a comma separated value, dropping empty entries."""
    if not value:
        return ()
    return tuple(part.strip() for part in value.split(",") if part.strip())


@dataclass(frozen=True)
class ExtensionConfig:
    """Immutable settings for a single extension invocation."""

    action: str = ""
    working_dir: str = field(default_factory=os.getcwd)
    configuration: str = "Release"
    build_version: str = ""
    project: str = ""
    runtime_id: str = "linux-x64"
    force_restore: bool = False
    force_build: bool = False
    output_folder: str = ""

    nuget_sources: tuple[str, ...] = ()
    nuget_server_url: str = ""
    nuget_server_api_key: str = ""
    nuget_server_credentials_path: str = DEFAULT_NUGET_CREDENTIALS_PATH
    nuget_server_credentials_env: str = NUGET_CREDENTIALS_ENV
    nuget_server_name: str = "github-nuget"
    nuget_push_server_names: tuple[str, ...] = ("github-nuget", "myget")
    nuget_source_name: str = "travix"
    nuget_source_username: str = "travix-tooling-bot"
    nuget_skip_duplicate: bool = False

    publish_ready_to_run: bool = False
    publish_single_file: bool = False
    publish_trimmed: bool = False

    sonarqube_server_url: str = ""
    sonarqube_server_credentials_path: str = DEFAULT_SONARQUBE_CREDENTIALS_PATH
    sonarqube_server_credentials_env: str = SONARQUBE_CREDENTIALS_ENV
    sonarqube_server_name: str = ""
    sonarqube_coverage_exclusions: str = DEFAULT_COVERAGE_EXCLUSIONS

    # Environment credentials are read from; None means os.environ
    environ: Mapping[str, str] | None = field(default=None, repr=False, compare=False)

    @property
    def has_explicit_nuget_server(self) -> bool:
        """Whether both NuGet server URL and API key were given explicitly."""
        return bool(self.nuget_server_url and self.nuget_server_api_key)

    @classmethod
    def from_namespace(
        cls,
        args: argparse.Namespace,
        environ: Mapping[str, str] | None = None,
    ) -> ExtensionConfig:
        """Build configuration from parsed command-line arguments."""
        return cls(
            action=args.action or "",
            working_dir=os.path.abspath(args.working_directory or os.getcwd()),
            configuration=args.configuration or "Release",
            build_version=args.build_version or "",
            project=args.project or "",
            runtime_id=args.runtime_id or "linux-x64",
            force_restore=args.force_restore,
            force_build=args.force_build,
            output_folder=args.output_folder or "",
            nuget_sources=split_list(args.nuget_sources),
            nuget_server_url=args.nuget_server_url or "",
            nuget_server_api_key=args.nuget_server_api_key or "",
            nuget_server_credentials_path=args.nuget_server_credentials_path,
            nuget_server_name=args.nuget_server_name or "",
            nuget_push_server_names=split_list(args.nuget_push_server_names),
            nuget_source_name=args.nuget_source_name,
            nuget_source_username=args.nuget_source_username,
            nuget_skip_duplicate=args.nuget_skip_duplicate,
            publish_ready_to_run=args.publish_ready_to_run,
            publish_single_file=args.publish_single_file,
            publish_trimmed=args.publish_trimmed,
            sonarqube_server_url=args.sonarqube_server_url or "",
            sonarqube_server_credentials_path=args.sonarqube_server_credentials_path,
            sonarqube_server_name=args.sonarqube_server_name or "",
            sonarqube_coverage_exclusions=(
                args.sonarqube_coverage_exclusions or DEFAULT_COVERAGE_EXCLUSIONS
            ),
            environ=environ,
        )


def build_parser(environ: Mapping[str, str] | None = None) -> argparse.ArgumentParser:
    """Create the argument parser with environment-variable defaults.

    Args:
        environ: Environment mapping (defaults to os.environ)
    """
    env = os.environ if environ is None else environ

    def text(name: str, default: str = "") -> str:
        return env.get(name) or default

    def flag(name: str) -> bool:
        return parse_bool(env.get(name))

    parser = argparse.ArgumentParser(
        prog="dotnet-extension",
        description="Run .NET build lifecycle actions in a CI pipeline step",
    )
    parser.add_argument(
        "--action",
        default=text("ESTAFETTE_EXTENSION_ACTION"),
        help="Any of the following actions: restore, build, test, unit-test, "
        "integration-test, analyze-sonarqube, publish, pack, push-nuget.",
    )
    parser.add_argument(
        "--configuration",
        default=text("ESTAFETTE_EXTENSION_CONFIGURATION", "Release"),
        help="The build configuration.",
    )
    parser.add_argument(
        "--buildVersion",
        dest="build_version",
        default=text("ESTAFETTE_EXTENSION_BUILD_VERSION", text("ESTAFETTE_BUILD_VERSION")),
        help="The build version.",
    )
    parser.add_argument(
        "--project",
        default=text("ESTAFETTE_EXTENSION_PROJECT"),
        help="The path to the project for which the tests/build should be run.",
    )
    parser.add_argument(
        "--runtimeId",
        dest="runtime_id",
        default=text("ESTAFETTE_EXTENSION_RUNTIME_ID", "linux-x64"),
        help="The publish runtime.",
    )
    parser.add_argument(
        "--forceRestore",
        dest="force_restore",
        action="store_true",
        default=flag("ESTAFETTE_EXTENSION_FORCE_RESTORE"),
        help="Execute the restore on every action.",
    )
    parser.add_argument(
        "--forceBuild",
        dest="force_build",
        action="store_true",
        default=flag("ESTAFETTE_EXTENSION_FORCE_BUILD"),
        help="Execute the build on every action.",
    )
    parser.add_argument(
        "--outputFolder",
        dest="output_folder",
        default=text("ESTAFETTE_EXTENSION_OUTPUT_FOLDER"),
        help="The folder into which the publish output is generated.",
    )
    parser.add_argument(
        "--nugetSources",
        dest="nuget_sources",
        default=text("ESTAFETTE_EXTENSION_SOURCES"),
        help="Comma separated NuGet sources to restore from.",
    )
    parser.add_argument(
        "--nugetServerUrl",
        dest="nuget_server_url",
        default=text("ESTAFETTE_EXTENSION_NUGET_SERVER_URL"),
        help="The URL of the NuGet server.",
    )
    parser.add_argument(
        "--nugetServerApiKey",
        dest="nuget_server_api_key",
        default=text("ESTAFETTE_EXTENSION_NUGET_SERVER_API_KEY"),
        help="The API key of the NuGet server.",
    )
    parser.add_argument(
        "--nugetServerCredentials-path",
        dest="nuget_server_credentials_path",
        default=DEFAULT_NUGET_CREDENTIALS_PATH,
        help="Path to file with NuGet server credentials configured at server level.",
    )
    parser.add_argument(
        "--nugetServerName",
        dest="nuget_server_name",
        default=text("ESTAFETTE_EXTENSION_NUGET_SERVER_NAME", "github-nuget"),
        help="The name of the preferred NuGet server from the preconfigured credentials.",
    )
    parser.add_argument(
        "--nugetPushServerNames",
        dest="nuget_push_server_names",
        default=text("ESTAFETTE_EXTENSION_NUGET_PUSH_SERVER_NAMES", "github-nuget,myget"),
        help="Comma separated names of the preconfigured NuGet servers to push to.",
    )
    parser.add_argument(
        "--nugetSourceName",
        dest="nuget_source_name",
        default=text("ESTAFETTE_EXTENSION_NUGET_SOURCE_NAME", "travix"),
        help="The name under which the custom NuGet source is registered.",
    )
    parser.add_argument(
        "--nugetSourceUsername",
        dest="nuget_source_username",
        default=text("ESTAFETTE_EXTENSION_NUGET_SOURCE_USERNAME", "travix-tooling-bot"),
        help="The user name used to authenticate against the custom NuGet source.",
    )
    parser.add_argument(
        "--nugetSkipDuplicate",
        dest="nuget_skip_duplicate",
        action="store_true",
        default=flag("ESTAFETTE_EXTENSION_NUGET_SKIP_DUPLICATE"),
        help="Treat 409 Conflict response as a warning.",
    )
    parser.add_argument(
        "--publishReadyToRun",
        dest="publish_ready_to_run",
        action="store_true",
        default=flag("ESTAFETTE_EXTENSION_PUBLISH_READY_TO_RUN"),
        help="Sets PublishReadyToRun for the publish action.",
    )
    parser.add_argument(
        "--publishSingleFile",
        dest="publish_single_file",
        action="store_true",
        default=flag("ESTAFETTE_EXTENSION_PUBLISH_SINGLE_FILE"),
        help="Sets PublishSingleFile for the publish action.",
    )
    parser.add_argument(
        "--publishTrimmed",
        dest="publish_trimmed",
        action="store_true",
        default=flag("ESTAFETTE_EXTENSION_PUBLISH_TRIMMED"),
        help="Sets PublishTrimmed for the publish action.",
    )
    parser.add_argument(
        "--sonarQubeServerUrl",
        dest="sonarqube_server_url",
        default=text("ESTAFETTE_EXTENSION_SONARQUBE_SERVER_URL"),
        help="The URL of the SonarQube server to which analysis reports are sent.",
    )
    parser.add_argument(
        "--sonarQubeServerCredentials-path",
        dest="sonarqube_server_credentials_path",
        default=DEFAULT_SONARQUBE_CREDENTIALS_PATH,
        help="Path to file with SonarQube server credentials configured at server level.",
    )
    parser.add_argument(
        "--sonarQubeServerName",
        dest="sonarqube_server_name",
        default=text("ESTAFETTE_EXTENSION_SONARQUBE_SERVER_NAME"),
        help="The name of the preferred SonarQube server from the preconfigured credentials.",
    )
    parser.add_argument(
        "--sonarQubeCoverageExclusions",
        dest="sonarqube_coverage_exclusions",
        default=text("ESTAFETTE_EXTENSION_SONARQUBE_COVERAGE_EXCLUSIONS"),
        help="Paths excluded from coverage on the SonarQube scan.",
    )
    parser.add_argument(
        "--workingDirectory",
        dest="working_directory",
        default=None,
        help="Repository root to run in. Defaults to the current directory.",
    )
    return parser


def load_config(
    argv: Sequence[str] | None = None,
    environ: Mapping[str, str] | None = None,
) -> ExtensionConfig:
    """Parse flags and environment into an ExtensionConfig."""
    args = build_parser(environ).parse_args(argv)
    return ExtensionConfig.from_namespace(args, environ)
