"""Argument lists for dotnet CLI invocations.

Every function here is pure: it takes the configuration (plus whatever was
discovered or resolved) and returns the arguments passed to ``dotnet``.
"""

from __future__ import annotations

from typing import Final

from ..config import ExtensionConfig

# Restore into the working directory so packages survive between stages
PACKAGES_DIRECTORY: Final[str] = ".nuget/packages"

COVERAGE_REPORT_PATHS: Final[str] = '"**\\coverage.opencover.xml"'

COVERAGE_TEST_ARGUMENTS: Final[tuple[str, ...]] = (
    "/p:CollectCoverage=true",
    "/p:CoverletOutputFormat=opencover",
    "/p:CopyLocalLockFileAssemblies=true",
)


def _version_args(config: ExtensionConfig) -> list[str]:
    if config.build_version:
        return [f"/p:Version={config.build_version}"]
    return []


def _skip_args(config: ExtensionConfig, skip_build: bool = False) -> list[str]:
    args: list[str] = []
    if not config.force_restore:
        args.append("--no-restore")
    if skip_build and not config.force_build:
        args.append("--no-build")
    return args


def add_source_args(
    config: ExtensionConfig, server_url: str, api_key: str
) -> list[str]:
    """Register an authenticated NuGet source."""
    return [
        "nuget",
        "add",
        "source",
        "--username",
        config.nuget_source_username,
        "--password",
        api_key,
        "--store-password-in-clear-text",
        "--name",
        config.nuget_source_name,
        server_url,
    ]


def restore_args(config: ExtensionConfig) -> list[str]:
    args = ["restore", "--packages", PACKAGES_DIRECTORY]
    for source in config.nuget_sources:
        args.extend(["--source", source])
    return args


def build_args(config: ExtensionConfig, with_configuration: bool = True) -> list[str]:
    args = ["build"]
    if with_configuration:
        args.extend(["--configuration", config.configuration])
    return [*args, *_version_args(config), *_skip_args(config)]


def run_tests_args(
    config: ExtensionConfig,
    project: str,
    extra_args: tuple[str, ...] | list[str] = (),
) -> list[str]:
    return [
        "test",
        "--configuration",
        config.configuration,
        *_skip_args(config, skip_build=True),
        *extra_args,
        project,
    ]


def sonarscanner_begin_args(
    config: ExtensionConfig, solution_name: str, server_url: str
) -> list[str]:
    args = [
        "sonarscanner",
        "begin",
        f"/key:{solution_name}",
        f"/d:sonar.host.url={server_url}",
        f"/d:sonar.cs.opencover.reportsPaths={COVERAGE_REPORT_PATHS}",
        f'/d:sonar.coverage.exclusions="{config.sonarqube_coverage_exclusions}"',
    ]
    if config.build_version:
        args.append(f"/version:{config.build_version}")
    return args


def sonarscanner_end_args() -> list[str]:
    return ["sonarscanner", "end"]


def publish_args(config: ExtensionConfig, project: str, output_folder: str) -> list[str]:
    args = [
        "publish",
        "--configuration",
        config.configuration,
        "--runtime",
        config.runtime_id,
        "--output",
        output_folder,
        project,
        *_version_args(config),
    ]
    if config.publish_ready_to_run:
        args.extend(["/p:PublishReadyToRun=true", "/p:PublishReadyToRunShowWarnings=true"])
    if config.publish_single_file:
        args.append("/p:PublishSingleFile=true")
    if config.publish_trimmed:
        args.append("/p:PublishTrimmed=true")
    return [*args, *_skip_args(config)]


def pack_args(config: ExtensionConfig) -> list[str]:
    return [
        "pack",
        "--configuration",
        config.configuration,
        *_version_args(config),
        *_skip_args(config, skip_build=True),
    ]


def push_args(
    config: ExtensionConfig, package: str, server_url: str, api_key: str
) -> list[str]:
    args = ["nuget", "push"]
    if config.nuget_skip_duplicate:
        args.append("--skip-duplicate")
    return [*args, package, "--source", server_url, "--api-key", api_key]
