"""Action dispatcher - one handler per build lifecycle action.

Each handler receives the immutable configuration, the runner used to invoke
``dotnet`` and the discovered solution name. Handlers raise ExtensionError
subclasses; nothing here exits the process.
"""

from __future__ import annotations

import dataclasses
import logging
import os
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from enum import Enum
from typing import Protocol

from .config import ExtensionConfig
from .credentials import (
    NugetServerCredential,
    SonarQubeServerCredential,
    load_credentials,
    select_credential,
)
from .dotnet import commands
from .dotnet.discovery import (
    find_packages,
    find_publish_project,
    find_test_projects,
    get_solution_name,
    remove_nuget_config,
)
from .dotnet.runner import CommandResult
from .errors import ConfigurationError, DiscoveryError

logger = logging.getLogger(__name__)


class Action(str, Enum):
    """Supported lifecycle actions."""

    RESTORE = "restore"
    BUILD = "build"
    TEST = "test"
    UNIT_TEST = "unit-test"
    INTEGRATION_TEST = "integration-test"
    ANALYZE_SONARQUBE = "analyze-sonarqube"
    PUBLISH = "publish"
    PACK = "pack"
    PUSH_NUGET = "push-nuget"


class Runner(Protocol):
    async def run(
        self, args: list[str], cwd: str | None = None, check: bool = True
    ) -> CommandResult: ...


@dataclass(frozen=True)
class NugetTarget:
    """A NuGet server to register or push to."""

    url: str
    api_key: str


def _nuget_credentials(config: ExtensionConfig) -> tuple[NugetServerCredential, ...] | None:
    return load_credentials(
        config.nuget_server_credentials_path,
        config.nuget_server_credentials_env,
        NugetServerCredential,
        config.environ,
    )


def resolve_restore_source(config: ExtensionConfig) -> NugetTarget | None:
    """Resolve the authenticated NuGet source used during restore.

    Explicit URL and key win; otherwise the preconfigured credential named
    by nuget_server_name is used. Returns None if neither is available.
    """
    if config.has_explicit_nuget_server:
        return NugetTarget(config.nuget_server_url, config.nuget_server_api_key)

    credentials = _nuget_credentials(config)
    if credentials is None:
        return None

    credential = select_credential(credentials, config.nuget_server_name)
    if not credential.api_url or not credential.api_key:
        return None
    return NugetTarget(credential.api_url, credential.api_key)


def resolve_push_targets(config: ExtensionConfig) -> list[NugetTarget]:
    """Resolve every NuGet server packages are pushed to.

    Raises:
        ConfigurationError: If there is neither an explicit server nor a
            credential source
    """
    if config.has_explicit_nuget_server:
        return [NugetTarget(config.nuget_server_url, config.nuget_server_api_key)]

    credentials = _nuget_credentials(config)
    if credentials is None:
        raise ConfigurationError(
            "The NuGet server URL and API key have to be specified to push a package."
        )

    names = config.nuget_push_server_names or ("",)
    targets = []
    for name in names:
        credential = select_credential(credentials, name)
        targets.append(NugetTarget(credential.api_url, credential.api_key))
    return targets


def resolve_sonarqube_url(config: ExtensionConfig) -> str:
    """Resolve the SonarQube server URL.

    1. An explicit sonarqube_server_url is used as is.
    2. Otherwise the preconfigured credential named sonarqube_server_name.
    3. Otherwise the first preconfigured credential.

    Raises:
        ConfigurationError: If no URL can be determined
    """
    if config.sonarqube_server_url:
        return config.sonarqube_server_url

    credentials = load_credentials(
        config.sonarqube_server_credentials_path,
        config.sonarqube_server_credentials_env,
        SonarQubeServerCredential,
        config.environ,
    )
    if credentials is None:
        raise ConfigurationError(
            "The SonarQube server URL has to be specified to run the analysis."
        )

    credential = select_credential(credentials, config.sonarqube_server_name)
    if not credential.api_url:
        raise ConfigurationError(
            f"The SonarQube server credential {credential.name} has no API URL."
        )
    return credential.api_url


async def restore(config: ExtensionConfig, runner: Runner, solution_name: str) -> None:
    remove_nuget_config(config.working_dir)

    source = resolve_restore_source(config)
    if source is not None:
        logger.info("Adding the NuGet source.")
        await runner.run(
            commands.add_source_args(config, source.url, source.api_key),
            cwd=config.working_dir,
        )
    else:
        logger.info("No custom NuGet credentials were found.")

    logger.info("Restoring packages...")
    await runner.run(commands.restore_args(config), cwd=config.working_dir)


async def build(config: ExtensionConfig, runner: Runner, solution_name: str) -> None:
    logger.info("Building the solution...")
    await runner.run(commands.build_args(config), cwd=config.working_dir)


async def run_tests(
    config: ExtensionConfig,
    runner: Runner,
    project_suffix: str = "",
    extra_args: tuple[str, ...] = (),
) -> int:
    """Run tests for every ./test project whose name ends with project_suffix.

    Returns:
        Number of test projects run
    """
    projects = find_test_projects(config.working_dir, project_suffix)
    for project in projects:
        logger.info(f"Running tests for {project}...")
        await runner.run(
            commands.run_tests_args(config, project, extra_args), cwd=config.working_dir
        )
    return len(projects)


async def run_all_tests(config: ExtensionConfig, runner: Runner, solution_name: str) -> None:
    logger.info("Running tests for every project in the ./test folder...")
    await run_tests(config, runner)


async def run_unit_tests(config: ExtensionConfig, runner: Runner, solution_name: str) -> None:
    logger.info("Running tests for projects ending with UnitTests in the ./test folder...")
    await run_tests(config, runner, "UnitTests")


async def run_integration_tests(
    config: ExtensionConfig, runner: Runner, solution_name: str
) -> None:
    logger.info(
        "Running tests for projects ending with IntegrationTests in the ./test folder..."
    )
    await run_tests(config, runner, "IntegrationTests")


async def analyze_sonarqube(
    config: ExtensionConfig, runner: Runner, solution_name: str
) -> None:
    logger.info("Running the SonarQube analysis...")

    server_url = resolve_sonarqube_url(config)
    if not solution_name:
        raise DiscoveryError("A solution file is required to run the SonarQube analysis.")

    await runner.run(
        commands.sonarscanner_begin_args(config, solution_name, server_url),
        cwd=config.working_dir,
    )
    await runner.run(
        commands.build_args(config, with_configuration=False), cwd=config.working_dir
    )

    # Coverage needs the test projects rebuilt with the coverage properties
    await run_tests(
        dataclasses.replace(config, force_build=True),
        runner,
        "UnitTests",
        commands.COVERAGE_TEST_ARGUMENTS,
    )

    await runner.run(commands.sonarscanner_end_args(), cwd=config.working_dir)


async def publish(config: ExtensionConfig, runner: Runner, solution_name: str) -> None:
    logger.info("Publishing the binaries...")

    project = config.project or find_publish_project(config.working_dir, solution_name)
    # Keep the output path independent of the project name for later steps
    output_folder = config.output_folder or os.path.join(config.working_dir, "publish")

    await runner.run(
        commands.publish_args(config, project, output_folder), cwd=config.working_dir
    )


async def pack(config: ExtensionConfig, runner: Runner, solution_name: str) -> None:
    logger.info("Packing the nuget package(s)...")
    await runner.run(commands.pack_args(config), cwd=config.working_dir)


async def push_nuget(config: ExtensionConfig, runner: Runner, solution_name: str) -> None:
    logger.info("Publishing the nuget package(s)...")

    targets = resolve_push_targets(config)

    packages = find_packages(config.working_dir)
    if not packages:
        raise DiscoveryError("No .nupkg files were found.")

    for package in packages:
        for target in targets:
            await runner.run(
                commands.push_args(config, package, target.url, target.api_key),
                cwd=config.working_dir,
            )


Handler = Callable[[ExtensionConfig, Runner, str], Awaitable[None]]

HANDLERS: dict[Action, Handler] = {
    Action.RESTORE: restore,
    Action.BUILD: build,
    Action.TEST: run_all_tests,
    Action.UNIT_TEST: run_unit_tests,
    Action.INTEGRATION_TEST: run_integration_tests,
    Action.ANALYZE_SONARQUBE: analyze_sonarqube,
    Action.PUBLISH: publish,
    Action.PACK: pack,
    Action.PUSH_NUGET: push_nuget,
}


def parse_action(value: str) -> Action:
    """Map an action identifier to an Action.

    Raises:
        ConfigurationError: If the identifier is empty or unknown
    """
    try:
        return Action(value)
    except ValueError:
        valid = ", ".join(a.value for a in Action)
        raise ConfigurationError(
            f"Set `action: <action>` on this step to one of: {valid}."
        ) from None


async def run_action(config: ExtensionConfig, runner: Runner) -> None:
    """Run the configured action in the configured working directory."""
    action = parse_action(config.action)

    if not os.path.isdir(config.working_dir):
        raise ConfigurationError(
            f"Working directory does not exist: {config.working_dir}"
        )

    solution_name = get_solution_name(config.working_dir)
    if solution_name:
        logger.info(f"Solution name: {solution_name}")
    else:
        logger.info("Unknown solution")

    await HANDLERS[action](config, runner, solution_name)
