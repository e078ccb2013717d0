"""dotnet CLI plumbing.

Provides:
- Argument-list construction per lifecycle action
- Solution, project and package discovery
- Process execution with streamed, captured output
"""

from .discovery import (
    find_packages,
    find_publish_project,
    find_test_projects,
    get_solution_name,
    remove_nuget_config,
)
from .runner import CommandResult, CommandRunner, format_command, redact

__all__ = [
    "CommandResult",
    "CommandRunner",
    "format_command",
    "redact",
    "find_packages",
    "find_publish_project",
    "find_test_projects",
    "get_solution_name",
    "remove_nuget_config",
]
