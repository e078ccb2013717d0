"""Extension error hierarchy.

Every error carries the process exit code the entry point uses when it
terminates on that error.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .dotnet.runner import CommandResult


class ExtensionError(Exception):
    """Base exception for all extension errors."""

    exit_code: int = 1


class ConfigurationError(ExtensionError):
    """Raised when required parameters are missing or invalid."""

    exit_code = 2


class CredentialError(ExtensionError):
    """Base exception for credential loading and lookup errors."""

    exit_code = 3


class CredentialLoadError(CredentialError):
    """Raised when a credential source cannot be read or parsed."""

    pass


class NoCredentialsError(CredentialError):
    """Raised when a credential source contains no records."""

    pass


class CredentialNotFoundError(CredentialError):
    """Raised when no record matches the requested name."""

    def __init__(self, name: str):
        super().__init__(f"The credential with the name {name} does not exist.")
        self.name = name


class DiscoveryError(ExtensionError):
    """Raised when a solution, project or package cannot be found."""

    exit_code = 4


class CommandFailedError(ExtensionError):
    """Raised when the wrapped tool exits with a non-zero status."""

    def __init__(self, message: str, result: CommandResult | None = None):
        super().__init__(message)
        self.result = result
        if result is not None and result.exit_code:
            self.exit_code = result.exit_code
