"""CI pipeline extension running .NET build lifecycle actions."""

from .actions import Action, run_action
from .config import ExtensionConfig, load_config
from .errors import (
    CommandFailedError,
    ConfigurationError,
    CredentialError,
    CredentialLoadError,
    CredentialNotFoundError,
    DiscoveryError,
    ExtensionError,
    NoCredentialsError,
)

__version__ = "0.1.0"

__all__ = [
    "Action",
    "ExtensionConfig",
    "load_config",
    "run_action",
    "ExtensionError",
    "ConfigurationError",
    "CredentialError",
    "CredentialLoadError",
    "NoCredentialsError",
    "CredentialNotFoundError",
    "DiscoveryError",
    "CommandFailedError",
]
