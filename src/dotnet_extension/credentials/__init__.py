"""Credential records and their lookup.

Provides:
- Typed, immutable NuGet and SonarQube server credentials
- Loading from a mounted file or an injected environment value
- Selection by name with first-record fallback
"""

from .models import (
    CredentialRecord,
    NugetServerCredential,
    NugetServerProperties,
    SonarQubeServerCredential,
    SonarQubeServerProperties,
)
from .store import (
    load_credentials,
    parse_credentials,
    read_credentials_file,
    resolve_mount_path,
    select_credential,
)

__all__ = [
    "CredentialRecord",
    "NugetServerCredential",
    "NugetServerProperties",
    "SonarQubeServerCredential",
    "SonarQubeServerProperties",
    "load_credentials",
    "parse_credentials",
    "read_credentials_file",
    "resolve_mount_path",
    "select_credential",
]
