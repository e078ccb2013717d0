"""Credential store - loading and selecting named credential records.

Credentials reach the extension in one of two ways:
1. A JSON file mounted into the container (current CI server revisions)
2. A JSON value injected as an environment variable (older revisions)

The mounted file takes precedence when both are present.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping, Sequence
from typing import TypeVar

from pydantic import BaseModel, TypeAdapter, ValidationError

from ..errors import CredentialLoadError, CredentialNotFoundError, NoCredentialsError

logger = logging.getLogger(__name__)

RecordT = TypeVar("RecordT", bound=BaseModel)


def parse_credentials(raw: str | bytes, model: type[RecordT]) -> tuple[RecordT, ...]:
    """Parse a JSON array of credential records.

    Args:
        raw: JSON document
        model: Record model to validate each element against

    Returns:
        Records in document order

    Raises:
        CredentialLoadError: If the document is malformed or not an array
    """
    try:
        records = TypeAdapter(list[model]).validate_json(raw)
    except ValidationError as e:
        raise CredentialLoadError(f"Failed unmarshalling credentials: {e}") from e
    return tuple(records)


def resolve_mount_path(path: str) -> str:
    """Prefix the system drive to container mount paths on Windows."""
    if os.name == "nt" and path.startswith("/"):
        return "C:" + path
    return path


def read_credentials_file(path: str, model: type[RecordT]) -> tuple[RecordT, ...]:
    """Read and parse a mounted credentials file.

    Raises:
        CredentialLoadError: If the file cannot be read or parsed
    """
    logger.info(f"Reading credentials from file at path {path}...")
    try:
        with open(path, "rb") as f:
            content = f.read()
    except OSError as e:
        raise CredentialLoadError(f"Failed reading credential file at path {path}.") from e
    return parse_credentials(content, model)


def load_credentials(
    path: str | None,
    env_var: str | None,
    model: type[RecordT],
    environ: Mapping[str, str] | None = None,
) -> tuple[RecordT, ...] | None:
    """Load credentials from the first available source.

    Args:
        path: Mounted credentials file path (checked first)
        env_var: Environment variable holding injected credentials JSON
        model: Record model
        environ: Environment mapping (defaults to os.environ)

    Returns:
        Loaded records, or None if no source is present
    """
    environ = os.environ if environ is None else environ

    if path:
        mounted = resolve_mount_path(path)
        if os.path.isfile(mounted):
            return read_credentials_file(mounted, model)
        logger.debug(f"No credentials file at {mounted}")

    if env_var:
        raw = environ.get(env_var, "")
        if raw.strip():
            logger.info(f"Reading credentials from environment variable {env_var}...")
            return parse_credentials(raw, model)

    return None


def select_credential(records: Sequence[RecordT], name: str = "") -> RecordT:
    """Select a credential by name, or the first one when no name is given.

    Args:
        records: Loaded credential records, in source order
        name: Exact (case-sensitive) record name, or empty for the first record

    Returns:
        The selected record

    Raises:
        NoCredentialsError: If there are no records
        CredentialNotFoundError: If no record has the requested name
    """
    if not records:
        raise NoCredentialsError("There are no credentials specified.")

    if not name:
        # Just pick the first
        return records[0]

    logger.info(f"Looking for credential with name {name}...")
    for record in records:
        logger.debug(f"Checking credential {record.name}...")
        if record.name == name:
            logger.info(f"Credential with name {name} was retrieved.")
            return record

    logger.info(f"Credential with name {name} was not found.")
    raise CredentialNotFoundError(name)
