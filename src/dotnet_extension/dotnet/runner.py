"""Command runner - executes the wrapped tool with output capture.

Output lines are forwarded to the log as they arrive and kept in a bounded
buffer for the returned result.
"""

from __future__ import annotations

import asyncio
import logging
import os
import shlex
import time
from collections.abc import Callable, Sequence
from dataclasses import dataclass

from ..errors import CommandFailedError, ConfigurationError

logger = logging.getLogger(__name__)

# Output buffer limits
MAX_OUTPUT_BYTES: int = 5_000_000  # 5MB per stream
MAX_OUTPUT_LINE: int = 10_000  # 10KB per line

# Arguments whose following value must not appear in logs
SECRET_ARGUMENTS: frozenset[str] = frozenset({"--password", "--api-key", "-k"})

EXIT_COMMAND_NOT_FOUND = 127

REDACTED = "***"


def redact(command: Sequence[str]) -> list[str]:
    """Mask values that follow secret-bearing arguments."""
    masked: list[str] = []
    hide_next = False
    for part in command:
        masked.append(REDACTED if hide_next else part)
        hide_next = part in SECRET_ARGUMENTS
    return masked


def format_command(command: Sequence[str]) -> str:
    """Format a command line for logging, with secrets masked."""
    return " ".join(
        part if part == REDACTED else shlex.quote(part) for part in redact(command)
    )


@dataclass
class CommandResult:
    """Outcome of an executed command."""

    command: list[str]
    exit_code: int
    stdout: str = ""
    stderr: str = ""
    duration_ms: float = 0.0

    @property
    def success(self) -> bool:
        return self.exit_code == 0


class CommandRunner:
    """Runs a fixed executable with varying arguments.

    Usage:
        runner = CommandRunner("dotnet")
        result = await runner.run(["build", "--configuration", "Release"])
    """

    def __init__(
        self,
        executable: str = "dotnet",
        on_output: Callable[[str], None] | None = None,
    ):
        self.executable = executable
        self._on_output = on_output or self._log_output

    @staticmethod
    def _log_output(line: str) -> None:
        logger.info(line.rstrip("\r\n"))

    @staticmethod
    async def _read_line(stream: asyncio.StreamReader) -> bytes:
        """Read one line, keeping at most MAX_OUTPUT_LINE bytes of it.

        Lines longer than the stream buffer limit are drained in chunks.
        Returns b"" at end of stream.
        """
        kept = bytearray()
        truncated = False
        while True:
            more = False
            try:
                chunk = await stream.readuntil(b"\n")
            except asyncio.IncompleteReadError as e:
                chunk = e.partial
            except asyncio.LimitOverrunError as e:
                chunk = await stream.read(max(e.consumed, 1))
                more = bool(chunk)

            room = MAX_OUTPUT_LINE - len(kept)
            if len(chunk) > room:
                truncated = True
            kept += chunk[:room]
            if not more:
                break

        if truncated:
            kept += b"...[truncated]\n"
        return bytes(kept)

    async def _read_stream(
        self,
        stream: asyncio.StreamReader | None,
        lines: list[str],
    ) -> None:
        if stream is None:
            return
        total = 0
        while True:
            line = await self._read_line(stream)
            if not line:
                break
            decoded = line.decode("utf-8", errors="replace")
            self._on_output(decoded)
            lines.append(decoded)
            total += len(decoded)
            # Drop old lines if buffer too large
            while total > MAX_OUTPUT_BYTES and lines:
                total -= len(lines.pop(0))

    async def run(
        self,
        args: Sequence[str],
        cwd: str | None = None,
        check: bool = True,
    ) -> CommandResult:
        """Run the executable with the given arguments.

        Args:
            args: Arguments passed to the executable
            cwd: Working directory
            check: Raise CommandFailedError on non-zero exit

        Returns:
            Command result with captured output

        Raises:
            CommandFailedError: If the executable is missing, or exits
                non-zero while check is set
            ConfigurationError: If cwd does not exist
            asyncio.CancelledError: If cancelled (the process is killed)
        """
        command = [self.executable, *args]
        logger.info(f"Running: {format_command(command)}")
        start_time = time.perf_counter()

        try:
            # Never use a shell
            process = await asyncio.create_subprocess_exec(
                *command,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
                cwd=cwd,
            )
        except FileNotFoundError as e:
            # A missing cwd raises the same error as a missing executable
            if cwd is not None and not os.path.isdir(cwd):
                raise ConfigurationError(
                    f"Working directory does not exist: {cwd}"
                ) from e
            result = CommandResult(command=command, exit_code=EXIT_COMMAND_NOT_FOUND)
            raise CommandFailedError(
                f"Executable not found: {self.executable}", result
            ) from e

        stdout_lines: list[str] = []
        stderr_lines: list[str] = []

        try:
            await asyncio.gather(
                self._read_stream(process.stdout, stdout_lines),
                self._read_stream(process.stderr, stderr_lines),
            )
            await process.wait()
        except BaseException as e:
            if isinstance(e, asyncio.CancelledError):
                logger.warning(f"Cancelled, killing {self.executable}")
            else:
                logger.error(f"Reading output failed, killing {self.executable}: {e}")
            try:
                process.kill()
            except ProcessLookupError:
                pass
            await asyncio.shield(process.wait())
            raise

        result = CommandResult(
            command=command,
            exit_code=process.returncode or 0,
            stdout="".join(stdout_lines),
            stderr="".join(stderr_lines),
            duration_ms=(time.perf_counter() - start_time) * 1000,
        )

        if check and not result.success:
            raise CommandFailedError(
                f"Command failed with exit code {result.exit_code}: "
                f"{format_command(command)}",
                result,
            )
        return result
