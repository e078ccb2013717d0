"""Entry point for the dotnet CI extension."""

import asyncio
import logging
import os
import signal
import sys
from collections.abc import Mapping, Sequence

from .actions import Runner, run_action
from .config import load_config
from .dotnet.runner import CommandRunner
from .errors import ExtensionError

EXIT_CANCELLED = 130


def configure_logging() -> None:
    """Configure logging based on environment."""
    level = os.environ.get("LOG_LEVEL", "INFO").upper()
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=sys.stderr,
    )


def _cancel_on_sigterm() -> None:
    """Cancel the running action (and its child process) on SIGTERM."""
    task = asyncio.current_task()
    if task is None:
        return
    try:
        asyncio.get_running_loop().add_signal_handler(signal.SIGTERM, task.cancel)
    except (NotImplementedError, RuntimeError):
        # Signal handlers are not available on Windows event loops
        pass


async def main(
    argv: Sequence[str] | None = None,
    environ: Mapping[str, str] | None = None,
    runner: Runner | None = None,
) -> int:
    """Run the configured action.

    Returns:
        Process exit code
    """
    logger = logging.getLogger(__name__)

    config = load_config(argv, environ)
    _cancel_on_sigterm()

    try:
        await run_action(config, runner or CommandRunner("dotnet"))
    except ExtensionError as e:
        logger.error(str(e))
        return e.exit_code
    except asyncio.CancelledError:
        logger.warning("Action cancelled")
        return EXIT_CANCELLED

    return 0


def run() -> None:
    """Run the extension."""
    configure_logging()
    try:
        exit_code = asyncio.run(main())
    except KeyboardInterrupt:
        exit_code = EXIT_CANCELLED
    sys.exit(exit_code)


if __name__ == "__main__":
    run()
