"""
Logging utilities for the CLI with colored output and progress tracking.

- CLILogger: CLI logger with step tracking, elapsed time, and optional
  file logging via BuildLogger integration
- create_logger: Factory for CLILogger instances
"""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING, Any, Optional

import click

if TYPE_CHECKING:
    from mergebuild.core.config import Settings
    from mergebuild.core.logging import BuildLogger


class CLILogger:
    """Logger for the CLI with verbose mode, step tracking, and elapsed time.

    Operating Modes:
        1. Standalone mode (default): Uses click.secho for colored output.

        2. Integrated mode (with Settings): Delegates to BuildLogger for
           Rich console output and optional JSON file logging.

    Satisfies LoggerProtocol, so it can be handed to BuildManager directly.

    Args:
        verbose: Enable verbose output (shows debug messages)
        settings: Optional Settings object to enable BuildLogger integration.
    """

    def __init__(self, verbose: bool = False, settings: Optional[Settings] = None):
        self.verbose = verbose
        self.start_time = datetime.now()

        self._core_logger: Optional[BuildLogger] = None
        if settings is not None:
            from mergebuild.core.logging import get_logger

            self._core_logger = get_logger(settings)

    def debug(self, message: str, **extra: Any) -> None:
        """Log debug message (only in verbose mode)."""
        if not self.verbose:
            return

        if self._core_logger is not None:
            self._core_logger.debug(message, **extra)
        else:
            timestamp = datetime.now().strftime("%H:%M:%S")
            click.secho(f"[{timestamp}] {message}", fg="cyan", dim=True)

    def info(self, message: str, **extra: Any) -> None:
        if self._core_logger is not None:
            self._core_logger.info(message, **extra)
        else:
            click.echo(message)

    def success(self, message: str, **extra: Any) -> None:
        if self._core_logger is not None:
            self._core_logger.success(message, **extra)
        else:
            click.secho(f"✓ {message}", fg="green")

    def warning(self, message: str, **extra: Any) -> None:
        if self._core_logger is not None:
            self._core_logger.warning(message, **extra)
        else:
            click.secho(f"⚠️  {message}", fg="yellow")

    def error(self, message: str, **extra: Any) -> None:
        if self._core_logger is not None:
            self._core_logger.error(message, **extra)
        else:
            click.secho(f"✗ {message}", fg="red", err=True)

    def step(self, message: str, step: Optional[int] = None, total: Optional[int] = None) -> None:
        """Log a processing step with optional progress indicator.

        Example:
            logger.step("Compacting resources...", 1, 2)
            # Output: [1/2] Compacting resources...
        """
        if step is not None and total is not None:
            prefix = f"[{step}/{total}]"
        else:
            prefix = "→"

        click.secho(f"{prefix} {message}", fg="blue", bold=True)

    def elapsed_time(self) -> str:
        """Formatted elapsed time since the logger was created, e.g. "2m 15s"."""
        elapsed = datetime.now() - self.start_time
        minutes = int(elapsed.total_seconds() // 60)
        seconds = int(elapsed.total_seconds() % 60)

        if minutes > 0:
            return f"{minutes}m {seconds}s"
        return f"{seconds}s"

    def close(self) -> None:
        """Close the underlying file handler. No-op in standalone mode."""
        if self._core_logger is not None:
            self._core_logger.close()


def create_logger(verbose: bool = False, settings: Optional[Settings] = None) -> CLILogger:
    """
    Create and return a CLI logger.

    Args:
        verbose: Enable verbose output (debug messages visible)
        settings: Optional Settings for BuildLogger integration

    Returns:
        Configured CLILogger instance
    """
    return CLILogger(verbose=verbose, settings=settings)
