"""Unified logging for merge-builder.

Provides Rich-based console output with colored icons and structured JSON file
logging with rotation.

Console Output Example:
    ℹ Building /js/app.merge
    ✓ Wrote 42 entries to /srv/www/cdn.properties
    ⚠ Missing merge reference: /js/gone.js
    ✗ Cyclical dependencies detected in: /js/loop.merge

File Output Example (build.log):
    {"timestamp": "2025-12-08T10:23:45.123456+00:00", "level": "WARNING", "message": "Missing merge reference: /js/gone.js", "path": "/js/app.merge"}

Usage:
    from mergebuild.core import Settings, get_logger

    settings = Settings(log_level="INFO", log_file="build.log")
    logger = get_logger(settings)

    logger.info("Building /js/app.merge")
    logger.warning("Missing merge reference", path="/js/gone.js")
"""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import TYPE_CHECKING, Any, Protocol

from rich.console import Console
from rich.markup import escape

if TYPE_CHECKING:
    from mergebuild.core.config import Settings


class LoggerProtocol(Protocol):
    """Protocol for duck-typed logger compatibility.

    The build engine only depends on these methods. Both BuildLogger and
    StdlibLoggerAdapter implement it.
    """

    def debug(self, msg: str, **kwargs: Any) -> None:
        """Log a debug message."""
        ...

    def info(self, msg: str, **kwargs: Any) -> None:
        """Log an info message."""
        ...

    def success(self, msg: str, **kwargs: Any) -> None:
        """Log a success message (semantic variant of info)."""
        ...

    def warning(self, msg: str, **kwargs: Any) -> None:
        """Log a warning message."""
        ...

    def error(self, msg: str, **kwargs: Any) -> None:
        """Log an error message."""
        ...


class StdlibLoggerAdapter:
    """Adapter exposing LoggerProtocol over a stdlib logger.

    Wraps extra kwargs in a nested dict to avoid LogRecord attribute conflicts.
    """

    def __init__(self, logger: logging.Logger) -> None:
        self._logger = logger

    def _safe_extra(self, kwargs: dict[str, Any]) -> dict[str, Any] | None:
        if not kwargs:
            return None
        return {"extra_data": kwargs}

    def debug(self, msg: str, **kwargs: Any) -> None:
        self._logger.debug(msg, extra=self._safe_extra(kwargs))

    def info(self, msg: str, **kwargs: Any) -> None:
        self._logger.info(msg, extra=self._safe_extra(kwargs))

    def success(self, msg: str, **kwargs: Any) -> None:
        # stdlib has no success level, use info
        self._logger.info(msg, extra=self._safe_extra(kwargs))

    def warning(self, msg: str, **kwargs: Any) -> None:
        self._logger.warning(msg, extra=self._safe_extra(kwargs))

    def error(self, msg: str, **kwargs: Any) -> None:
        self._logger.error(msg, extra=self._safe_extra(kwargs))


class StructuredFileHandler(RotatingFileHandler):
    """File handler that writes JSON Lines with log rotation.

    Each line carries ``timestamp`` (UTC, ISO 8601), ``level`` and
    ``message``, plus ``logger`` when named. Extra fields passed to the
    logger are merged at the top level; any that collide with a reserved
    key are namespaced under ``data`` instead.

    Args:
        filepath: Path to the log file
        max_bytes: Maximum file size before rotation (default: 10MB)
        backup_count: Number of backup files to keep (default: 3)
    """

    _RESERVED_KEYS: frozenset[str] = frozenset({
        "timestamp",
        "level",
        "message",
        "logger",
        "data",
    })

    def __init__(
        self,
        filepath: Path | str,
        max_bytes: int = 10 * 1024 * 1024,
        backup_count: int = 3,
    ) -> None:
        filepath = Path(filepath)
        filepath.parent.mkdir(parents=True, exist_ok=True)

        super().__init__(
            filename=str(filepath),
            maxBytes=max_bytes,
            backupCount=backup_count,
            encoding="utf-8",
        )

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as a JSON line."""
        log_entry: dict[str, Any] = {
            "timestamp": datetime.now(tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "message": record.getMessage(),
        }

        if record.name and record.name != "root":
            log_entry["logger"] = record.name

        extra = getattr(record, "extra", {})
        conflicting: dict[str, Any] = {}
        for key, value in extra.items():
            if key in self._RESERVED_KEYS:
                conflicting[key] = value
            else:
                log_entry[key] = value
        if conflicting:
            log_entry["data"] = conflicting

        return json.dumps(log_entry, default=str)


class BuildLogger:
    """Logger with Rich console output and structured JSON file logging.

    Provides semantic log methods with colored icons for console output:
    - info(): Blue ℹ icon
    - success(): Green ✓ icon (INFO level)
    - warning(): Yellow ⚠ icon
    - error(): Red ✗ icon
    - debug(): Dim 🔍 icon (only shown at DEBUG level)

    Console and file share one threshold from ``settings.log_level``.

    Args:
        settings: Settings object providing ``log_level`` and ``log_file``.
        console: Optional Rich console; defaults to a new stdout console.
    """

    _LEVEL_MAP = {
        "DEBUG": logging.DEBUG,
        "INFO": logging.INFO,
        "WARNING": logging.WARNING,
        "ERROR": logging.ERROR,
        "CRITICAL": logging.CRITICAL,
    }

    def __init__(self, settings: Settings, console: Console | None = None) -> None:
        self.console = console if console is not None else Console()

        level_name = getattr(settings, "log_level", "INFO").upper()
        self._level = self._LEVEL_MAP.get(level_name, logging.INFO)

        log_file = getattr(settings, "log_file", None)
        if log_file:
            self.file_handler: StructuredFileHandler | None = StructuredFileHandler(Path(log_file))
            self.file_handler.setLevel(self._level)
        else:
            self.file_handler = None

    def _should_log(self, level: int) -> bool:
        return level >= self._level

    def _log_to_file(self, level: int, msg: str, extra: dict[str, Any]) -> None:
        if self.file_handler is None:
            return

        record = logging.LogRecord(
            name="mergebuild",
            level=level,
            pathname="",
            lineno=0,
            msg=msg,
            args=(),
            exc_info=None,
        )
        record.extra = extra
        self.file_handler.handle(record)

    def debug(self, msg: str, **extra: Any) -> None:
        """Log a debug message with dim 🔍 icon (DEBUG level only)."""
        if self._should_log(logging.DEBUG):
            self.console.print(f"[dim]🔍 {escape(msg)}[/dim]")
            self._log_to_file(logging.DEBUG, msg, extra)

    def info(self, msg: str, **extra: Any) -> None:
        """Log an info message with blue ℹ icon."""
        if self._should_log(logging.INFO):
            self.console.print(f"[blue]ℹ[/blue] {escape(msg)}")
            self._log_to_file(logging.INFO, msg, extra)

    def success(self, msg: str, **extra: Any) -> None:
        """Log a success message with green ✓ icon.

        Success is a semantic variant of INFO level.
        """
        if self._should_log(logging.INFO):
            self.console.print(f"[green]✓[/green] {escape(msg)}")
            self._log_to_file(logging.INFO, msg, extra)

    def warning(self, msg: str, **extra: Any) -> None:
        """Log a warning message with yellow ⚠ icon."""
        if self._should_log(logging.WARNING):
            self.console.print(f"[yellow]⚠[/yellow] {escape(msg)}")
            self._log_to_file(logging.WARNING, msg, extra)

    def error(self, msg: str, **extra: Any) -> None:
        """Log an error message with red ✗ icon."""
        if self._should_log(logging.ERROR):
            self.console.print(f"[red]✗[/red] {escape(msg)}")
            self._log_to_file(logging.ERROR, msg, extra)

    def close(self) -> None:
        """Close the file handler. Safe to call multiple times."""
        if self.file_handler is not None:
            self.file_handler.close()
            self.file_handler = None


def get_logger(settings: Settings) -> BuildLogger:
    """Create a BuildLogger configured from settings.

    Example:
        from mergebuild.core import Settings, get_logger

        logger = get_logger(Settings(log_level="DEBUG"))
        logger.debug("Resolving /css/site.css")
    """
    return BuildLogger(settings)
