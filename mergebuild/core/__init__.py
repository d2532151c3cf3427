"""Core configuration, logging, error handling, and hashing for merge-builder.

This module provides:
- Settings: Central configuration using Pydantic Settings
- BuildLogger: Unified logging with Rich console and JSON file output
- get_logger: Factory function for creating loggers
- Exception hierarchy for configuration, compaction and output errors
- Constants: Output layout and source format constants
- ContentHasher: Deterministic digests for content-addressed names
"""

from mergebuild.core.config import Settings
from mergebuild.core.constants import (
    CSS_EXTENSION,
    DEBUG_DIR,
    DEFAULT_CDN_ROOT,
    DEFAULT_LINKS_FILE,
    DEFAULT_MAP_FILE,
    JS_EXTENSION,
    MAX_DEPTH,
    MERGE_EXTENSION,
)
from mergebuild.core.errors import (
    CompactionError,
    ConfigurationError,
    MergeBuildError,
    OutputWriteError,
)
from mergebuild.core.logging import (
    BuildLogger,
    LoggerProtocol,
    StdlibLoggerAdapter,
    get_logger,
)
from mergebuild.core.utils.hashing import ContentHasher

__all__ = [
    "Settings",
    "BuildLogger",
    "LoggerProtocol",
    "StdlibLoggerAdapter",
    "get_logger",
    "MergeBuildError",
    "ConfigurationError",
    "CompactionError",
    "OutputWriteError",
    "DEFAULT_CDN_ROOT",
    "DEFAULT_MAP_FILE",
    "DEFAULT_LINKS_FILE",
    "DEBUG_DIR",
    "MERGE_EXTENSION",
    "JS_EXTENSION",
    "CSS_EXTENSION",
    "MAX_DEPTH",
    "ContentHasher",
]
