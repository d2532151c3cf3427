"""Exception hierarchy for merge-builder."""

from __future__ import annotations


class MergeBuildError(Exception):
    """Base exception for all merge-builder errors."""

    pass


class ConfigurationError(MergeBuildError):
    """Exception raised when the build cannot start with the given settings.

    Raised before any file is touched, e.g. when the source directory is
    unset or does not exist.
    """

    pass


class CompactionError(MergeBuildError):
    """Exception raised when a compactor fails to transform a resource.

    The build manager catches this per resource, logs it and leaves the
    resource unresolved; the rest of the build continues.

    Attributes:
        path: Logical path of the resource being compacted
    """

    def __init__(self, path: str, message: str) -> None:
        self.path = path
        super().__init__(f"Failed to compact '{path}': {message}")


class OutputWriteError(MergeBuildError):
    """Exception raised when a generated map file cannot be written.

    This is fatal: the build is considered failed even if every resource
    was compacted.

    Attributes:
        path: File that could not be written
        cause: The underlying OSError
    """

    def __init__(self, path: object, cause: OSError) -> None:
        self.path = path
        self.cause = cause
        super().__init__(f"Failed to write '{path}': {cause}")
