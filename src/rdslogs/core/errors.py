"""Exception types raised by the rdslogs core.

Unrecognized log file names are not errors (they are skipped); everything
that should stop a run or a single file is expressed here so frontends can
map it to messages and exit codes.
"""

from __future__ import annotations


class RdsLogsError(RuntimeError):
    """Base class for all rdslogs errors."""


class AuthError(RdsLogsError):
    """Raised when AWS or database connection settings cannot be resolved."""


class StoreAccessError(RdsLogsError):
    """Raised when listing or fetching log files from the store fails."""


class LogFileNotFoundError(StoreAccessError):
    """Raised when the instance or the requested log file does not exist."""


class StoreAccessDeniedError(StoreAccessError):
    """Raised when the caller is not allowed to read the instance logs."""


class MixedLogFormatError(RdsLogsError):
    """Raised when a structured and a plain file end up in the same load run."""


class StructuralMismatchError(RdsLogsError):
    """Raised when a partition's columns differ from the parent table's columns."""

    def __init__(self, partition: str, parent: str, details: str) -> None:
        super().__init__(
            f"Partition '{partition}' does not match the columns of '{parent}': {details}"
        )
        self.partition = partition
        self.parent = parent


class RegistrationError(RdsLogsError):
    """Raised when the catalog rejects the registration of a log file."""

    def __init__(self, file_name: str, message: str) -> None:
        super().__init__(f"Failed to register log file '{file_name}': {message}")
        self.file_name = file_name
