from __future__ import annotations

from pathlib import Path

from botocore.exceptions import ClientError
from loguru import logger

from rdslogs.core.errors import (
    LogFileNotFoundError,
    StoreAccessDeniedError,
    StoreAccessError,
)
from rdslogs.core.logfiles import LOG_FILE_PREFIX, STRUCTURED_SUFFIX

LOG_DIRECTORY = "error/"
PARTIAL_SUFFIX = ".part"

_NOT_FOUND_CODES = {"DBInstanceNotFound", "DBInstanceNotFoundFault", "DBLogFileNotFoundFault"}
_DENIED_CODES = {"AccessDenied", "AccessDeniedException", "UnauthorizedOperation"}


def _store_error(exc: ClientError, what: str) -> StoreAccessError:
    """Map a botocore ClientError to the matching store error."""
    code = exc.response.get("Error", {}).get("Code", "")
    message = f"{what}: {exc}"
    if code in _NOT_FOUND_CODES:
        return LogFileNotFoundError(message)
    if code in _DENIED_CODES:
        return StoreAccessDeniedError(message)
    return StoreAccessError(message)


class RDSLogStore:
    """Adapter around the boto3 RDS log file APIs of one DB instance."""

    def __init__(self, client, instance_id: str) -> None:
        self.client = client
        self.instance_id = instance_id

    def list_file_names(self) -> list[str]:
        """Return the names of all PostgreSQL log files, without the ``error/`` directory."""
        names: list[str] = []
        paginator = self.client.get_paginator("describe_db_log_files")
        try:
            for page in paginator.paginate(
                DBInstanceIdentifier=self.instance_id,
                FilenameContains=LOG_FILE_PREFIX,
            ):
                for item in page.get("DescribeDBLogFiles", []):
                    full_name = item.get("LogFileName") or ""
                    if not full_name.startswith(LOG_DIRECTORY + LOG_FILE_PREFIX):
                        continue
                    names.append(full_name[len(LOG_DIRECTORY) :])
        except ClientError as exc:
            raise _store_error(
                exc, f"Could not list log files of '{self.instance_id}'"
            ) from exc
        logger.debug(f"Listed {len(names)} log files of {self.instance_id}")
        return names

    def structured_output_enabled(self) -> bool:
        """Return True if the instance has produced any csvlog files."""
        return any(n.endswith(STRUCTURED_SUFFIX) for n in self.list_file_names())

    def download(self, name: str, destination: str | Path) -> int:
        """
        Download a complete log file to `destination`.

        The RDS API returns a file in portions; portions are requested from
        marker ``"0"`` on and appended until no more data is pending.
        Portions go to a ``.part`` sibling that only replaces `destination`
        once the whole file arrived; a failed download leaves no file behind.

        Returns:
            Number of bytes written.
        """
        destination_path = Path(destination)
        partial_path = destination_path.with_name(destination_path.name + PARTIAL_SUFFIX)
        marker = "0"
        written = 0

        try:
            with partial_path.open("w", encoding="utf-8") as file_handle:
                while True:
                    try:
                        portion = self.client.download_db_log_file_portion(
                            DBInstanceIdentifier=self.instance_id,
                            LogFileName=LOG_DIRECTORY + name,
                            Marker=marker,
                        )
                    except ClientError as exc:
                        raise _store_error(exc, f"Could not download '{name}'") from exc

                    data = portion.get("LogFileData") or ""
                    file_handle.write(data)
                    written += len(data.encode("utf-8"))

                    next_marker = portion.get("Marker")
                    if not portion.get("AdditionalDataPending") or next_marker in (None, marker):
                        break
                    marker = next_marker
        except Exception:
            partial_path.unlink(missing_ok=True)
            raise

        partial_path.replace(destination_path)
        return written
