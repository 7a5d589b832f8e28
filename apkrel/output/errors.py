"""Error presentation utilities.

Centralized error formatting and exit code mapping for consistent UX.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from apkrel.core.errors import ErrorCode
from apkrel.output.console import Style
from apkrel.services.release.errors import PublishError

if TYPE_CHECKING:
    from apkrel.output.console import ConsoleProtocol

__all__ = ["print_publish_error", "publish_error_exit_code"]


_EXIT_CODES: dict[str, ErrorCode] = {
    "usage": ErrorCode.USAGE_ERROR,
    "repo_unresolved": ErrorCode.REPO_UNRESOLVED,
    "no_artifacts": ErrorCode.NO_ARTIFACTS,
    "archive_failed": ErrorCode.ARCHIVE_FAILED,
    "missing_credential": ErrorCode.MISSING_CREDENTIAL,
    "release_create_failed": ErrorCode.RELEASE_CREATE_FAILED,
    "upload_failed": ErrorCode.UPLOAD_FAILED,
    "network": ErrorCode.NETWORK_ERROR,
}


def print_publish_error(error: PublishError, console: ConsoleProtocol) -> None:
    """Print a publish error with its hint, if any."""
    console.error(error.message)
    if error.hint:
        for line in error.hint.strip().splitlines():
            console.print(f"hint: {line}", Style.DIM)


def publish_error_exit_code(error: PublishError) -> int:
    return int(_EXIT_CODES.get(error.kind, ErrorCode.NETWORK_ERROR))
