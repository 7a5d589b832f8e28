"""Exit codes for the publish command.

Each failure class of the pipeline has its own stable exit status so CI
scripts can tell a missing artifact apart from a failed upload.
"""

from enum import IntEnum

__all__ = ["ErrorCode"]


class ErrorCode(IntEnum):
    """Process exit codes.

    - 0: Success
    - 1: Usage error (missing/unknown flags, bad config file)
    - 2: Repository could not be resolved
    - 3: No artifact matched the given patterns
    - 4: Archive creation failed
    - 5: No backend usable (gh missing and no API token)
    - 6: Release creation failed
    - 7: Asset upload failed
    - 8: Other tool or network failure
    """

    OK = 0
    USAGE_ERROR = 1
    REPO_UNRESOLVED = 2
    NO_ARTIFACTS = 3
    ARCHIVE_FAILED = 4
    MISSING_CREDENTIAL = 5
    RELEASE_CREATE_FAILED = 6
    UPLOAD_FAILED = 7
    NETWORK_ERROR = 8

    def __str__(self) -> str:
        return self.name.lower().replace("_", " ")
