from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

PublishErrorKind = Literal[
    "usage",
    "repo_unresolved",
    "no_artifacts",
    "archive_failed",
    "missing_credential",
    "release_create_failed",
    "upload_failed",
    "network",
]


@dataclass(frozen=True, slots=True)
class PublishError:
    kind: PublishErrorKind
    message: str
    # Verbatim stderr / response body of the failing call, when there is one.
    hint: str | None = None
