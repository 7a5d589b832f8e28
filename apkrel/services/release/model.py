from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

APK_CONTENT_TYPE = "application/vnd.android.package-archive"
ZIP_CONTENT_TYPE = "application/zip"


class ReleaseState(Enum):
    ABSENT = "absent"
    PRESENT = "present"


@dataclass(frozen=True, slots=True)
class ReleaseRequest:
    """What the user asked to publish.

    Empty ``title``/``notes`` are normalized to None by the CLI: only
    non-empty values count as supplied.
    """

    tag: str
    patterns: tuple[str, ...]
    repo: str  # owner/name
    create_archive: bool = False
    notes: str | None = None
    title: str | None = None

    @property
    def release_title(self) -> str:
        return self.title or self.tag

    @property
    def release_notes(self) -> str:
        return self.notes or ""

    @property
    def wants_metadata_update(self) -> bool:
        return self.title is not None or self.notes is not None


@dataclass(frozen=True, slots=True)
class ArtifactSet:
    """Files matched by the artifact patterns, in first-seen order."""

    paths: tuple[Path, ...]

    def __iter__(self) -> Iterator[Path]:
        return iter(self.paths)

    def __len__(self) -> int:
        return len(self.paths)


@dataclass(frozen=True, slots=True)
class ArchiveArtifact:
    path: Path

    @property
    def name(self) -> str:
        return self.path.name


@dataclass(frozen=True, slots=True)
class ReleaseAsset:
    """A local file as it will appear on the release."""

    path: Path
    name: str
    content_type: str

    @classmethod
    def artifact(cls, path: Path) -> ReleaseAsset:
        return cls(path=path, name=path.name, content_type=APK_CONTENT_TYPE)

    @classmethod
    def archive(cls, archive: ArchiveArtifact) -> ReleaseAsset:
        return cls(path=archive.path, name=archive.name, content_type=ZIP_CONTENT_TYPE)


@dataclass(frozen=True, slots=True)
class RemoteRelease:
    """A release as seen on GitHub.

    ``release_id`` and ``upload_url`` are only known to the REST backend.
    """

    tag: str
    state: ReleaseState
    release_id: int | None = None
    upload_url: str | None = None
    html_url: str | None = None

    @classmethod
    def absent(cls, tag: str) -> RemoteRelease:
        return cls(tag=tag, state=ReleaseState.ABSENT)
