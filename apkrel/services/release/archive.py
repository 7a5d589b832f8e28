"""Bundle the matched artifacts into one flat zip."""

from __future__ import annotations

from collections import Counter
from datetime import UTC, datetime
from pathlib import Path
from zipfile import ZIP_DEFLATED, ZipFile

from apkrel.core.result import Err, Ok, Result
from apkrel.services.release.errors import PublishError
from apkrel.services.release.model import ArchiveArtifact, ArtifactSet

TIMESTAMP_FORMAT = "%Y%m%d%H%M%SZ"


def archive_name(tag: str, *, now: datetime, prefix: str = "apks") -> str:
    """``<prefix>-<tag>-<YYYYMMDDHHMMSS>Z.zip``; ``now`` is converted to UTC."""
    # Tags like "release/1.0" must not turn into a directory.
    safe_tag = tag.replace("/", "-").replace("\\", "-")
    stamp = now.astimezone(UTC).strftime(TIMESTAMP_FORMAT)
    return f"{prefix}-{safe_tag}-{stamp}.zip"


def create_archive(
    artifacts: ArtifactSet,
    *,
    tag: str,
    out_dir: Path,
    prefix: str = "apks",
    now: datetime | None = None,
) -> Result[ArchiveArtifact, PublishError]:
    """Write a zip holding every artifact under its base name.

    A previous archive with the same name is replaced.
    """
    zip_path = out_dir / archive_name(tag, now=now or datetime.now(UTC), prefix=prefix)

    dupes = sorted(name for name, n in Counter(p.name for p in artifacts).items() if n > 1)
    if dupes:
        return Err(
            PublishError(
                kind="archive_failed",
                message="Failed to create zip file: duplicate artifact names.",
                hint=", ".join(dupes),
            )
        )

    try:
        zip_path.unlink(missing_ok=True)
        # Build outputs can carry mtime=0; ZIP cannot represent dates before 1980.
        with ZipFile(zip_path, "w", compression=ZIP_DEFLATED, strict_timestamps=False) as zf:
            for src in artifacts:
                zf.write(src, arcname=src.name)
    except OSError as e:
        return Err(
            PublishError(
                kind="archive_failed",
                message="Failed to create zip file.",
                hint=str(e),
            )
        )

    if not zip_path.is_file():
        return Err(
            PublishError(
                kind="archive_failed",
                message="Failed to create zip file.",
                hint=str(zip_path),
            )
        )
    return Ok(ArchiveArtifact(path=zip_path))
