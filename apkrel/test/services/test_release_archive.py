from __future__ import annotations

import re
from datetime import UTC, datetime, timedelta, timezone
from pathlib import Path
from zipfile import ZipFile

from apkrel.core.result import Err, Ok
from apkrel.services.release.archive import archive_name, create_archive
from apkrel.services.release.model import ArtifactSet


def _apks(tmp_path: Path, *names: str) -> ArtifactSet:
    paths = []
    for name in names:
        path = tmp_path / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(f"content of {name}".encode())
        paths.append(path)
    return ArtifactSet(paths=tuple(paths))


class TestArchiveName:
    def test_format(self) -> None:
        now = datetime(2024, 3, 5, 7, 8, 9, tzinfo=UTC)
        assert archive_name("v1.2.3", now=now) == "apks-v1.2.3-20240305070809Z.zip"

    def test_converts_to_utc(self) -> None:
        now = datetime(2024, 3, 5, 9, 0, 0, tzinfo=timezone(timedelta(hours=2)))
        assert archive_name("v1", now=now) == "apks-v1-20240305070000Z.zip"

    def test_slash_in_tag(self) -> None:
        now = datetime(2024, 1, 1, tzinfo=UTC)
        assert archive_name("release/1.0", now=now, prefix="app") == "app-release-1.0-20240101000000Z.zip"


class TestCreateArchive:
    def test_flat_entries(self, tmp_path: Path) -> None:
        artifacts = _apks(tmp_path, "build/a.apk", "other/deep/b.apk")

        result = create_archive(artifacts, tag="v1.2.3", out_dir=tmp_path)

        assert isinstance(result, Ok)
        archive = result.value
        assert re.fullmatch(r"apks-v1\.2\.3-\d{14}Z\.zip", archive.name)
        assert archive.path.parent == tmp_path
        with ZipFile(archive.path) as zf:
            assert zf.namelist() == ["a.apk", "b.apk"]
            assert zf.read("b.apk") == b"content of other/deep/b.apk"

    def test_replaces_existing(self, tmp_path: Path) -> None:
        artifacts = _apks(tmp_path, "a.apk")
        now = datetime(2024, 1, 1, tzinfo=UTC)
        stale = tmp_path / archive_name("v1", now=now)
        stale.write_bytes(b"not a zip")

        result = create_archive(artifacts, tag="v1", out_dir=tmp_path, now=now)

        assert isinstance(result, Ok)
        with ZipFile(stale) as zf:
            assert zf.namelist() == ["a.apk"]

    def test_duplicate_base_names(self, tmp_path: Path) -> None:
        artifacts = _apks(tmp_path, "x/app.apk", "y/app.apk")

        result = create_archive(artifacts, tag="v1", out_dir=tmp_path)

        assert isinstance(result, Err)
        assert result.error.kind == "archive_failed"
        assert result.error.hint == "app.apk"
        assert not list(tmp_path.glob("*.zip"))

    def test_unreadable_artifact(self, tmp_path: Path) -> None:
        artifacts = ArtifactSet(paths=(tmp_path / "gone.apk",))

        result = create_archive(artifacts, tag="v1", out_dir=tmp_path)

        assert isinstance(result, Err)
        assert result.error.kind == "archive_failed"
