"""Expand artifact patterns into concrete files.

Patterns behave like an unquoted shell word with ``nullglob``: ``~`` and
``$VAR`` are expanded, a pattern that matches nothing contributes nothing,
and the matches of one pattern come back sorted.
"""

from __future__ import annotations

import glob
import os
import shlex
from collections.abc import Iterable
from pathlib import Path

from apkrel.core.result import Err, Ok, Result
from apkrel.services.release.errors import PublishError
from apkrel.services.release.model import ArtifactSet


def split_patterns(values: Iterable[str]) -> Result[tuple[str, ...], PublishError]:
    """Split each ``-a`` value into patterns using shell quoting rules.

    ``-a "out/*.apk extra/app.apk"`` yields two patterns; quote a pattern
    that itself contains spaces.
    """
    patterns: list[str] = []
    for value in values:
        try:
            patterns.extend(shlex.split(value))
        except ValueError as e:
            return Err(
                PublishError(
                    kind="usage",
                    message=f"invalid artifact pattern {value!r}: {e}",
                )
            )
    return Ok(tuple(patterns))


def expand_pattern(pattern: str, *, cwd: Path) -> list[Path]:
    expanded = os.path.expandvars(os.path.expanduser(pattern))
    if os.path.isabs(expanded):
        matches = [Path(m) for m in glob.glob(expanded)]
    else:
        matches = [cwd / m for m in glob.glob(expanded, root_dir=cwd)]
    return sorted(p for p in matches if p.is_file())


def collect_artifacts(patterns: Iterable[str], *, cwd: Path) -> Result[ArtifactSet, PublishError]:
    """Union of all pattern matches, in first-seen order."""
    paths: list[Path] = []
    pattern_list = list(patterns)
    for pattern in pattern_list:
        paths.extend(expand_pattern(pattern, cwd=cwd))

    if not paths:
        return Err(
            PublishError(
                kind="no_artifacts",
                message="No APK files found for the provided pattern(s).",
                hint=" ".join(pattern_list) or None,
            )
        )
    return Ok(ArtifactSet(paths=tuple(paths)))


def display_path(path: Path, *, cwd: Path) -> str:
    """Path relative to cwd when possible, for progress output."""
    try:
        return str(path.relative_to(cwd))
    except ValueError:
        return str(path)
