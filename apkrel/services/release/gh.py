"""Release backend driving the GitHub CLI (``gh``).

Authentication is whatever ``gh`` is logged in with (or ``GH_TOKEN``).
"""

from __future__ import annotations

import json
import shlex
from collections.abc import Sequence
from pathlib import Path

from apkrel.core.result import Err, Ok, Result
from apkrel.core.structured import as_str_dict, get_str
from apkrel.output.console import ConsoleProtocol
from apkrel.platform.process import ProcessError
from apkrel.platform.process import run as run_process
from apkrel.services.release.errors import PublishError, PublishErrorKind
from apkrel.services.release.model import ReleaseAsset, ReleaseState, RemoteRelease
from apkrel.services.release.timeouts import GH_TIMEOUT_SECONDS, GH_UPLOAD_TIMEOUT_SECONDS


def _is_not_found(error: ProcessError) -> bool:
    return "release not found" in f"{error.stderr}\n{error.stdout}".lower()


class GhCliPublisher:
    name = "gh"
    attaches_assets_on_create = True

    def __init__(self, *, repo: str, cwd: Path, console: ConsoleProtocol) -> None:
        self.repo = repo
        self.cwd = cwd
        self.console = console

    def _gh(
        self,
        args: list[str],
        *,
        kind: PublishErrorKind,
        message: str,
        timeout: float = GH_TIMEOUT_SECONDS,
    ) -> Result[str, PublishError]:
        cmd = ["gh", *args, "--repo", self.repo]
        self.console.debug(f"$ {shlex.join(cmd)}")
        result = run_process(cmd, cwd=self.cwd, timeout=timeout)
        if isinstance(result, Err):
            error = result.error
            return Err(
                PublishError(
                    kind=kind,
                    message=f"{message} ({error})",
                    hint=error.stderr.strip() or error.stdout.strip() or None,
                )
            )
        return result

    def find_release(self, tag: str) -> Result[RemoteRelease, PublishError]:
        cmd = ["gh", "release", "view", tag, "--json", "tagName,url", "--repo", self.repo]
        self.console.debug(f"$ {shlex.join(cmd)}")
        result = run_process(cmd, cwd=self.cwd, timeout=GH_TIMEOUT_SECONDS)
        if isinstance(result, Err):
            if _is_not_found(result.error):
                return Ok(RemoteRelease.absent(tag))
            return Err(
                PublishError(
                    kind="network",
                    message=f"failed to look up release {tag} in {self.repo}",
                    hint=result.error.stderr.strip() or None,
                )
            )

        html_url: str | None = None
        try:
            data = as_str_dict(json.loads(result.value))
        except json.JSONDecodeError:
            data = None
        if data is not None:
            html_url = get_str(data, "url")
        return Ok(RemoteRelease(tag=tag, state=ReleaseState.PRESENT, html_url=html_url))

    def create_release(
        self,
        *,
        tag: str,
        title: str,
        notes: str,
        assets: Sequence[ReleaseAsset],
    ) -> Result[RemoteRelease, PublishError]:
        args = ["release", "create", tag, *(str(a.path) for a in assets)]
        args += ["--title", title, "--notes", notes]
        result = self._gh(
            args,
            kind="release_create_failed",
            message=f"failed to create release {tag}",
            timeout=GH_UPLOAD_TIMEOUT_SECONDS,
        )
        if isinstance(result, Err):
            return result
        return Ok(RemoteRelease(tag=tag, state=ReleaseState.PRESENT))

    def upload_asset(self, release: RemoteRelease, asset: ReleaseAsset) -> Result[None, PublishError]:
        result = self._gh(
            ["release", "upload", release.tag, str(asset.path), "--clobber"],
            kind="upload_failed",
            message=f"failed to upload {asset.name}",
            timeout=GH_UPLOAD_TIMEOUT_SECONDS,
        )
        if isinstance(result, Err):
            return result
        return Ok(None)

    def update_release(
        self,
        release: RemoteRelease,
        *,
        title: str | None,
        notes: str | None,
    ) -> Result[None, PublishError]:
        args = ["release", "edit", release.tag]
        if title is not None:
            args += ["--title", title]
        if notes is not None:
            args += ["--notes", notes]
        result = self._gh(args, kind="network", message=f"failed to edit release {release.tag}")
        if isinstance(result, Err):
            return result
        return Ok(None)

    def release_url(self, release: RemoteRelease) -> Result[str, PublishError]:
        result = self._gh(
            ["release", "view", release.tag, "--json", "url", "--jq", ".url"],
            kind="network",
            message=f"failed to query URL of release {release.tag}",
        )
        if isinstance(result, Err):
            return result
        url = result.value.strip()
        if not url:
            return Err(
                PublishError(kind="network", message=f"gh returned no URL for {release.tag}")
            )
        return Ok(url)
