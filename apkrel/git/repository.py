"""Read-only access to the local git checkout.

The publisher only needs one thing from git: the ``origin`` remote URL,
from which the ``owner/name`` slug of the GitHub repository is derived.

Usage:
    repo = Repository(Path.cwd())
    match repo.remote_url("origin"):
        case Ok(url):
            print(parse_repo_slug(url))
        case Err(e):
            print(f"Error: {e.message}")
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from pathlib import Path

from apkrel.core.result import Err, Ok, Result
from apkrel.platform.process import ProcessError
from apkrel.platform.process import run as run_process

_GIT_TIMEOUT_SECONDS = 30.0

_SLUG_RE = re.compile(r"^[A-Za-z0-9_.-]+/[A-Za-z0-9_.-]+$")
# Last two path segments, after either ':' (scp-like SSH) or '/' (URLs).
_REMOTE_TAIL_RE = re.compile(r"[:/](?P<owner>[^/:]+)/(?P<name>[^/:]+)$")

__all__ = [
    "GitError",
    "Repository",
    "is_repo_slug",
    "parse_repo_slug",
]


@dataclass(frozen=True, slots=True)
class GitError:
    """Error from a git operation.

    Attributes:
        command: The git command that failed
        message: Error message
        returncode: Process return code
    """

    command: str
    message: str
    returncode: int = 1


def is_repo_slug(value: str) -> bool:
    """True if value looks like ``owner/name``."""
    return bool(_SLUG_RE.match(value))


def parse_repo_slug(url: str) -> str | None:
    """Extract ``owner/name`` from a git remote URL.

    Handles ``git@host:owner/name.git``, ``ssh://git@host/owner/name.git``
    and ``https://host/owner/name(.git)``. Returns None when nothing usable
    is found.
    """
    text = url.strip().rstrip("/")
    if text.endswith(".git"):
        text = text[: -len(".git")]

    m = _REMOTE_TAIL_RE.search(text)
    if m is None:
        return None

    slug = f"{m.group('owner')}/{m.group('name')}"
    return slug if is_repo_slug(slug) else None


class Repository:
    """A local git working tree.

    Attributes:
        path: Directory inside the working tree
    """

    def __init__(self, path: Path) -> None:
        self.path = path

    def is_work_tree(self) -> bool:
        """True if path is inside a git working tree."""
        result = self._run(["rev-parse", "--git-dir"])
        return isinstance(result, Ok)

    def remote_url(self, name: str = "origin") -> Result[str, GitError]:
        """Get the configured URL of a remote.

        Returns:
            Ok(url) on success
            Err(GitError) if not a repository or the remote is not set
        """
        command = f"config --get remote.{name}.url"
        result = self._run(["config", "--get", f"remote.{name}.url"])
        match result:
            case Err(e):
                return Err(
                    GitError(
                        command=command,
                        message=e.stderr.strip() or f"remote '{name}' is not configured",
                        returncode=e.returncode,
                    )
                )
            case Ok(stdout):
                url = stdout.strip()
                if not url:
                    return Err(GitError(command=command, message=f"remote '{name}' has no URL"))
                return Ok(url)

    def _run(self, args: list[str]) -> Result[str, ProcessError]:
        return run_process(
            ["git", "-C", str(self.path), *args], cwd=self.path, timeout=_GIT_TIMEOUT_SECONDS
        )
