from __future__ import annotations

from pathlib import Path

from apkrel.core.result import Err, Ok, Result
from apkrel.git.repository import Repository, is_repo_slug, parse_repo_slug
from apkrel.services.release.errors import PublishError

_NOT_FOUND_HINT = "Set REPO env var or pass -r owner/repo."


def resolve_repo(
    *,
    explicit: str | None,
    configured: str | None,
    cwd: Path,
) -> Result[str, PublishError]:
    """Pick the target repository.

    Order: ``-r``/``REPO`` (``explicit``), the config file, then the
    ``origin`` remote of the git checkout at ``cwd``.
    """
    for source, value in (("-r/REPO", explicit), ("config", configured)):
        if not value:
            continue
        slug = value.strip()
        if not is_repo_slug(slug):
            return Err(
                PublishError(
                    kind="usage",
                    message=f"invalid repository from {source}: {value!r}",
                    hint="Expected owner/repo, e.g. acme/widgets",
                )
            )
        return Ok(slug)

    repo = Repository(cwd)
    if not repo.is_work_tree():
        return Err(
            PublishError(
                kind="repo_unresolved",
                message="Could not infer repo: not a git repository.",
                hint=_NOT_FOUND_HINT,
            )
        )

    url = repo.remote_url("origin")
    if isinstance(url, Err):
        return Err(
            PublishError(
                kind="repo_unresolved",
                message="Could not infer repo: no origin remote.",
                hint=_NOT_FOUND_HINT,
            )
        )

    slug = parse_repo_slug(url.value)
    if slug is None:
        return Err(
            PublishError(
                kind="repo_unresolved",
                message=f"Could not infer repo from origin URL: {url.value}",
                hint=_NOT_FOUND_HINT,
            )
        )
    return Ok(slug)
