"""Git integration (read-only)."""

from .repository import GitError, Repository, is_repo_slug, parse_repo_slug

__all__ = [
    "GitError",
    "Repository",
    "is_repo_slug",
    "parse_repo_slug",
]
