"""Backend-neutral release publishing.

``ReleasePublisher`` is implemented by ``GhCliPublisher`` (GitHub CLI) and
``RestApiPublisher`` (REST API with a token). One of them is chosen once,
up front, by ``select_publisher``; the publish flow in ``service`` never
branches on which backend it talks to.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from pathlib import Path
from typing import Literal, Protocol

from apkrel.core.config import PublishConfig
from apkrel.core.result import Err, Ok, Result
from apkrel.net.http import HttpClient, RealHttpClient
from apkrel.output.console import ConsoleProtocol
from apkrel.platform.process import which
from apkrel.services.release.errors import PublishError
from apkrel.services.release.model import ReleaseAsset, RemoteRelease

Backend = Literal["auto", "gh", "api"]


class ReleasePublisher(Protocol):
    """Operations the publish flow needs from a backend."""

    name: str
    # True when create_release uploads the assets itself.
    attaches_assets_on_create: bool

    def find_release(self, tag: str) -> Result[RemoteRelease, PublishError]:
        """Return the release for ``tag``; ABSENT when there is none."""
        ...

    def create_release(
        self,
        *,
        tag: str,
        title: str,
        notes: str,
        assets: Sequence[ReleaseAsset],
    ) -> Result[RemoteRelease, PublishError]:
        """Create a published (non-draft, non-prerelease) release."""
        ...

    def upload_asset(self, release: RemoteRelease, asset: ReleaseAsset) -> Result[None, PublishError]:
        """Upload one asset, replacing any existing asset with the same name."""
        ...

    def update_release(
        self,
        release: RemoteRelease,
        *,
        title: str | None,
        notes: str | None,
    ) -> Result[None, PublishError]:
        """Patch only the fields that are not None."""
        ...

    def release_url(self, release: RemoteRelease) -> Result[str, PublishError]: ...


def select_publisher(
    backend: Backend,
    *,
    repo: str,
    config: PublishConfig,
    cwd: Path,
    console: ConsoleProtocol,
    which_fn: Callable[[str], str | None] | None = None,
    http: HttpClient | None = None,
) -> Result[ReleasePublisher, PublishError]:
    """Pick the backend: gh when installed, else the REST API.

    ``backend`` forces one of them. The REST API needs ``config.token``.
    """
    from apkrel.services.release.api import RestApiPublisher
    from apkrel.services.release.gh import GhCliPublisher

    gh_path = (which_fn or which)("gh")

    if backend == "gh" or (backend == "auto" and gh_path is not None):
        if gh_path is None:
            return Err(
                PublishError(
                    kind="usage",
                    message="--backend gh was requested but the gh CLI is not installed.",
                    hint="Install GitHub CLI: https://cli.github.com/",
                )
            )
        return Ok(GhCliPublisher(repo=repo, cwd=cwd, console=console))

    if not config.token:
        return Err(
            PublishError(
                kind="missing_credential",
                message="gh CLI not found and GITHUB_TOKEN is not set.",
                hint="Install gh or set GITHUB_TOKEN to use the API fallback.",
            )
        )

    client = http or RealHttpClient(token=config.token, timeout=config.http.timeout)
    return Ok(RestApiPublisher(repo=repo, config=config, http=client, console=console))


def describe_backend(publisher: ReleasePublisher) -> str:
    if publisher.name == "gh":
        return "Using gh (GitHub CLI) to create/update release and upload assets."
    return "Using the GitHub REST API to create/update release and upload assets."
