"""Create-or-update flow for one release.

The flow is a two-state machine keyed on what ``find_release`` reports:

- ABSENT: create the release (title defaults to the tag, notes to ""), then
  upload the assets unless the backend attached them during creation.
- PRESENT: upload every asset with replace semantics, then patch title/notes
  only if the user supplied at least one of them.

Every step stops the flow at the first error.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path

from apkrel.core.result import Err, Ok, Result
from apkrel.output.console import ConsoleProtocol
from apkrel.services.release.artifacts import display_path
from apkrel.services.release.errors import PublishError
from apkrel.services.release.model import (
    ArchiveArtifact,
    ArtifactSet,
    ReleaseAsset,
    ReleaseRequest,
    ReleaseState,
    RemoteRelease,
)
from apkrel.services.release.publisher import ReleasePublisher


@dataclass(frozen=True, slots=True)
class PublishOutcome:
    url: str
    initial_state: ReleaseState
    assets: tuple[str, ...]
    metadata_updated: bool


def build_assets(artifacts: ArtifactSet, archive: ArchiveArtifact | None) -> tuple[ReleaseAsset, ...]:
    """Artifacts in order, then the archive."""
    assets = [ReleaseAsset.artifact(p) for p in artifacts]
    if archive is not None:
        assets.append(ReleaseAsset.archive(archive))
    return tuple(assets)


def _upload_all(
    publisher: ReleasePublisher,
    release: RemoteRelease,
    assets: Sequence[ReleaseAsset],
    *,
    console: ConsoleProtocol,
    cwd: Path,
) -> Result[None, PublishError]:
    for asset in assets:
        console.print(f"Uploading {display_path(asset.path, cwd=cwd)} as {asset.name} ...")
        uploaded = publisher.upload_asset(release, asset)
        if isinstance(uploaded, Err):
            return uploaded
    return Ok(None)


def _publish_new(
    request: ReleaseRequest,
    assets: Sequence[ReleaseAsset],
    *,
    publisher: ReleasePublisher,
    console: ConsoleProtocol,
    cwd: Path,
) -> Result[RemoteRelease, PublishError]:
    console.print(f"Creating new release {request.tag} ...")
    attach = publisher.attaches_assets_on_create
    created = publisher.create_release(
        tag=request.tag,
        title=request.release_title,
        notes=request.release_notes,
        assets=assets if attach else (),
    )
    if isinstance(created, Err):
        return created

    if not attach:
        uploaded = _upload_all(publisher, created.value, assets, console=console, cwd=cwd)
        if isinstance(uploaded, Err):
            return uploaded
    return created


def _publish_existing(
    request: ReleaseRequest,
    release: RemoteRelease,
    assets: Sequence[ReleaseAsset],
    *,
    publisher: ReleasePublisher,
    console: ConsoleProtocol,
    cwd: Path,
) -> Result[bool, PublishError]:
    console.print(f"Release {request.tag} already exists - uploading assets to existing release.")
    uploaded = _upload_all(publisher, release, assets, console=console, cwd=cwd)
    if isinstance(uploaded, Err):
        return uploaded

    if not request.wants_metadata_update:
        return Ok(False)

    console.print(f"Updating release {request.tag} metadata ...")
    updated = publisher.update_release(release, title=request.title, notes=request.notes)
    if isinstance(updated, Err):
        return updated
    return Ok(True)


def publish_release(
    request: ReleaseRequest,
    *,
    assets: Sequence[ReleaseAsset],
    publisher: ReleasePublisher,
    console: ConsoleProtocol,
    cwd: Path,
) -> Result[PublishOutcome, PublishError]:
    """Make sure the release exists with ``assets`` attached; return its URL."""
    found = publisher.find_release(request.tag)
    if isinstance(found, Err):
        return found

    release = found.value
    metadata_updated = False
    match release.state:
        case ReleaseState.ABSENT:
            created = _publish_new(request, assets, publisher=publisher, console=console, cwd=cwd)
            if isinstance(created, Err):
                return created
            release = created.value
        case ReleaseState.PRESENT:
            updated = _publish_existing(
                request, release, assets, publisher=publisher, console=console, cwd=cwd
            )
            if isinstance(updated, Err):
                return updated
            metadata_updated = updated.value

    url = publisher.release_url(release)
    if isinstance(url, Err):
        return url

    return Ok(
        PublishOutcome(
            url=url.value,
            initial_state=found.value.state,
            assets=tuple(a.name for a in assets),
            metadata_updated=metadata_updated,
        )
    )
