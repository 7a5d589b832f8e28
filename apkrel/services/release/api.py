"""Release backend talking to the GitHub REST API directly.

Used when ``gh`` is not installed. Needs a token with write access to
releases (``GITHUB_TOKEN`` or ``GH_TOKEN``).
"""

from __future__ import annotations

from collections.abc import Sequence
from urllib.parse import quote

from apkrel.core.config import PublishConfig
from apkrel.core.result import Err, Ok, Result
from apkrel.core.structured import as_obj_list, as_str_dict, get_str
from apkrel.net.http import HttpClient, HttpError
from apkrel.output.console import ConsoleProtocol
from apkrel.services.release.errors import PublishError, PublishErrorKind
from apkrel.services.release.model import ReleaseAsset, ReleaseState, RemoteRelease

# Single page; releases with more assets than this are out of scope.
_ASSETS_PER_PAGE = 100


def _http_error(kind: PublishErrorKind, message: str, error: HttpError) -> PublishError:
    return PublishError(kind=kind, message=f"{message} ({error})", hint=error.body.strip() or None)


def _release_from_payload(tag: str, data: object) -> RemoteRelease | None:
    payload = as_str_dict(data)
    if payload is None:
        return None
    release_id = payload.get("id")
    if isinstance(release_id, bool) or not isinstance(release_id, int):
        return None
    return RemoteRelease(
        tag=tag,
        state=ReleaseState.PRESENT,
        release_id=release_id,
        upload_url=get_str(payload, "upload_url"),
        html_url=get_str(payload, "html_url"),
    )


class RestApiPublisher:
    name = "api"
    attaches_assets_on_create = False

    def __init__(
        self,
        *,
        repo: str,
        config: PublishConfig,
        http: HttpClient,
        console: ConsoleProtocol,
    ) -> None:
        self.repo = repo
        self.config = config
        self.http = http
        self.console = console
        # Asset name -> id, per release id; filled lazily for clobbering.
        self._assets: dict[int, dict[str, int]] = {}

    @property
    def _releases_url(self) -> str:
        return f"{self.config.github.api_url}/repos/{self.repo}/releases"

    def find_release(self, tag: str) -> Result[RemoteRelease, PublishError]:
        url = f"{self._releases_url}/tags/{quote(tag, safe='')}"
        self.console.debug(f"GET {url}")
        result = self.http.request_json("GET", url)
        if isinstance(result, Err):
            if result.error.status == 404:
                return Ok(RemoteRelease.absent(tag))
            return Err(_http_error("network", f"failed to look up release {tag}", result.error))

        release = _release_from_payload(tag, result.value.data)
        if release is None:
            return Err(
                PublishError(kind="network", message=f"unexpected release payload for {tag}")
            )
        return Ok(release)

    def create_release(
        self,
        *,
        tag: str,
        title: str,
        notes: str,
        assets: Sequence[ReleaseAsset],
    ) -> Result[RemoteRelease, PublishError]:
        del assets  # uploaded one by one after creation
        payload: dict[str, object] = {
            "tag_name": tag,
            "name": title,
            "body": notes,
            "draft": False,
            "prerelease": False,
        }
        self.console.debug(f"POST {self._releases_url}")
        result = self.http.request_json("POST", self._releases_url, payload)
        if isinstance(result, Err):
            return Err(
                _http_error("release_create_failed", "Failed to create release", result.error)
            )

        release = _release_from_payload(tag, result.value.data)
        if release is None or release.release_id is None:
            return Err(
                PublishError(
                    kind="release_create_failed",
                    message="Failed to create release: no release id in response",
                    hint=repr(result.value.data),
                )
            )
        self._assets[release.release_id] = {}
        return Ok(release)

    def _upload_base(self, release: RemoteRelease) -> str:
        if release.upload_url:
            # e.g. https://uploads.github.com/repos/o/r/releases/1/assets{?name,label}
            return release.upload_url.split("{", 1)[0]
        return f"{self.config.github.uploads_url}/repos/{self.repo}/releases/{release.release_id}/assets"

    def _existing_assets(self, release_id: int) -> Result[dict[str, int], PublishError]:
        cached = self._assets.get(release_id)
        if cached is not None:
            return Ok(cached)

        url = f"{self._releases_url}/{release_id}/assets?per_page={_ASSETS_PER_PAGE}"
        self.console.debug(f"GET {url}")
        result = self.http.request_json("GET", url)
        if isinstance(result, Err):
            return Err(_http_error("upload_failed", "failed to list release assets", result.error))

        assets: dict[str, int] = {}
        for item in as_obj_list(result.value.data) or []:
            entry = as_str_dict(item)
            if entry is None:
                continue
            name = get_str(entry, "name")
            asset_id = entry.get("id")
            if name and isinstance(asset_id, int) and not isinstance(asset_id, bool):
                assets[name] = asset_id
        self._assets[release_id] = assets
        return Ok(assets)

    def upload_asset(self, release: RemoteRelease, asset: ReleaseAsset) -> Result[None, PublishError]:
        if release.release_id is None:
            return Err(PublishError(kind="upload_failed", message=f"release {release.tag} has no id"))

        existing = self._existing_assets(release.release_id)
        if isinstance(existing, Err):
            return existing

        asset_id = existing.value.get(asset.name)
        if asset_id is not None:
            url = f"{self.config.github.api_url}/repos/{self.repo}/releases/assets/{asset_id}"
            self.console.debug(f"DELETE {url}")
            deleted = self.http.request_json("DELETE", url)
            if isinstance(deleted, Err):
                return Err(
                    _http_error("upload_failed", f"failed to replace {asset.name}", deleted.error)
                )
            del existing.value[asset.name]

        url = f"{self._upload_base(release)}?name={quote(asset.name, safe='')}"
        self.console.debug(f"POST {url} ({asset.content_type})")
        uploaded = self.http.upload_file(url, asset.path, asset.content_type)
        if isinstance(uploaded, Err):
            return Err(_http_error("upload_failed", f"failed to upload {asset.name}", uploaded.error))

        data = as_str_dict(uploaded.value.data)
        new_id = data.get("id") if data is not None else None
        if isinstance(new_id, int) and not isinstance(new_id, bool):
            existing.value[asset.name] = new_id
        return Ok(None)

    def update_release(
        self,
        release: RemoteRelease,
        *,
        title: str | None,
        notes: str | None,
    ) -> Result[None, PublishError]:
        payload: dict[str, object] = {}
        if title is not None:
            payload["name"] = title
        if notes is not None:
            payload["body"] = notes

        url = f"{self._releases_url}/{release.release_id}"
        self.console.debug(f"PATCH {url}")
        result = self.http.request_json("PATCH", url, payload)
        if isinstance(result, Err):
            return Err(_http_error("network", f"failed to edit release {release.tag}", result.error))
        return Ok(None)

    def release_url(self, release: RemoteRelease) -> Result[str, PublishError]:
        return Ok(f"{self.config.github.web_url}/{self.repo}/releases/tag/{release.tag}")
