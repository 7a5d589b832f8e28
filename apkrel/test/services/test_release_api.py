from __future__ import annotations

from pathlib import Path

import pytest

from apkrel.core.config import PublishConfig
from apkrel.core.result import Err, Ok
from apkrel.net.http import HttpError, HttpResponse, MockHttpClient
from apkrel.output.console import MockConsole
from apkrel.services.release.api import RestApiPublisher
from apkrel.services.release.model import (
    APK_CONTENT_TYPE,
    ZIP_CONTENT_TYPE,
    ArchiveArtifact,
    ReleaseAsset,
    ReleaseState,
    RemoteRelease,
)

API = "https://api.github.com/repos/acme/widgets"
UPLOADS = "https://uploads.github.com/repos/acme/widgets/releases/42/assets"


@pytest.fixture
def http() -> MockHttpClient:
    return MockHttpClient()


@pytest.fixture
def publisher(http: MockHttpClient) -> RestApiPublisher:
    return RestApiPublisher(
        repo="acme/widgets",
        config=PublishConfig(token="t0k"),
        http=http,
        console=MockConsole(),
    )


def _present(release_id: int = 42) -> RemoteRelease:
    return RemoteRelease(
        tag="v1.0.0",
        state=ReleaseState.PRESENT,
        release_id=release_id,
        upload_url=f"{UPLOADS}{{?name,label}}",
    )


class TestFindRelease:
    def test_404_is_absent(self, publisher: RestApiPublisher) -> None:
        assert publisher.find_release("v1.0.0") == Ok(RemoteRelease.absent("v1.0.0"))

    def test_present(self, http: MockHttpClient, publisher: RestApiPublisher) -> None:
        http.set(
            "GET",
            f"{API}/releases/tags/v1.0.0",
            HttpResponse(200, {"id": 42, "upload_url": f"{UPLOADS}{{?name,label}}"}),
        )

        assert publisher.find_release("v1.0.0") == Ok(_present())

    def test_tag_is_encoded(self, http: MockHttpClient, publisher: RestApiPublisher) -> None:
        publisher.find_release("release/1.0")

        assert http.calls[0].url == f"{API}/releases/tags/release%2F1.0"

    def test_other_error_is_fatal(self, http: MockHttpClient, publisher: RestApiPublisher) -> None:
        http.set(
            "GET",
            f"{API}/releases/tags/v1.0.0",
            HttpError(url="x", status=401, message="Unauthorized", body='{"message":"Bad credentials"}'),
        )

        result = publisher.find_release("v1.0.0")

        assert isinstance(result, Err)
        assert result.error.kind == "network"
        assert "Bad credentials" in (result.error.hint or "")


class TestCreateRelease:
    def test_payload(self, http: MockHttpClient, publisher: RestApiPublisher) -> None:
        http.set("POST", f"{API}/releases", HttpResponse(201, {"id": 42}))

        result = publisher.create_release(tag="v1.0.0", title="v1.0.0", notes="", assets=[])

        assert isinstance(result, Ok)
        assert result.value.release_id == 42
        assert http.calls[0].payload == {
            "tag_name": "v1.0.0",
            "name": "v1.0.0",
            "body": "",
            "draft": False,
            "prerelease": False,
        }

    def test_no_id_is_create_failure(self, http: MockHttpClient, publisher: RestApiPublisher) -> None:
        http.set("POST", f"{API}/releases", HttpResponse(201, {"message": "odd"}))

        result = publisher.create_release(tag="v1.0.0", title="v1.0.0", notes="", assets=[])

        assert isinstance(result, Err)
        assert result.error.kind == "release_create_failed"

    def test_http_error_is_create_failure(
        self, http: MockHttpClient, publisher: RestApiPublisher
    ) -> None:
        http.set("POST", f"{API}/releases", HttpError(url="x", status=422, message="Unprocessable"))

        result = publisher.create_release(tag="v1.0.0", title="v1.0.0", notes="", assets=[])

        assert isinstance(result, Err)
        assert result.error.kind == "release_create_failed"

    def test_new_release_uploads_without_listing(
        self, http: MockHttpClient, publisher: RestApiPublisher, tmp_path: Path
    ) -> None:
        http.set("POST", f"{API}/releases", HttpResponse(201, {"id": 42}))
        created = publisher.create_release(tag="v1.0.0", title="v1.0.0", notes="", assets=[])
        assert isinstance(created, Ok)

        publisher.upload_asset(created.value, ReleaseAsset.artifact(tmp_path / "a.apk"))

        assert http.calls_to("GET") == []
        # No upload_url in the response: falls back to the configured uploads host.
        assert http.calls[-1].url == f"{UPLOADS}?name=a.apk"


class TestUploadAsset:
    def test_name_and_content_type(
        self, http: MockHttpClient, publisher: RestApiPublisher, tmp_path: Path
    ) -> None:
        http.set("GET", f"{API}/releases/42/assets?per_page=100", HttpResponse(200, []))
        release = _present()
        apk = ReleaseAsset.artifact(tmp_path / "my app+1.apk")
        archive = ReleaseAsset.archive(ArchiveArtifact(tmp_path / "apks-v1.0.0-20240101000000Z.zip"))

        assert publisher.upload_asset(release, apk) == Ok(None)
        assert publisher.upload_asset(release, archive) == Ok(None)

        uploads = http.calls_to("POST", UPLOADS)
        assert [c.url for c in uploads] == [
            f"{UPLOADS}?name=my%20app%2B1.apk",
            f"{UPLOADS}?name=apks-v1.0.0-20240101000000Z.zip",
        ]
        assert [c.content_type for c in uploads] == [APK_CONTENT_TYPE, ZIP_CONTENT_TYPE]
        # Asset list fetched once per release.
        assert len(http.calls_to("GET", f"{API}/releases/42/assets")) == 1

    def test_clobbers_existing_asset(
        self, http: MockHttpClient, publisher: RestApiPublisher, tmp_path: Path
    ) -> None:
        http.set(
            "GET",
            f"{API}/releases/42/assets?per_page=100",
            HttpResponse(200, [{"id": 7, "name": "a.apk"}, {"id": 8, "name": "b.apk"}]),
        )

        result = publisher.upload_asset(_present(), ReleaseAsset.artifact(tmp_path / "a.apk"))

        assert result == Ok(None)
        assert [c.url for c in http.calls_to("DELETE")] == [f"{API}/releases/assets/7"]
        assert len(http.calls_to("POST", UPLOADS)) == 1

    def test_delete_failure(
        self, http: MockHttpClient, publisher: RestApiPublisher, tmp_path: Path
    ) -> None:
        http.set(
            "GET",
            f"{API}/releases/42/assets?per_page=100",
            HttpResponse(200, [{"id": 7, "name": "a.apk"}]),
        )
        http.set("DELETE", f"{API}/releases/assets/7", HttpError(url="x", status=403, message="Forbidden"))

        result = publisher.upload_asset(_present(), ReleaseAsset.artifact(tmp_path / "a.apk"))

        assert isinstance(result, Err)
        assert result.error.kind == "upload_failed"
        assert http.calls_to("POST") == []

    def test_upload_failure(
        self, http: MockHttpClient, publisher: RestApiPublisher, tmp_path: Path
    ) -> None:
        http.set("GET", f"{API}/releases/42/assets?per_page=100", HttpResponse(200, []))
        http.set("POST", f"{UPLOADS}?name=a.apk", HttpError(url="x", status=0, message="reset"))

        result = publisher.upload_asset(_present(), ReleaseAsset.artifact(tmp_path / "a.apk"))

        assert isinstance(result, Err)
        assert result.error.kind == "upload_failed"


class TestUpdateRelease:
    def test_only_supplied_fields(self, http: MockHttpClient, publisher: RestApiPublisher) -> None:
        assert publisher.update_release(_present(), title="Shiny", notes=None) == Ok(None)

        assert http.calls[-1].method == "PATCH"
        assert http.calls[-1].url == f"{API}/releases/42"
        assert http.calls[-1].payload == {"name": "Shiny"}


def test_release_url(publisher: RestApiPublisher) -> None:
    assert publisher.release_url(_present()) == Ok(
        "https://github.com/acme/widgets/releases/tag/v1.0.0"
    )


def test_release_url_uses_server_url(http: MockHttpClient) -> None:
    config = PublishConfig().with_env({"GITHUB_SERVER_URL": "https://ghe.example.com/"})
    publisher = RestApiPublisher(repo="acme/widgets", config=config, http=http, console=MockConsole())

    assert publisher.release_url(_present()) == Ok(
        "https://ghe.example.com/acme/widgets/releases/tag/v1.0.0"
    )
