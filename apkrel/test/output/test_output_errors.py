"""Tests for apkrel.output.errors module."""

from __future__ import annotations

import pytest

from apkrel.core.errors import ErrorCode
from apkrel.output.console import MockConsole, Style
from apkrel.output.errors import print_publish_error, publish_error_exit_code
from apkrel.services.release.errors import PublishError


@pytest.mark.parametrize(
    ("kind", "code"),
    [
        ("usage", ErrorCode.USAGE_ERROR),
        ("repo_unresolved", ErrorCode.REPO_UNRESOLVED),
        ("no_artifacts", ErrorCode.NO_ARTIFACTS),
        ("archive_failed", ErrorCode.ARCHIVE_FAILED),
        ("missing_credential", ErrorCode.MISSING_CREDENTIAL),
        ("release_create_failed", ErrorCode.RELEASE_CREATE_FAILED),
        ("upload_failed", ErrorCode.UPLOAD_FAILED),
        ("network", ErrorCode.NETWORK_ERROR),
    ],
)
def test_exit_code_per_kind(kind: str, code: ErrorCode) -> None:
    error = PublishError(kind=kind, message="x")  # type: ignore[arg-type]
    assert publish_error_exit_code(error) == int(code)


def test_print_with_multiline_hint() -> None:
    console = MockConsole()
    print_publish_error(
        PublishError(kind="upload_failed", message="failed to upload a.apk", hint="line1\nline2"),
        console,
    )

    assert console.messages == ["error: failed to upload a.apk", "hint: line1", "hint: line2"]
    assert console.outputs[1].style == Style.DIM


def test_print_without_hint() -> None:
    console = MockConsole()
    print_publish_error(PublishError(kind="network", message="boom"), console)
    assert console.messages == ["error: boom"]
