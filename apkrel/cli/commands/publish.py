"""Publish command - create or update a GitHub Release and upload APKs."""

from __future__ import annotations

from enum import StrEnum
from pathlib import Path
from typing import NoReturn, cast

import typer

from apkrel import __version__
from apkrel.cli.commands._helpers import unwrap_or_exit
from apkrel.cli.context import build_context
from apkrel.core.errors import ErrorCode
from apkrel.output.console import Style
from apkrel.services.release.archive import create_archive
from apkrel.services.release.artifacts import collect_artifacts, display_path, split_patterns
from apkrel.services.release.model import ArchiveArtifact, ReleaseRequest
from apkrel.services.release.publisher import Backend, describe_backend, select_publisher
from apkrel.services.release.repo import resolve_repo
from apkrel.services.release.service import build_assets, publish_release


class BackendChoice(StrEnum):
    auto = "auto"
    gh = "gh"
    api = "api"


def _usage_error(ctx: typer.Context, message: str) -> NoReturn:
    typer.echo(message, err=True)
    typer.echo(ctx.get_usage(), err=True)
    typer.echo(f"Try '{ctx.command_path} -h' for help.", err=True)
    raise typer.Exit(code=int(ErrorCode.USAGE_ERROR))


def _help_callback(ctx: typer.Context, value: bool) -> None:
    if not value or ctx.resilient_parsing:
        return
    # Rich help is printed directly and comes back empty.
    text = ctx.get_help()
    if text:
        typer.echo(text)
    raise typer.Exit(code=int(ErrorCode.USAGE_ERROR))


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(__version__)
        raise typer.Exit(code=0)


def _blank_to_none(value: str | None) -> str | None:
    return value if value else None


def publish(
    ctx: typer.Context,
    tag: str | None = typer.Option(
        None, "-t", "--tag", help="Release tag (required)", show_default=False
    ),
    artifacts: list[str] | None = typer.Option(
        None,
        "-a",
        "--artifacts",
        help=(
            "APK path or glob (required, repeatable). A quoted value may hold several "
            'space-separated patterns, e.g. "app/build/outputs/apk/release/*.apk"'
        ),
        show_default=False,
    ),
    create_zip: bool = typer.Option(
        False, "-z", "--zip", help="Also upload a zip of the APKs"
    ),
    repo: str | None = typer.Option(
        None,
        "-r",
        "--repo",
        envvar="REPO",
        help="Repository as owner/repo (defaults to git remote origin)",
        show_default=False,
    ),
    notes: str | None = typer.Option(
        None, "-d", "--notes", help="Release notes/body", show_default=False
    ),
    title: str | None = typer.Option(None, "--title", help="Release title", show_default=False),
    backend: BackendChoice = typer.Option(
        BackendChoice.auto, "--backend", help="gh, api, or auto (gh when installed)"
    ),
    config_path: Path | None = typer.Option(
        None,
        "--config",
        help="Config file (default: ./apk-release.toml if present)",
        show_default=False,
    ),
    keep_archive: bool = typer.Option(
        False, "--keep-archive", help="Keep the zip on disk after uploading"
    ),
    verbose: bool = typer.Option(False, "-v", "--verbose", help="Show commands and requests"),
    show_help: bool = typer.Option(
        False,
        "-h",
        "--help",
        callback=_help_callback,
        is_eager=True,
        expose_value=False,
        help="Show this message and exit (status 1).",
    ),
    version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
) -> None:
    """Create (or update) a GitHub Release for TAG and upload APKs to it."""
    if not tag or not artifacts:
        _usage_error(ctx, "Tag and APK glob are required.")
    del version, show_help

    cli = build_context(config_path=config_path, verbose=verbose)
    console = cli.console

    patterns = unwrap_or_exit(split_patterns(artifacts), cli)
    if not patterns:
        _usage_error(ctx, "Tag and APK glob are required.")

    slug = unwrap_or_exit(
        resolve_repo(explicit=repo, configured=cli.config.github.repo, cwd=cli.cwd), cli
    )
    request = ReleaseRequest(
        tag=tag,
        patterns=patterns,
        repo=slug,
        create_archive=create_zip,
        notes=_blank_to_none(notes),
        title=_blank_to_none(title),
    )

    console.print(f"Repository: {request.repo}")
    console.print(f"Tag: {request.tag}")
    console.print(f"APK pattern(s): {' '.join(request.patterns)}")
    if request.create_archive:
        console.print("Will create ZIP of APKs.")
    if request.title:
        console.print(f"Title: {request.title}")
    if request.notes:
        console.print("Notes provided.")

    found = unwrap_or_exit(collect_artifacts(request.patterns, cwd=cli.cwd), cli)
    console.print(f"Found {len(found)} APK(s):")
    for path in found:
        console.print(f"  - {display_path(path, cwd=cli.cwd)}", Style.DIM)

    archive: ArchiveArtifact | None = None
    if request.create_archive:
        archive = unwrap_or_exit(
            create_archive(
                found,
                tag=request.tag,
                out_dir=cli.cwd,
                prefix=cli.config.archive.prefix,
            ),
            cli,
        )
        console.print(f"Created ZIP: {archive.name}")

    try:
        publisher = unwrap_or_exit(
            select_publisher(
                cast(Backend, backend.value),
                repo=request.repo,
                config=cli.config,
                cwd=cli.cwd,
                console=console,
            ),
            cli,
        )
        console.print(describe_backend(publisher), Style.INFO)

        outcome = unwrap_or_exit(
            publish_release(
                request,
                assets=build_assets(found, archive),
                publisher=publisher,
                console=console,
                cwd=cli.cwd,
            ),
            cli,
        )
    finally:
        if archive is not None and not keep_archive:
            archive.path.unlink(missing_ok=True)

    console.success(f"Published {len(outcome.assets)} asset(s) to {request.tag}.")
    console.print(f"Release URL: {outcome.url}", Style.BOLD)
