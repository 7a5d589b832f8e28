from __future__ import annotations

from collections.abc import Sequence

import click
import typer

from apkrel.cli.commands.publish import publish
from apkrel.core.errors import ErrorCode


app = typer.Typer(
    add_completion=False,
    no_args_is_help=False,
    rich_markup_mode="rich",
    context_settings={"help_option_names": ["-h", "--help"]},
)

# Single command: `apk-release -t TAG -a GLOB ...`
app.command()(publish)


def main(argv: Sequence[str] | None = None) -> None:
    """Console entry point.

    Click reports parse errors (unknown flag, missing value) with exit 2,
    which here means "repository unresolved"; they are remapped to the
    usage exit code.
    """
    try:
        code = app(args=argv, prog_name="apk-release", standalone_mode=False)
    except click.UsageError as e:
        e.show()
        raise SystemExit(int(ErrorCode.USAGE_ERROR)) from None
    except click.Abort:
        typer.echo("Aborted.", err=True)
        raise SystemExit(130) from None
    raise SystemExit(code if isinstance(code, int) else int(ErrorCode.OK))
