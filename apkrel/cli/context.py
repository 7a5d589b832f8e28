from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

import typer

from apkrel.core.config import PublishConfig, load_publish_config
from apkrel.core.errors import ErrorCode
from apkrel.core.result import Err
from apkrel.output.console import ConsoleProtocol, RichConsole


@dataclass(frozen=True, slots=True)
class CLIContext:
    cwd: Path
    config: PublishConfig
    console: ConsoleProtocol


def build_context(*, config_path: Path | None = None, verbose: bool = False) -> CLIContext:
    console = RichConsole(verbose=verbose)
    cwd = Path.cwd()

    loaded = load_publish_config(cwd=cwd, env=os.environ, path=config_path)
    if isinstance(loaded, Err):
        console.error(loaded.error.message)
        raise typer.Exit(code=int(ErrorCode.USAGE_ERROR))

    return CLIContext(cwd=cwd, config=loaded.value, console=console)
