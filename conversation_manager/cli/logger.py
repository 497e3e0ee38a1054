"""Progress output for CLI commands (LoggerProtocol)."""

from __future__ import annotations

import typer


class CLILogger:
    """
    Print store progress to the terminal.

    Info lines (backups taken, files deleted or repaired) only appear with
    --verbose. Warnings and errors always go to stderr.
    """

    def __init__(self, verbose: bool = False) -> None:
        self.verbose = verbose

    async def info(self, message: str) -> None:
        if self.verbose:
            typer.secho(f'  {message}', dim=True)

    async def warning(self, message: str) -> None:
        typer.secho(f'Warning: {message}', fg=typer.colors.YELLOW, err=True)

    async def error(self, message: str) -> None:
        typer.secho(f'Error: {message}', fg=typer.colors.RED, err=True)
