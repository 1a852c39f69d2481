"""CLI commands using Typer."""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING, Annotated

if TYPE_CHECKING:
    from iofs.context import AppContext

import typer
from rich.console import Console
from rich.logging import RichHandler

from iofs import __version__
from iofs.config import Settings
from iofs.context import create_context
from iofs.console import Display
from iofs.errors import ConfigurationError
from iofs.types import AccessMode, OperationOutcome

app = typer.Typer(
    name="iofs",
    help="Asynchronous filesystem utilities",
    no_args_is_help=True,
)

console = Console()
err_console = Console(stderr=True)
display = Display(console)

_ACCESS_LETTERS = {
    "f": AccessMode.EXISTS,
    "r": AccessMode.READ,
    "w": AccessMode.WRITE,
    "x": AccessMode.EXECUTE,
}


def version_callback(value: bool) -> None:
    """Show version and exit."""
    if value:
        console.print(f"iofs v{__version__}")
        raise typer.Exit()


def _configure_logging(verbose: bool) -> None:
    """Route library logs to stderr through Rich."""
    try:
        level = Settings.from_env().log_level
    except ConfigurationError:
        # Reported by the command itself when it builds its context.
        level = "WARNING"
    if verbose:
        level = "DEBUG"
    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[RichHandler(console=err_console, show_path=False)],
        force=True,
    )


@app.callback()
def main(
    version: Annotated[
        bool,
        typer.Option(
            "--version",
            "-V",
            callback=version_callback,
            is_eager=True,
            help="Show version and exit",
        ),
    ] = False,
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Log debug details")] = False,
) -> None:
    """Asynchronous filesystem utilities."""
    _configure_logging(verbose)


# ============================================================================
# Helpers
# ============================================================================


def _get_context(context: AppContext | None) -> AppContext:
    """Return the injected context or build the production one."""
    if context is not None:
        return context
    try:
        return create_context()
    except ConfigurationError as e:
        display.show_error(f"Invalid configuration: {e}")
        raise typer.Exit(1) from e


def _parse_octal(value: str) -> int:
    """Parse permission bits such as ``755`` or ``0o755``."""
    try:
        return int(value, 8)
    except ValueError as e:
        raise typer.BadParameter(f"'{value}' is not an octal mode") from e


def _parse_access(value: str) -> AccessMode:
    """Parse access letters such as ``rw`` into an AccessMode."""
    mode = AccessMode.EXISTS
    for letter in value.lower():
        if letter not in _ACCESS_LETTERS:
            raise typer.BadParameter(f"unknown access letter '{letter}', use f, r, w or x")
        mode |= _ACCESS_LETTERS[letter]
    return mode


def _finish(outcome: OperationOutcome, action: str) -> None:
    """Show an outcome and exit non-zero on failure."""
    display.show_outcome(outcome, action)
    if not outcome:
        raise typer.Exit(1)


# ============================================================================
# Read Commands
# ============================================================================


@app.command("cat")
def cat(
    path: Annotated[str, typer.Argument(help="File to read")],
    encoding: Annotated[
        str | None, typer.Option("--encoding", "-e", help="Decode with this encoding")
    ] = None,
    _context=None,
) -> None:
    """Print a file's content."""
    ctx = _get_context(_context)
    content = asyncio.run(ctx.filesystem.cat(path, encoding))
    if content is None:
        display.show_error(f"Cannot read {path}")
        raise typer.Exit(1)
    typer.echo(content, nl=False)


@app.command("ls")
def ls(
    path: Annotated[str, typer.Argument(help="Directory to list")] = ".",
    recursive: Annotated[
        bool, typer.Option("--recursive", "-r", help="List subdirectories too")
    ] = False,
    _context=None,
) -> None:
    """List a directory as absolute paths."""
    ctx = _get_context(_context)
    entries = asyncio.run(ctx.filesystem.ls(path, recursive))
    if entries is None:
        display.show_error(f"Cannot list {path}")
        raise typer.Exit(1)
    display.show_paths(entries)


@app.command("stat")
def stat(
    path: Annotated[str, typer.Argument(help="Path to probe")],
    no_follow: Annotated[
        bool, typer.Option("--no-follow", "-L", help="Do not follow symlinks")
    ] = False,
    _context=None,
) -> None:
    """Show a path's type and metadata."""
    ctx = _get_context(_context)
    probe = ctx.filesystem.lstat if no_follow else ctx.filesystem.stat
    result = asyncio.run(probe(path))
    display.show_stat(result)
    if not result.exists:
        raise typer.Exit(1)


@app.command("exists")
def exists(
    path: Annotated[str, typer.Argument(help="Path to check")],
    _context=None,
) -> None:
    """Exit 0 if the path exists, 1 otherwise."""
    ctx = _get_context(_context)
    if not asyncio.run(ctx.filesystem.exists(path)):
        display.show_warning(f"{path} does not exist")
        raise typer.Exit(1)
    display.show_success(f"{path} exists")


@app.command("access")
def access(
    path: Annotated[str, typer.Argument(help="Path to check")],
    mode: Annotated[str, typer.Option("--mode", "-m", help="Letters from f, r, w, x")] = "r",
    _context=None,
) -> None:
    """Exit 0 if the current user has the given access to the path."""
    ctx = _get_context(_context)
    access_mode = _parse_access(mode)
    if not asyncio.run(ctx.filesystem.is_(path, access_mode)):
        display.show_warning(f"No '{mode}' access to {path}")
        raise typer.Exit(1)
    display.show_success(f"'{mode}' access to {path}")


# ============================================================================
# Write Commands
# ============================================================================


@app.command("echo")
def echo(
    data: Annotated[str, typer.Argument(help="Text to write")],
    file: Annotated[str | None, typer.Argument(help="Target file (prints data when omitted)")] = None,
    append: Annotated[bool, typer.Option("--append", "-a", help="Append instead of truncating")] = False,
    encoding: Annotated[
        str | None, typer.Option("--encoding", "-e", help="Text encoding")
    ] = None,
    _context=None,
) -> None:
    """Write text to a file, creating missing directories."""
    ctx = _get_context(_context)
    result = asyncio.run(ctx.filesystem.echo(data, file, append, encoding))
    if file is None:
        typer.echo(result)
        return
    _finish(result, "Wrote")


@app.command("mkdir")
def mkdir(
    path: Annotated[str, typer.Argument(help="Directory to create")],
    mode: Annotated[
        str | None, typer.Option("--mode", "-m", help="Octal permission bits")
    ] = None,
    _context=None,
) -> None:
    """Create a directory and any missing parents."""
    ctx = _get_context(_context)
    bits = _parse_octal(mode) if mode is not None else None
    _finish(asyncio.run(ctx.filesystem.mkdir(path, bits)), "Created")


@app.command("cp")
def cp(
    origin: Annotated[str, typer.Argument(help="File or directory to copy")],
    target: Annotated[str, typer.Argument(help="Destination path")],
    _context=None,
) -> None:
    """Copy a file or directory tree."""
    ctx = _get_context(_context)
    _finish(asyncio.run(ctx.filesystem.cp(origin, target)), "Copied to")


@app.command("mv")
def mv(
    origin: Annotated[str, typer.Argument(help="Path to move")],
    target: Annotated[str, typer.Argument(help="Destination path")],
    _context=None,
) -> None:
    """Move or rename a file or directory tree."""
    ctx = _get_context(_context)
    _finish(asyncio.run(ctx.filesystem.mv(origin, target)), "Moved to")


@app.command("rm")
def rm(
    path: Annotated[str, typer.Argument(help="File or directory to delete")],
    _context=None,
) -> None:
    """Delete a file or directory tree."""
    ctx = _get_context(_context)
    _finish(asyncio.run(ctx.filesystem.rm(path)), "Removed")


@app.command("chmod")
def chmod(
    path: Annotated[str, typer.Argument(help="Path to change")],
    mode: Annotated[str, typer.Argument(help="Octal permission bits")],
    _context=None,
) -> None:
    """Change permission bits."""
    ctx = _get_context(_context)
    _finish(asyncio.run(ctx.filesystem.chmod(path, _parse_octal(mode))), "Changed mode of")


@app.command("chown")
def chown(
    path: Annotated[str, typer.Argument(help="Path to change")],
    uid: Annotated[int, typer.Argument(help="Owner user id (-1 keeps it)")],
    gid: Annotated[int, typer.Argument(help="Owner group id (-1 keeps it)")],
    _context=None,
) -> None:
    """Change owner and group."""
    ctx = _get_context(_context)
    _finish(asyncio.run(ctx.filesystem.chown(path, uid, gid)), "Changed owner of")


if __name__ == "__main__":
    app()
