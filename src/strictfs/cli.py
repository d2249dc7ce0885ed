"""CLI commands using Typer."""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from typing import TYPE_CHECKING, Annotated

import typer

from strictfs import __version__
from strictfs.console import ConsoleOutput, configure_logging
from strictfs.context import create_context
from strictfs.errors import FilesystemError

if TYPE_CHECKING:
    from strictfs.context import AppContext

app = typer.Typer(
    name="strictfs",
    help="Filesystem operations that fail loudly",
    no_args_is_help=True,
)

config_app = typer.Typer(help="Configuration commands")

app.add_typer(config_app, name="config")

output = ConsoleOutput()


def version_callback(value: bool) -> None:
    """Show version and exit."""
    if value:
        output.show_info(f"strictfs v{__version__}")
        raise typer.Exit()


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
    verbose: Annotated[
        bool, typer.Option("--verbose", "-v", help="Log every filesystem operation")
    ] = False,
) -> None:
    """Filesystem operations that fail loudly."""
    configure_logging(verbose)


@contextmanager
def _reporting_errors() -> Iterator[None]:
    """Turn filesystem errors into an error line and exit code 1."""
    try:
        yield
    except FilesystemError as e:
        output.show_error(e.message)
        raise typer.Exit(1) from e


def _parse_mode(value: str) -> int:
    """Parse an octal permission string such as ``755`` or ``0o755``."""
    try:
        mode = int(value, 8)
    except ValueError as e:
        raise typer.BadParameter(f"'{value}' is not an octal mode") from e
    if not 0 <= mode <= 0o7777:
        raise typer.BadParameter(f"'{value}' is out of range")
    return mode


# ============================================================================
# Path Commands
# ============================================================================


@app.command("resolve")
def resolve(
    path: Annotated[str, typer.Argument(help="Path to resolve")],
    relative_to: Annotated[
        str | None, typer.Option("--relative-to", "-r", help="Base directory (default: cwd)")
    ] = None,
    _context=None,
) -> None:
    """Print the canonical absolute form of a path."""
    ctx: AppContext = _context or create_context()
    output.show_info(ctx.filesystem.resolve_path(path, relative_to))


@app.command("exists")
def exists(
    path: Annotated[str, typer.Argument(help="Path to check")],
    _context=None,
) -> None:
    """Exit with status 0 if the path points to anything, 1 otherwise."""
    ctx: AppContext = _context or create_context()
    resolved = ctx.filesystem.resolve_path(path)
    if not ctx.filesystem.path_exists(resolved):
        output.show_error(f"'{resolved}' does not exist")
        raise typer.Exit(1)
    output.show_success(f"'{resolved}' exists")


@app.command("check")
def check(
    path: Annotated[str, typer.Argument(help="Path to check")],
    is_file: Annotated[bool, typer.Option("--file", help="Require a regular file")] = False,
    is_directory: Annotated[bool, typer.Option("--directory", help="Require a directory")] = False,
    readable: Annotated[bool, typer.Option("--readable", help="Require read permission")] = False,
    writable: Annotated[bool, typer.Option("--writable", help="Require write permission")] = False,
    writable_file: Annotated[
        bool, typer.Option("--writable-file", help="Require that a file can be written here")
    ] = False,
    _context=None,
) -> None:
    """Assert preconditions on a path; existence is checked when nothing else is asked."""
    ctx: AppContext = _context or create_context()
    fs = ctx.filesystem
    resolved = fs.resolve_path(path)

    with _reporting_errors():
        if writable_file:
            fs.assert_writable_file(resolved)
        if not (is_file or is_directory or readable or writable or writable_file):
            fs.assert_exists(resolved)
        if is_file:
            fs.assert_is_file(resolved)
        if is_directory:
            fs.assert_is_directory(resolved)
        if readable:
            fs.assert_readable(resolved)
        if writable:
            fs.assert_writable(resolved)

    output.show_success(f"'{resolved}' passed all checks")


# ============================================================================
# File Commands
# ============================================================================


@app.command("read")
def read(
    path: Annotated[str, typer.Argument(help="File to read")],
    _context=None,
) -> None:
    """Write a file's exact bytes to stdout."""
    ctx: AppContext = _context or create_context()
    with _reporting_errors():
        data = ctx.filesystem.read_file(path)
    typer.echo(data, nl=False)


@app.command("write")
def write(
    path: Annotated[str, typer.Argument(help="File to write")],
    data: Annotated[
        str | None, typer.Option("--data", "-d", help="Content to write (default: stdin)")
    ] = None,
    _context=None,
) -> None:
    """Atomically replace a file's content."""
    ctx: AppContext = _context or create_context()
    payload = data if data is not None else typer.get_binary_stream("stdin").read()
    with _reporting_errors():
        written = ctx.filesystem.write_file(path, payload)
    output.show_success(f"Wrote {written} bytes to '{ctx.filesystem.resolve_path(path)}'")


@app.command("rename")
def rename(
    source: Annotated[str, typer.Argument(help="Path to rename")],
    destination: Annotated[str, typer.Argument(help="New path")],
    _context=None,
) -> None:
    """Rename a file or directory."""
    ctx: AppContext = _context or create_context()
    # the source no longer resolves through links once it has moved
    resolved_source = ctx.filesystem.resolve_path(source)
    with _reporting_errors():
        ctx.filesystem.rename(source, destination)
    output.show_success(
        f"Renamed '{resolved_source}' to '{ctx.filesystem.resolve_path(destination)}'"
    )


@app.command("chmod")
def chmod(
    path: Annotated[str, typer.Argument(help="File or directory")],
    mode: Annotated[int, typer.Argument(help="Octal mode, e.g. 755", parser=_parse_mode)],
    _context=None,
) -> None:
    """Change the permissions of a file or directory."""
    ctx: AppContext = _context or create_context()
    with _reporting_errors():
        ctx.filesystem.chmod(path, mode)
    output.show_success(f"Changed mode of '{ctx.filesystem.resolve_path(path)}' to {mode:04o}")


# ============================================================================
# Config Commands
# ============================================================================


@config_app.command("show")
def config_show(
    _context=None,
) -> None:
    """Show current configuration."""
    ctx: AppContext = _context or create_context()
    manager = ctx.settings_manager
    try:
        with _reporting_errors():
            settings = manager.load()
    except ValueError as e:
        output.show_error(str(e))
        raise typer.Exit(1) from e
    output.show_settings(settings, str(manager.config_file))


@config_app.command("set")
def config_set(
    key: Annotated[str, typer.Argument(help="Configuration key")],
    value: Annotated[str, typer.Argument(help="Configuration value")],
    _context=None,
) -> None:
    """Set a configuration value."""
    ctx: AppContext = _context or create_context()
    try:
        with _reporting_errors():
            ctx.settings_manager.set_value(key, value)
    except ValueError as e:
        output.show_error(str(e))
        raise typer.Exit(1) from e
    output.show_success(f"Set {key} to {value}")


if __name__ == "__main__":
    app()
