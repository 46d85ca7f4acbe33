#!/usr/bin/env python3
"""
conf2json.cli.cli

Typer-based CLI for converting PHP configuration files to JSON.

Examples
--------
Convert a directory tree, printing progress:

    conf2json convert config/ build/json --verbose

Convert only the top level, without indentation:

    conf2json convert config/ build/json --no-recursive --compact

Print the JSON for one file:

    conf2json show config/app.php
"""

from __future__ import annotations

import logging
import traceback
from pathlib import Path

import typer

from conf2json.errors import ConversionError

app = typer.Typer(
    name="conf2json",
    help="Convert PHP configuration files to JSON.",
    no_args_is_help=True,
)

PRETTY_HELP = "Indent JSON output with tabs (--compact for minimal JSON)."


def _print_conversion_error(exc: Exception, debug: bool) -> int:
    """Print a user-friendly conversion error.

    Parameters
    ----------
    exc : Exception
        Exception raised during conversion.
    debug : bool
        Whether to include traceback details.

    Returns
    -------
    int
        Process exit code.
    """
    typer.echo(f"✗ {type(exc).__name__}: {exc}", err=True)
    if debug:
        typer.echo("\nTraceback:", err=True)
        typer.echo("".join(traceback.format_exception(type(exc), exc, exc.__traceback__)), err=True)
    code = getattr(exc, "exit_code", None)
    if isinstance(code, int) and code > 0:
        return code
    return 1


# -----------------------------
# Global options
# -----------------------------
@app.callback()
def _main(
    ctx: typer.Context,
    debug: bool = typer.Option(False, "--debug", help="Show full tracebacks and debug logs."),
) -> None:
    """Initialize shared CLI state.

    Parameters
    ----------
    ctx : typer.Context
        Typer context object used to store shared state.
    debug : bool, default=False
        Whether to enable debug error output.
    """
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    ctx.obj = {"debug": debug}


# -----------------------------
# Commands
# -----------------------------
@app.command("convert")
def convert_cmd(
    ctx: typer.Context,
    input_path: Path = typer.Argument(
        Path("."),
        help="PHP file or directory holding the files to convert.",
    ),
    output_path: Path = typer.Argument(
        Path("."),
        help="Directory where JSON files are written (created if missing).",
    ),
    pretty: bool = typer.Option(True, "--pretty/--compact", help=PRETTY_HELP),
    recursive: bool = typer.Option(
        True,
        "--recursive/--no-recursive",
        help="Convert files in subdirectories of a directory input.",
    ),
    verbose: bool = typer.Option(
        False, "--verbose", "-v", help="Print progress and a completion summary."
    ),
) -> None:
    """Convert a PHP file or directory tree to JSON files.

    Parameters
    ----------
    ctx : typer.Context
        Typer context containing global options.
    input_path : Path
        PHP file or directory to convert.
    output_path : Path
        Destination directory mirroring the input layout.
    pretty : bool, default=True
        Whether to tab-indent the output.
    recursive : bool, default=True
        Whether to descend into subdirectories.
    verbose : bool, default=False
        Whether to print per-file progress.

    Notes
    -----
    - Exits with 0 when there is nothing to convert.
    """
    debug: bool = bool(ctx.obj.get("debug", False))

    try:
        from conf2json.api import convert_to_json

        convert_to_json(
            input_path=input_path,
            output_path=output_path,
            pretty=pretty,
            recursive=recursive,
            verbose=verbose,
        )
    except ConversionError as exc:
        raise typer.Exit(code=_print_conversion_error(exc, debug))
    except Exception as exc:
        # Unexpected crash: still show a clean message; debug prints traceback.
        raise typer.Exit(code=_print_conversion_error(exc, debug))


@app.command("show")
def show_cmd(
    ctx: typer.Context,
    source_path: Path = typer.Argument(
        ...,
        exists=True,
        dir_okay=False,
        readable=True,
        help="PHP configuration file to evaluate.",
    ),
    pretty: bool = typer.Option(True, "--pretty/--compact", help=PRETTY_HELP),
) -> None:
    """Print the JSON produced by one PHP configuration file."""
    debug: bool = bool(ctx.obj.get("debug", False))

    try:
        from conf2json.api import render_file

        typer.echo(render_file(source_path, pretty=pretty))
    except ConversionError as exc:
        raise typer.Exit(code=_print_conversion_error(exc, debug))
    except Exception as exc:
        raise typer.Exit(code=_print_conversion_error(exc, debug))


if __name__ == "__main__":
    app()
