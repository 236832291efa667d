#!/usr/bin/env python3
"""
asset_inliner.cli.cli

Typer-based CLI for inlining static assets into a generated site.

Run it on the output directory of a static-site build once every HTML
document has been written.

Examples
--------
Inline everything and delete the files that were embedded:

    asset-inliner inline dist/

Keep the asset files and fail when more than two references are broken:

    asset-inliner inline dist/ --keep-assets --max-asset-failures 2
"""

from __future__ import annotations

import logging
import shutil
import sys
import traceback
from pathlib import Path

import typer

from asset_inliner.errors import InlinerError

app = typer.Typer(
    name="asset-inliner",
    help="Inline stylesheets, images and scripts into generated HTML.",
    no_args_is_help=True,
)

LOG_FORMAT = "%(levelname)s %(name)s: %(message)s"


def _print_inline_error(exc: BaseException, debug: bool) -> int:
    """Print a user-friendly pipeline error.

    Parameters
    ----------
    exc : BaseException
        Error that stopped the pipeline.
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


# Global options
# -----------------------------
@app.callback()
def _main(
    ctx: typer.Context,
    debug: bool = typer.Option(False, "--debug", help="Show full tracebacks on error."),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging."),
) -> None:
    """Initialize shared CLI state and logging."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format=LOG_FORMAT,
    )
    ctx.obj = {"debug": debug}


# -----------------------------
# Commands
# -----------------------------
@app.command("inline")
def inline_cmd(
    ctx: typer.Context,
    output_dir: Path = typer.Argument(
        ...,
        exists=True,
        file_okay=False,
        dir_okay=True,
        help="Directory holding the generated HTML documents.",
    ),
    keep_assets: bool = typer.Option(
        False,
        "--keep-assets",
        help="Keep inlined asset files instead of deleting them.",
    ),
    max_asset_failures: int | None = typer.Option(
        None,
        "--max-asset-failures",
        min=0,
        help="Fail when more asset references than this cannot be inlined.",
    ),
    cache_size: int | None = typer.Option(
        None,
        "--cache-size",
        min=1,
        help="Maximum number of cached script bundles.",
    ),
    esbuild: str | None = typer.Option(
        None,
        "--esbuild",
        help="esbuild executable (defaults to 'esbuild' on PATH).",
    ),
) -> None:
    """Inline assets into every HTML document under OUTPUT_DIR.

    Parameters
    ----------
    ctx : typer.Context
        Typer context containing global options.
    output_dir : Path
        Site output directory.
    keep_assets : bool, default=False
        Skip deletion of inlined files and empty-directory cleanup.
    max_asset_failures : int | None, default=None
        Failure threshold for unresolved references.

    Notes
    -----
    - Script bundling requires the ``esbuild`` executable.
    - Warnings never change the exit code; only a failed step does.
    """
    debug: bool = bool(ctx.obj.get("debug", False))

    try:
        from asset_inliner import inline_directory

        result = inline_directory(
            output_dir,
            delete_inlined_files=not keep_assets,
            max_asset_failures=max_asset_failures,
            cache_size=cache_size,
            esbuild_path=esbuild,
        )
    except InlinerError as exc:
        raise typer.Exit(code=_print_inline_error(exc, debug))
    except Exception as exc:
        # Unexpected crash: still show a clean message; debug prints traceback.
        raise typer.Exit(code=_print_inline_error(exc, debug))

    for warning in result.warnings:
        typer.echo(f"! {warning}", err=True)
    if result.error is not None:
        raise typer.Exit(code=_print_inline_error(result.error, debug))
    typer.echo(f"✓ Inlined assets into {len(result.emitted_files)} document(s).")


@app.command("doctor")
def doctor_cmd() -> None:
    """Print installed toolchain versions."""
    import importlib.metadata as metadata

    from asset_inliner.adapters.bundlers import ESBUILD_EXECUTABLE

    modules = [
        "beautifulsoup4",
        "pydantic",
        "typer",
    ]

    typer.echo(f"Python: {sys.version.split()[0]}")
    for module in modules:
        try:
            version = metadata.version(module)
            typer.echo(f"{module}: {version}")
        except metadata.PackageNotFoundError:
            typer.echo(f"{module}: <not installed>")

    esbuild = shutil.which(ESBUILD_EXECUTABLE)
    typer.echo(f"esbuild: {esbuild or '<not found on PATH>'}")


if __name__ == "__main__":
    app()
