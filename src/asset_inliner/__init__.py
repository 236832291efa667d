"""Top-level API for inlining static assets into generated HTML."""

from __future__ import annotations

import asyncio

from asset_inliner.application.ports import Bundler
from asset_inliner.application.results import BuildResult
from asset_inliner.types import PathLike

__version__ = "0.1.0"


def inline_directory(
    output_dir: PathLike,
    *,
    delete_inlined_files: bool = True,
    max_asset_failures: int | None = None,
    cache_size: int | None = None,
    esbuild_path: str | None = None,
    bundler: Bundler | None = None,
) -> BuildResult:
    """Inline stylesheets, images and scripts into every document of a site.

    Parameters
    ----------
    output_dir : PathLike
        Directory holding the generated HTML documents and their assets.
    delete_inlined_files : bool, default=True
        Delete inlined asset files, their source maps, and directories left
        empty afterwards.
    max_asset_failures : int | None, default=None
        Fail the run once more asset references than this could not be
        inlined. ``None`` only reports them as warnings.
    cache_size : int | None, default=None
        Upper bound on cached script bundles.
    esbuild_path : str | None, default=None
        esbuild executable. Defaults to ``esbuild`` on ``PATH``.
    bundler : Bundler | None, default=None
        Script bundler overriding esbuild.

    Returns
    -------
    BuildResult
        Files rewritten, warnings, and the error if the run failed.
    """
    from .api import inline_directory_async as _impl

    return asyncio.run(
        _impl(
            output_dir=output_dir,
            delete_inlined_files=delete_inlined_files,
            max_asset_failures=max_asset_failures,
            cache_size=cache_size,
            esbuild_path=esbuild_path,
            bundler=bundler,
        )
    )


__all__ = [
    "BuildResult",
    "inline_directory",
]
