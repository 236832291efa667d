"""Public directory-inlining API (delegates to application use-cases)."""

from __future__ import annotations

from pathlib import Path

from asset_inliner.application.ports import Bundler
from asset_inliner.application.results import BuildResult
from asset_inliner.application.use_cases import build_pipeline_options
from asset_inliner.application.use_cases import run_single_file_pipeline


async def inline_directory_async(
    output_dir: Path,
    delete_inlined_files: bool = True,
    max_asset_failures: int | None = None,
    cache_size: int | None = None,
    esbuild_path: str | None = None,
    bundler: Bundler | None = None,
) -> BuildResult:
    """Inline the assets of every HTML document under ``output_dir``."""
    options = build_pipeline_options(
        delete_inlined_files=delete_inlined_files,
        max_asset_failures=max_asset_failures,
        cache_size=cache_size,
        esbuild_path=esbuild_path,
    )
    return await run_single_file_pipeline(
        output_dir=Path(output_dir),
        options=options,
        bundler=bundler,
    )
