"""Application-layer use-cases and option objects."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

from asset_inliner.application.options import (
    CacheOptions,
    CleanupOptions,
    InlineOptions,
    PipelineOptions,
)
from asset_inliner.application.ports import Bundler, MarkupParser
from asset_inliner.application.results import BuildResult

if TYPE_CHECKING:
    from asset_inliner.infrastructure.bundle_cache import BundleCache


def build_pipeline_options(
    *,
    delete_inlined_files: bool = True,
    max_asset_failures: int | None = None,
    cache_size: int | None = None,
    esbuild_path: str | None = None,
) -> PipelineOptions:
    """Build typed pipeline options via lazy use-case import."""
    from asset_inliner.application.use_cases import build_pipeline_options as _impl

    return _impl(
        delete_inlined_files=delete_inlined_files,
        max_asset_failures=max_asset_failures,
        cache_size=cache_size,
        esbuild_path=esbuild_path,
    )


async def run_single_file_pipeline(
    *,
    output_dir: Path,
    options: PipelineOptions,
    bundler: Bundler | None = None,
    parser: MarkupParser | None = None,
    bundle_cache: BundleCache | None = None,
) -> BuildResult:
    """Run the single-file pipeline via lazy use-case import."""
    from asset_inliner.application.use_cases import run_single_file_pipeline as _impl

    return await _impl(
        output_dir=output_dir,
        options=options,
        bundler=bundler,
        parser=parser,
        bundle_cache=bundle_cache,
    )


__all__ = [
    "CacheOptions",
    "CleanupOptions",
    "InlineOptions",
    "PipelineOptions",
    "BuildResult",
    "build_pipeline_options",
    "run_single_file_pipeline",
]
