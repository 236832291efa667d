"""Application use-cases orchestrating the single-file pipeline."""

from __future__ import annotations

import logging
from pathlib import Path

from pydantic import ValidationError

from asset_inliner.adapters.bundlers import EsbuildBundler
from asset_inliner.application.options import (
    CacheOptions,
    CleanupOptions,
    InlineOptions,
    PipelineOptions,
)
from asset_inliner.application.ports import Bundler, MarkupParser
from asset_inliner.application.results import BuildResult
from asset_inliner.errors import ConfigurationError
from asset_inliner.infrastructure.bundle_cache import BundleCache
from asset_inliner.inlining.engine import AssetInliningEngine
from asset_inliner.pipeline.orchestrator import BuildContext, Step, StepOrchestrator
from asset_inliner.pipeline.steps import (
    CompactDirectoriesStep,
    DeleteInlinedFilesStep,
    InlineDocumentsStep,
    ListDocumentsStep,
)
from asset_inliner.schemas import PipelineConfig

logger = logging.getLogger(__name__)


def build_pipeline_options(
    *,
    delete_inlined_files: bool = True,
    max_asset_failures: int | None = None,
    cache_size: int | None = None,
    esbuild_path: str | None = None,
) -> PipelineOptions:
    """Build typed option object from command/API params."""
    return PipelineOptions(
        inline=InlineOptions(
            max_asset_failures=max_asset_failures,
            esbuild_path=esbuild_path,
        ),
        cache=CacheOptions(max_entries=cache_size),
        cleanup=CleanupOptions(delete_inlined_files=delete_inlined_files),
    )


def build_steps(bundle_cache: BundleCache, parser: MarkupParser | None = None) -> list[Step]:
    """Return the fixed step sequence of the single-file pipeline."""
    engine = AssetInliningEngine(bundle_cache, parser=parser)
    return [
        ListDocumentsStep(),
        InlineDocumentsStep(engine),
        DeleteInlinedFilesStep(),
        CompactDirectoriesStep(),
    ]


async def run_single_file_pipeline(
    *,
    output_dir: Path,
    options: PipelineOptions,
    bundler: Bundler | None = None,
    parser: MarkupParser | None = None,
    bundle_cache: BundleCache | None = None,
) -> BuildResult:
    """Use-case: inline every document under ``output_dir`` and clean up.

    Parameters
    ----------
    output_dir : Path
        Directory holding the generated site.
    options : PipelineOptions
        Pipeline configuration.
    bundler : Bundler | None, default=None
        Script bundler. Defaults to :class:`EsbuildBundler`.
    parser : MarkupParser | None, default=None
        Markup parser. Defaults to the engine's parser.
    bundle_cache : BundleCache | None, default=None
        Cache to share across runs. A fresh cache is created when omitted.

    Returns
    -------
    BuildResult
        Aggregate of every completed step, or the first error.

    Raises
    ------
    ConfigurationError
        If the parameters fail validation.
    """
    try:
        config = PipelineConfig(
            output_dir=output_dir,
            delete_inlined_files=options.cleanup.delete_inlined_files,
            max_asset_failures=options.inline.max_asset_failures,
            cache_size=options.cache.max_entries,
            esbuild_path=options.inline.esbuild_path,
        )
    except ValidationError as exc:
        raise ConfigurationError(f"Invalid pipeline parameters: {exc}") from exc

    if bundle_cache is None:
        bundler = bundler or EsbuildBundler(
            config.esbuild_path, working_dir=config.output_dir
        )
        bundle_cache = BundleCache(bundler, max_entries=config.cache_size)

    orchestrator = StepOrchestrator(build_steps(bundle_cache, parser))
    context = BuildContext(config.output_dir, options)
    result = await orchestrator.run(context)

    stats = bundle_cache.stats
    logger.debug(
        "bundle cache: %d hit(s), %d miss(es), %d joined, %d bundle(s)",
        stats.hits,
        stats.misses,
        stats.joined,
        stats.bundles,
    )
    return result
