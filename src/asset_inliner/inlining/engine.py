"""Per-document asset inlining engine."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Sequence
from pathlib import Path

from asset_inliner.adapters.markup import SoupParser
from asset_inliner.application.ports import MarkupParser
from asset_inliner.application.results import DocumentInlineResult, InlinedFileSet
from asset_inliner.infrastructure.bundle_cache import BundleCache
from asset_inliner.inlining.base import AssetInliner
from asset_inliner.inlining.images import ImageInliner
from asset_inliner.inlining.scripts import ScriptInliner, remove_module_preloads
from asset_inliner.inlining.stylesheets import StylesheetInliner
from asset_inliner.types import AssetKind

logger = logging.getLogger(__name__)


def default_passes(bundle_cache: BundleCache) -> list[AssetInliner]:
    """Build the stylesheet, image and script sub-passes."""
    return [StylesheetInliner(), ImageInliner(), ScriptInliner(bundle_cache)]


class AssetInliningEngine:
    """Embed a document's local stylesheets, images and scripts.

    The three sub-passes run concurrently over one parsed tree. A reference
    that cannot be inlined is reported as a warning and left as-is; it never
    aborts the rest of the document.

    Parameters
    ----------
    bundle_cache : BundleCache
        Cache fronting the script bundler.
    parser : MarkupParser | None, default=None
        Markup parser. Defaults to :class:`SoupParser`.
    passes : Sequence[AssetInliner] | None, default=None
        Sub-passes to run. Defaults to :func:`default_passes`.
    """

    def __init__(
        self,
        bundle_cache: BundleCache,
        *,
        parser: MarkupParser | None = None,
        passes: Sequence[AssetInliner] | None = None,
    ) -> None:
        self.bundle_cache = bundle_cache
        self.parser = parser or SoupParser()
        self.passes = list(passes) if passes is not None else default_passes(bundle_cache)

    async def inline(self, html: str, public_dir: Path) -> DocumentInlineResult:
        """Inline every eligible asset reference in ``html``.

        Parameters
        ----------
        html : str
            Document markup.
        public_dir : Path
            Directory that root-relative locators resolve against.

        Returns
        -------
        DocumentInlineResult
            Serialized markup, the deduplicated set of embedded files and the
            per-reference warnings.
        """
        document = self.parser.parse(html)
        settled = await asyncio.gather(
            *(inliner.run(document, public_dir) for inliner in self.passes),
            return_exceptions=True,
        )

        inlined = InlinedFileSet()
        warnings: list[str] = []
        failures = 0
        scripts: set[str] = set()
        for inliner, outcome in zip(self.passes, settled, strict=True):
            if isinstance(outcome, BaseException):
                if isinstance(outcome, asyncio.CancelledError):
                    raise outcome
                message = f"{inliner.kind} inlining pass failed: {outcome}"
                logger.warning(message)
                warnings.append(message)
                failures += 1
                continue
            inlined.update(outcome.inlined)
            warnings.extend(outcome.warnings)
            failures += outcome.failures
            if outcome.kind is AssetKind.SCRIPT:
                scripts.update(outcome.inlined)

        if scripts:
            removed = remove_module_preloads(document, public_dir, scripts)
            if removed:
                logger.debug("removed %d modulepreload hint(s)", removed)

        return DocumentInlineResult(
            html=document.serialize(),
            inlined_files=inlined.as_tuple(),
            warnings=tuple(warnings),
            failed_references=failures,
        )


async def inline_assets(
    html: str,
    public_dir: Path,
    *,
    bundle_cache: BundleCache,
    parser: MarkupParser | None = None,
) -> DocumentInlineResult:
    """Inline one document with a throwaway engine."""
    engine = AssetInliningEngine(bundle_cache, parser=parser)
    return await engine.inline(html, public_dir)


__all__ = [
    "AssetInliningEngine",
    "default_passes",
    "inline_assets",
]
