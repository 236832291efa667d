"""Inline ``<script src>`` references as bundled inline scripts."""

from __future__ import annotations

import re
from pathlib import Path

from asset_inliner.application.ports import MarkupDocument, MarkupElement
from asset_inliner.application.results import AssetReference
from asset_inliner.errors import BundleError
from asset_inliner.infrastructure.bundle_cache import BundleCache
from asset_inliner.inlining.base import PassOutcome, collect_references, settle_references
from asset_inliner.types import AssetKind

SCRIPT_SELECTOR = 'script[src$=".js"]'
MODULE_PRELOAD_SELECTOR = 'link[rel~="modulepreload"][href$=".js"]'

_CLOSING_SCRIPT = re.compile(r"</(script)", re.IGNORECASE)


def escape_inline_script(code: str) -> str:
    """Keep a literal ``</script`` inside the payload from ending the element."""
    return _CLOSING_SCRIPT.sub(r"<\\/\1", code)


class ScriptInliner:
    """Replace local script references with their bundled code."""

    kind = AssetKind.SCRIPT

    def __init__(self, bundle_cache: BundleCache) -> None:
        self.bundle_cache = bundle_cache

    async def run(self, document: MarkupDocument, public_dir: Path) -> PassOutcome:
        outcome = PassOutcome(self.kind)
        references = collect_references(document, SCRIPT_SELECTOR, "src", self.kind, public_dir)
        return await settle_references(
            outcome,
            (self._inline_one(document, element, ref, outcome) for element, ref in references),
        )

    async def _inline_one(
        self,
        document: MarkupDocument,
        element: MarkupElement,
        ref: AssetReference,
        outcome: PassOutcome,
    ) -> tuple[str, ...] | None:
        script_path = ref.resolved_path
        try:
            bundled = await self.bundle_cache.obtain(script_path)
        except (BundleError, OSError) as exc:
            outcome.fail(
                f"Failed to bundle and inline JS from {script_path} (src: {ref.locator}): {exc}"
            )
            return None

        attrs = {
            name: value
            for name, value in document.attributes(element).items()
            if name != "src"
        }
        document.replace_with(element, "script", escape_inline_script(bundled.code), attrs)
        return bundled.input_files or (str(script_path),)


def remove_module_preloads(
    document: MarkupDocument,
    public_dir: Path,
    inlined_scripts: set[str],
) -> int:
    """Drop ``modulepreload`` hints whose target is now inlined.

    Returns
    -------
    int
        Number of hints removed.
    """
    removed = 0
    hints = collect_references(
        document, MODULE_PRELOAD_SELECTOR, "href", AssetKind.SCRIPT, public_dir
    )
    for element, ref in hints:
        if str(ref.resolved_path) in inlined_scripts:
            document.remove(element)
            removed += 1
    return removed
