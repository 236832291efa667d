"""Inline ``<link rel="stylesheet">`` references as ``<style>`` blocks."""

from __future__ import annotations

import asyncio
from pathlib import Path

from asset_inliner.application.ports import MarkupDocument, MarkupElement
from asset_inliner.application.results import AssetReference
from asset_inliner.inlining.base import PassOutcome, collect_references, settle_references
from asset_inliner.types import AssetKind

STYLESHEET_SELECTOR = 'link[rel~="stylesheet"][href$=".css"]'
# Attributes that still mean something on an inline <style>.
_CARRIED_ATTRIBUTES = ("media", "nonce", "title")


class StylesheetInliner:
    """Replace local stylesheet links with the stylesheet text."""

    kind = AssetKind.STYLESHEET

    async def run(self, document: MarkupDocument, public_dir: Path) -> PassOutcome:
        outcome = PassOutcome(self.kind)
        references = collect_references(
            document, STYLESHEET_SELECTOR, "href", self.kind, public_dir
        )
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
    ) -> list[str] | None:
        try:
            css = await asyncio.to_thread(ref.resolved_path.read_text, encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            outcome.fail(
                f"Could not inline CSS from {ref.resolved_path} (href: {ref.locator}): {exc}"
            )
            return None

        attrs = {
            name: value
            for name, value in document.attributes(element).items()
            if name in _CARRIED_ATTRIBUTES
        }
        document.replace_with(element, "style", css, attrs)
        return [str(ref.resolved_path)]
