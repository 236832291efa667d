"""Inline ``<img src>`` references as base64 data URIs."""

from __future__ import annotations

import asyncio
import base64
from pathlib import Path

from asset_inliner.application.ports import MarkupDocument, MarkupElement
from asset_inliner.application.results import AssetReference
from asset_inliner.inlining.base import PassOutcome, collect_references, settle_references
from asset_inliner.types import AssetKind

IMAGE_SELECTOR = "img[src]"

IMAGE_MIME_TYPES: dict[str, str] = {
    ".png": "image/png",
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".gif": "image/gif",
    ".svg": "image/svg+xml",
    ".webp": "image/webp",
}


def mime_type_for(path: Path) -> str | None:
    """Map an image path to its content type, or ``None`` if unknown."""
    return IMAGE_MIME_TYPES.get(path.suffix.lower())


def to_data_uri(mime_type: str, payload: bytes) -> str:
    encoded = base64.b64encode(payload).decode("ascii")
    return f"data:{mime_type};base64,{encoded}"


class ImageInliner:
    """Rewrite local image sources to embedded data URIs."""

    kind = AssetKind.IMAGE

    async def run(self, document: MarkupDocument, public_dir: Path) -> PassOutcome:
        outcome = PassOutcome(self.kind)
        references = collect_references(document, IMAGE_SELECTOR, "src", self.kind, public_dir)
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
        image_path = ref.resolved_path
        mime_type = mime_type_for(image_path)
        if mime_type is None:
            # An unknown content type cannot be declared in a data URI.
            outcome.fail(
                f"Could not determine MIME type for image {image_path}. Skipping inline."
            )
            return None
        try:
            payload = await asyncio.to_thread(image_path.read_bytes)
        except OSError as exc:
            outcome.fail(f"Could not inline image from {image_path} (src: {ref.locator}): {exc}")
            return None

        document.set_attribute(element, "src", to_data_uri(mime_type, payload))
        return [str(image_path)]
