"""Sub-pass protocol and locator helpers shared by the asset inliners."""

from __future__ import annotations

import asyncio
import logging
import re
from collections.abc import Awaitable, Iterable
from dataclasses import dataclass, field
from pathlib import Path
from typing import Protocol, runtime_checkable
from urllib.parse import unquote

from asset_inliner.application.ports import MarkupDocument, MarkupElement
from asset_inliner.application.results import AssetReference, InlinedFileSet
from asset_inliner.types import AssetKind

logger = logging.getLogger(__name__)

# Any scheme followed by "//", or a protocol-relative "//host/..." locator.
_EXTERNAL_URL = re.compile(r"^(?:[a-z][a-z0-9+.\-]*:)?//", re.IGNORECASE)
_DATA_URI = re.compile(r"^\s*data:", re.IGNORECASE)


def is_external_url(locator: str) -> bool:
    """Return ``True`` for absolute or protocol-relative URLs."""
    return bool(_EXTERNAL_URL.match(locator.strip()))


def is_embedded_data(locator: str) -> bool:
    """Return ``True`` for ``data:`` URIs."""
    return bool(_DATA_URI.match(locator))


def is_eligible(locator: str | None) -> bool:
    """Whether a locator points at a local file that may be inlined."""
    if not locator or not locator.strip():
        return False
    return not (is_external_url(locator) or is_embedded_data(locator))


def resolve_asset_path(public_dir: Path, locator: str) -> Path:
    """Resolve an href/src locator against the public directory.

    Root-relative locators (``/assets/app.css``) are anchored at
    ``public_dir``; query strings and fragments are dropped.
    """
    cleaned = locator.strip().split("#", 1)[0].split("?", 1)[0]
    cleaned = unquote(cleaned).lstrip("/")
    return (public_dir / cleaned).resolve()


def collect_references(
    document: MarkupDocument,
    selector: str,
    attribute: str,
    kind: AssetKind,
    public_dir: Path,
) -> list[tuple[MarkupElement, AssetReference]]:
    """Return eligible references matched by ``selector``, in document order."""
    found: list[tuple[MarkupElement, AssetReference]] = []
    for element in document.select(selector):
        locator = document.get_attribute(element, attribute)
        if locator is None or not is_eligible(locator):
            continue
        found.append(
            (element, AssetReference(kind, locator, resolve_asset_path(public_dir, locator)))
        )
    return found


@dataclass
class PassOutcome:
    """What one asset-kind sub-pass achieved for one document."""

    kind: AssetKind
    inlined: InlinedFileSet = field(default_factory=InlinedFileSet)
    warnings: list[str] = field(default_factory=list)
    failures: int = 0

    def fail(self, message: str) -> None:
        logger.warning(message)
        self.warnings.append(message)
        self.failures += 1


@runtime_checkable
class AssetInliner(Protocol):
    """Protocol implemented by the per-kind inlining sub-passes."""

    kind: AssetKind

    async def run(self, document: MarkupDocument, public_dir: Path) -> PassOutcome:
        """Inline every eligible reference of this kind in ``document``.

        Per-reference failures are recorded on the outcome; the reference is
        left untouched and processing continues.
        """


async def settle_references(
    outcome: PassOutcome,
    jobs: Iterable[Awaitable[Iterable[str] | None]],
) -> PassOutcome:
    """Await per-reference jobs concurrently and merge successful paths."""
    for paths in await asyncio.gather(*jobs):
        if paths is not None:
            outcome.inlined.update(paths)
    return outcome
