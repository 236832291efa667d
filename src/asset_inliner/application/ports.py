"""Application ports for clean architecture boundaries."""

from __future__ import annotations

from collections.abc import Mapping
from pathlib import Path
from typing import Protocol

from asset_inliner.application.results import BundleResult


class MarkupElement(Protocol):
    """Marker protocol for an element handle owned by a markup document."""


class Bundler(Protocol):
    """Fold a script entry point and its local imports into one payload."""

    async def bundle(self, entry_path: Path) -> BundleResult:
        """Bundle ``entry_path``; raise ``BundleError`` on failure."""


class MarkupDocument(Protocol):
    """Queryable, mutable markup tree."""

    def select(self, selector: str) -> list[MarkupElement]:
        """Return elements matching a CSS selector, in document order."""

    def get_attribute(self, element: MarkupElement, name: str) -> str | None:
        """Return attribute value or ``None`` when absent."""

    def attributes(self, element: MarkupElement) -> dict[str, str]:
        """Return all attributes of ``element`` in source order."""

    def set_attribute(self, element: MarkupElement, name: str, value: str) -> None:
        """Set attribute value in place."""

    def replace_with(
        self,
        element: MarkupElement,
        tag: str,
        text: str,
        attrs: Mapping[str, str] | None = None,
    ) -> MarkupElement:
        """Replace ``element`` with a new ``tag`` carrying raw ``text``."""

    def remove(self, element: MarkupElement) -> None:
        """Detach ``element`` from the tree."""

    def serialize(self) -> str:
        """Render the tree back to markup text."""


class MarkupParser(Protocol):
    """Load raw markup text into a :class:`MarkupDocument`."""

    def parse(self, html: str) -> MarkupDocument:
        """Parse markup text."""
