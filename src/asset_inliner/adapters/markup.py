"""BeautifulSoup-backed markup document adapter."""

from __future__ import annotations

from collections.abc import Mapping

from bs4 import BeautifulSoup, Tag
from bs4.element import Script, Stylesheet

_HTML_PARSER = "html.parser"


def _attr_text(value: object) -> str:
    # Multi-valued attributes (class, rel) come back as lists.
    if isinstance(value, (list, tuple)):
        return " ".join(str(item) for item in value)
    return str(value)


class SoupDocument:
    """:class:`MarkupDocument` implementation over a BeautifulSoup tree."""

    def __init__(self, soup: BeautifulSoup) -> None:
        self._soup = soup

    def select(self, selector: str) -> list[Tag]:
        """Return elements matching ``selector`` in document order."""
        return list(self._soup.select(selector))

    def get_attribute(self, element: Tag, name: str) -> str | None:
        """Return attribute text or ``None``."""
        value = element.get(name)
        if value is None:
            return None
        return _attr_text(value)

    def attributes(self, element: Tag) -> dict[str, str]:
        """Return attributes as plain strings in source order."""
        return {key: _attr_text(value) for key, value in element.attrs.items()}

    def set_attribute(self, element: Tag, name: str, value: str) -> None:
        """Set attribute in place."""
        element[name] = value

    def replace_with(
        self,
        element: Tag,
        tag: str,
        text: str,
        attrs: Mapping[str, str] | None = None,
    ) -> Tag:
        """Replace ``element`` with a freshly built ``tag``.

        Text placed in ``<style>`` and ``<script>`` is emitted verbatim on
        serialization; other tags get regular entity substitution.
        """
        replacement = self._soup.new_tag(tag, attrs=dict(attrs or {}))
        if tag == "style":
            replacement.append(Stylesheet(text))
        elif tag == "script":
            replacement.append(Script(text))
        else:
            replacement.string = text
        element.replace_with(replacement)
        return replacement

    def remove(self, element: Tag) -> None:
        """Detach and destroy ``element``."""
        element.decompose()

    def serialize(self) -> str:
        """Render markup without pretty-printing."""
        return self._soup.decode(formatter="minimal")


class SoupParser:
    """:class:`MarkupParser` using the stdlib-backed ``html.parser`` builder."""

    def __init__(self, features: str = _HTML_PARSER) -> None:
        self.features = features

    def parse(self, html: str) -> SoupDocument:
        """Parse raw markup into a :class:`SoupDocument`."""
        return SoupDocument(BeautifulSoup(html, self.features))
