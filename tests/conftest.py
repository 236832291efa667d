"""Shared pytest configuration, marker assignment and stand-in collaborators."""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from pathlib import Path

import pytest

from asset_inliner.application.results import BundleResult
from asset_inliner.errors import BundleError


def pytest_collection_modifyitems(
    config: pytest.Config, items: list[pytest.Item]
) -> None:
    """Attach suite markers based on test file path."""
    del config
    for item in items:
        parts = set(Path(str(item.fspath)).parts)
        if "e2e_tests" in parts:
            item.add_marker(pytest.mark.e2e)
        elif "integration_tests" in parts:
            item.add_marker(pytest.mark.integration)
        elif "unit_tests" in parts:
            item.add_marker(pytest.mark.unit)


class CountingBundler:
    """Bundler stand-in that echoes the entry file and counts invocations."""

    def __init__(self, failing: set[str] | None = None, delay: float = 0.0) -> None:
        self.failing = failing or set()
        self.delay = delay
        self.calls: list[Path] = []

    async def bundle(self, entry_path: Path) -> BundleResult:
        self.calls.append(entry_path)
        if self.delay:
            await asyncio.sleep(self.delay)
        if entry_path.name in self.failing:
            raise BundleError(f"cannot bundle {entry_path.name}")
        source = entry_path.read_text(encoding="utf-8")
        return BundleResult(
            code=f"(()=>{{{source}}})();",
            input_files=(str(entry_path.resolve()),),
        )


@pytest.fixture
def bundler() -> CountingBundler:
    return CountingBundler()


@pytest.fixture
def make_bundler() -> Callable[..., CountingBundler]:
    return CountingBundler


@pytest.fixture
def write_file(tmp_path: Path) -> Callable[[str, str | bytes], Path]:
    """Write ``content`` at ``relative`` under ``tmp_path``, creating parents."""

    def _write(relative: str, content: str | bytes) -> Path:
        path = tmp_path / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        if isinstance(content, bytes):
            path.write_bytes(content)
        else:
            path.write_text(content, encoding="utf-8")
        return path

    return _write
