"""Integration tests running the full pipeline over a generated site."""

from __future__ import annotations

from pathlib import Path

import pytest

import asset_inliner
from asset_inliner.api import inline_directory_async
from asset_inliner.errors import DocumentWriteError, InliningThresholdError
from asset_inliner.infrastructure.bundle_cache import BundleCache
from asset_inliner.inlining.engine import AssetInliningEngine
from asset_inliner.pipeline.orchestrator import BuildContext, StepInputs
from asset_inliner.pipeline.steps import InlineDocumentsStep

PAGE = """<!doctype html>
<html>
<head>
<link rel="stylesheet" href="/assets/css/site.css">
<link rel="modulepreload" href="/assets/js/app.js">
</head>
<body>
<img src="/img/logo.png" alt="logo">
<img src="/img/legacy.bmp" alt="legacy">
<script type="module" src="/assets/js/app.js"></script>
</body>
</html>
"""


@pytest.fixture
def site(tmp_path: Path, write_file) -> Path:
    write_file("index.html", PAGE)
    write_file("blog/first/index.html", PAGE)
    write_file("assets/css/site.css", "body{margin:0}")
    write_file("assets/css/site.css.map", "{}")
    write_file("assets/js/app.js", "document.title='hi'")
    write_file("assets/js/app.js.map", "{}")
    write_file("img/logo.png", b"\x89PNG")
    write_file("img/legacy.bmp", b"BM")
    return tmp_path


@pytest.mark.asyncio
async def test_pipeline_inlines_and_cleans_up(site: Path, bundler) -> None:
    result = await inline_directory_async(site, bundler=bundler)

    assert result.ok, result.error
    assert sorted(result.emitted_files) == sorted(
        [str((site / "index.html").resolve()), str((site / "blog/first/index.html").resolve())]
    )
    # One MIME warning per document for the bitmap.
    assert sum("Could not determine MIME type" in w for w in result.warnings) == 2
    assert len(bundler.calls) == 1

    html = (site / "blog/first/index.html").read_text(encoding="utf-8")
    assert "<style>body{margin:0}</style>" in html
    assert "data:image/png;base64," in html
    assert 'src="/img/legacy.bmp"' in html
    assert "modulepreload" not in html
    assert "document.title='hi'" in html

    assert not (site / "assets").exists()
    assert not (site / "img/logo.png").exists()
    assert (site / "img/legacy.bmp").exists()


@pytest.mark.asyncio
async def test_pipeline_keeps_assets_when_requested(site: Path, bundler) -> None:
    result = await inline_directory_async(site, delete_inlined_files=False, bundler=bundler)

    assert result.ok
    assert (site / "assets/css/site.css").exists()
    assert (site / "assets/js/app.js.map").exists()


@pytest.mark.asyncio
async def test_pipeline_threshold_failure_skips_cleanup(site: Path, bundler) -> None:
    result = await inline_directory_async(site, max_asset_failures=1, bundler=bundler)

    assert isinstance(result.error, InliningThresholdError)
    assert result.emitted_files == ()
    assert (site / "assets/css/site.css").exists()


@pytest.mark.asyncio
async def test_pipeline_without_documents_succeeds(tmp_path: Path, bundler) -> None:
    result = await inline_directory_async(tmp_path, bundler=bundler)

    assert result.ok
    assert result.emitted_files == ()
    assert result.warnings == (
        f"No HTML files found in {tmp_path.resolve()}. Skipping asset inlining.",
    )


@pytest.mark.asyncio
async def test_documents_removed_mid_run_are_skipped(tmp_path: Path, write_file, bundler) -> None:
    """A listed document that vanished before reading is skipped silently."""
    write_file("shared.css", "p{}")
    first = write_file("one.html", '<link rel="stylesheet" href="shared.css">')
    vanished = write_file("two.html", "<p>two</p>")
    third = write_file("three.html", '<link rel="stylesheet" href="shared.css">')
    vanished.unlink()

    context = BuildContext(tmp_path)
    context.publish("list-documents", "documents", (first, vanished, third))
    step = InlineDocumentsStep(AssetInliningEngine(BundleCache(bundler)))
    outcome = await step.run(context, StepInputs(step.name, context, step.requires))

    assert outcome.result.ok
    assert outcome.result.emitted_files == (str(first), str(third))
    assert outcome.result.warnings == ()
    assert outcome.output == (str((tmp_path / "shared.css").resolve()),)
    assert "<style>p{}</style>" in third.read_text(encoding="utf-8")


def test_sync_entry_point(site: Path, bundler) -> None:
    result = asset_inliner.inline_directory(site, bundler=bundler)
    assert result.ok
    assert not (site / "assets").exists()


@pytest.mark.asyncio
async def test_assets_outside_output_dir_are_inlined_but_kept(
    tmp_path: Path, write_file, bundler
) -> None:
    theme = write_file("src/theme.css", "h1{color:blue}")
    write_file("dist/index.html", '<link rel="stylesheet" href="../src/theme.css">')
    dist = tmp_path / "dist"

    result = await inline_directory_async(dist, bundler=bundler)

    assert result.ok, result.error
    assert "<style>h1{color:blue}</style>" in (dist / "index.html").read_text(encoding="utf-8")
    assert theme.exists()
    assert any("outside output directory" in warning for warning in result.warnings)


def _deny_writes_to(monkeypatch: pytest.MonkeyPatch, name: str) -> None:
    original = Path.write_text

    def guarded(self: Path, *args, **kwargs):
        if self.name == name:
            raise PermissionError(13, "Permission denied", str(self))
        return original(self, *args, **kwargs)

    monkeypatch.setattr(Path, "write_text", guarded)


@pytest.mark.asyncio
async def test_write_failure_fails_step_after_other_documents_settle(
    tmp_path: Path, write_file, bundler, monkeypatch: pytest.MonkeyPatch
) -> None:
    write_file("shared.css", "p{}")
    first = write_file("one.html", '<link rel="stylesheet" href="shared.css">')
    locked = write_file("locked.html", '<link rel="stylesheet" href="shared.css">')
    third = write_file("three.html", '<link rel="stylesheet" href="shared.css">')
    _deny_writes_to(monkeypatch, "locked.html")

    context = BuildContext(tmp_path)
    context.publish("list-documents", "documents", (first, locked, third))
    step = InlineDocumentsStep(AssetInliningEngine(BundleCache(bundler)))
    outcome = await step.run(context, StepInputs(step.name, context, step.requires))

    assert outcome.result.status == "error"
    assert isinstance(outcome.result.error, DocumentWriteError)
    assert isinstance(outcome.result.error.__cause__, PermissionError)
    assert outcome.output is None
    assert outcome.result.emitted_files == (str(first), str(third))
    assert "<style>p{}</style>" in first.read_text(encoding="utf-8")
    assert "<style>p{}</style>" in third.read_text(encoding="utf-8")
    assert "<link" in locked.read_text(encoding="utf-8")


@pytest.mark.asyncio
async def test_write_failure_stops_pipeline_before_cleanup(
    site: Path, bundler, monkeypatch: pytest.MonkeyPatch
) -> None:
    _deny_writes_to(monkeypatch, "index.html")
    # Only the nested page can be written.
    (site / "blog/first/index.html").rename(site / "blog/first/post.html")

    result = await inline_directory_async(site, bundler=bundler)

    assert result.status == "error"
    assert isinstance(result.error, DocumentWriteError)
    assert result.emitted_files == ()
    assert "<style>" in (site / "blog/first/post.html").read_text(encoding="utf-8")
    assert (site / "assets/css/site.css").exists()
    assert (site / "img/logo.png").exists()
