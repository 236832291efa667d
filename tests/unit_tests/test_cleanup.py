"""Unit tests for inlined-file deletion and directory compaction."""

from __future__ import annotations

from pathlib import Path

import pytest

from asset_inliner.cleanup import delete_empty_dirs, delete_inlined_files


@pytest.mark.asyncio
async def test_compaction_removes_only_empty_branches(tmp_path: Path, write_file) -> None:
    root = tmp_path / "root"
    (root / "a" / "x").mkdir(parents=True)
    write_file("root/b/f.txt", "keep")

    warnings = await delete_empty_dirs(root)

    assert warnings == []
    assert not (root / "a").exists()
    assert (root / "b" / "f.txt").exists()
    assert root.is_dir()


@pytest.mark.asyncio
async def test_compaction_removes_fully_empty_root(tmp_path: Path) -> None:
    root = tmp_path / "root"
    (root / "a" / "b").mkdir(parents=True)

    await delete_empty_dirs(root)

    assert not root.exists()


@pytest.mark.asyncio
async def test_compaction_of_missing_or_file_path_is_noop(tmp_path: Path, write_file) -> None:
    file_path = write_file("plain.txt", "x")
    assert await delete_empty_dirs(tmp_path / "missing") == []
    assert await delete_empty_dirs(file_path) == []
    assert file_path.exists()


@pytest.mark.asyncio
async def test_delete_inlined_files_with_source_maps(tmp_path: Path, write_file) -> None:
    js = write_file("app.js", "x")
    js_map = write_file("app.js.map", "{}")
    css = write_file("app.css", "y")
    png = write_file("logo.png", b"z")

    deleted, warnings = await delete_inlined_files([js, css, png])

    assert warnings == []
    assert set(deleted) == {str(js), str(js_map), str(css), str(png)}
    assert not any(path.exists() for path in (js, js_map, css, png))


@pytest.mark.asyncio
async def test_missing_inlined_file_warns_but_others_deleted(tmp_path: Path, write_file) -> None:
    kept_going = write_file("b.css", "b")

    deleted, warnings = await delete_inlined_files([tmp_path / "gone.css", kept_going])

    assert deleted == [str(kept_going)]
    assert len(warnings) == 1
    assert "gone.css" in warnings[0]
