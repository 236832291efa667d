"""Best-effort removal of inlined assets and directories left empty."""

from __future__ import annotations

import asyncio
import logging
import os
import stat
from collections.abc import Iterable
from pathlib import Path

logger = logging.getLogger(__name__)

SOURCE_MAP_SUFFIXES = (".js", ".css")


def _warn(warnings: list[str], message: str) -> None:
    logger.warning(message)
    warnings.append(message)


async def _unlink(path: Path, warnings: list[str], *, missing_ok: bool, label: str) -> bool:
    try:
        await asyncio.to_thread(path.unlink)
    except FileNotFoundError:
        if not missing_ok:
            _warn(warnings, f"Could not delete {label} {path}: file not found")
        return False
    except OSError as exc:
        _warn(warnings, f"Could not delete {label} {path}: {exc}")
        return False
    return True


async def delete_inlined_files(paths: Iterable[str | Path]) -> tuple[list[str], list[str]]:
    """Delete inlined asset files and their adjacent source maps.

    Every file is attempted even when others fail. A missing ``.map`` file is
    expected and stays silent.

    Returns
    -------
    tuple[list[str], list[str]]
        Deleted paths and warnings.
    """
    warnings: list[str] = []

    async def delete_one(path: Path) -> list[str]:
        deleted: list[str] = []
        targets = [_unlink(path, warnings, missing_ok=False, label="inlined file")]
        map_path = path.with_name(path.name + ".map")
        if path.suffix in SOURCE_MAP_SUFFIXES:
            targets.append(_unlink(map_path, warnings, missing_ok=True, label="source map file"))
        outcomes = await asyncio.gather(*targets)
        if outcomes[0]:
            deleted.append(str(path))
        if len(outcomes) > 1 and outcomes[1]:
            deleted.append(str(map_path))
        return deleted

    results = await asyncio.gather(*(delete_one(Path(p)) for p in paths))
    return [path for group in results for path in group], warnings


async def delete_empty_dirs(directory: Path, warnings: list[str] | None = None) -> list[str]:
    """Remove ``directory`` and its descendants once they hold no entries.

    Children are compacted first; the directory is re-read afterwards and
    removed only if nothing remains. A missing ``directory`` is a no-op.
    Errors on individual entries are recorded and skipped.

    Parameters
    ----------
    directory : Path
        Root of the compaction.
    warnings : list[str] | None, default=None
        Sink for warning messages. A new list is used when omitted.

    Returns
    -------
    list[str]
        Warnings gathered during compaction.
    """
    sink: list[str] = [] if warnings is None else warnings
    directory = Path(directory)

    try:
        stats = await asyncio.to_thread(directory.stat)
    except FileNotFoundError:
        return sink
    except OSError as exc:
        _warn(sink, f"Could not stat directory {directory} for cleanup: {exc}")
        return sink
    if not _is_dir(stats):
        return sink

    try:
        entries = await asyncio.to_thread(os.listdir, directory)
    except OSError as exc:
        _warn(sink, f"Could not read directory {directory} for cleanup: {exc}")
        return sink

    async def visit(name: str) -> None:
        child = directory / name
        try:
            child_stats = await asyncio.to_thread(child.lstat)
        except FileNotFoundError:
            return
        except OSError as exc:
            _warn(sink, f"Could not stat entry {child} during cleanup: {exc}")
            return
        if _is_dir(child_stats):
            await delete_empty_dirs(child, sink)

    await asyncio.gather(*(visit(name) for name in entries))

    try:
        remaining = await asyncio.to_thread(os.listdir, directory)
        if not remaining:
            await asyncio.to_thread(directory.rmdir)
            logger.debug("removed empty directory %s", directory)
    except FileNotFoundError:
        pass
    except OSError as exc:
        _warn(sink, f"Could not delete empty directory {directory}: {exc}")
    return sink


def _is_dir(stats: os.stat_result) -> bool:
    return stat.S_ISDIR(stats.st_mode)
