"""Locate generated HTML documents under an output directory."""

from __future__ import annotations

import asyncio
import logging
import os
from pathlib import Path

logger = logging.getLogger(__name__)

HTML_SUFFIX = ".html"


def _scan(directory: Path) -> list[os.DirEntry[str]]:
    with os.scandir(directory) as entries:
        return list(entries)


async def find_html_files(root: Path) -> list[Path]:
    """Recursively collect absolute paths of ``*.html`` files under ``root``.

    Parameters
    ----------
    root : Path
        Directory to scan.

    Returns
    -------
    list[Path]
        Absolute document paths. Order follows directory enumeration and is
        not guaranteed.

    Raises
    ------
    OSError
        If a directory cannot be read for a reason other than not existing.
    """
    found: list[Path] = []

    async def recurse(directory: Path) -> None:
        try:
            entries = await asyncio.to_thread(_scan, directory)
        except FileNotFoundError:
            logger.warning("Directory not found during HTML file search: %s", directory)
            return
        except OSError:
            logger.error("Error reading directory %s during HTML file search", directory)
            raise

        for entry in entries:
            path = Path(entry.path)
            if entry.is_dir(follow_symlinks=False):
                await recurse(path)
            elif entry.is_file(follow_symlinks=False) and entry.name.endswith(HTML_SUFFIX):
                found.append(path.resolve())

    await recurse(Path(root))
    return found
