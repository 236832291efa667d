"""Script bundler adapters."""

from __future__ import annotations

import asyncio
import json
import logging
import shutil
from pathlib import Path
from tempfile import TemporaryDirectory

from asset_inliner.application.results import BundleResult
from asset_inliner.errors import BundleError, DependencyError

logger = logging.getLogger(__name__)

ESBUILD_EXECUTABLE = "esbuild"


def resolve_esbuild(executable: str | None = None) -> str:
    """Locate the esbuild executable.

    Parameters
    ----------
    executable : str | None, default=None
        Explicit path or command name. Defaults to ``esbuild`` on ``PATH``.

    Returns
    -------
    str
        Absolute path to the executable.

    Raises
    ------
    DependencyError
        If the executable cannot be found.
    """
    candidate = executable or ESBUILD_EXECUTABLE
    found = shutil.which(candidate)
    if found is None:
        raise DependencyError(
            f"esbuild executable '{candidate}' not found. "
            "Install it with: npm install --global esbuild"
        )
    return found


def _input_files_from_metafile(metafile: Path, working_dir: Path) -> tuple[str, ...]:
    payload = json.loads(metafile.read_text(encoding="utf-8"))
    inputs = payload.get("inputs")
    if not isinstance(inputs, dict):
        raise BundleError(f"esbuild metafile {metafile} has no 'inputs' mapping.")
    return tuple(str((working_dir / name).resolve()) for name in inputs)


class EsbuildBundler:
    """Bundle browser scripts into a minified IIFE with the esbuild CLI."""

    def __init__(
        self,
        executable: str | None = None,
        *,
        working_dir: Path | None = None,
    ) -> None:
        self.executable = executable
        self.working_dir = working_dir

    async def bundle(self, entry_path: Path) -> BundleResult:
        """Bundle ``entry_path`` and report every input file esbuild read.

        Raises
        ------
        DependencyError
            If esbuild is not installed.
        BundleError
            If esbuild exits with a non-zero status or emits no code.
        """
        esbuild = resolve_esbuild(self.executable)
        working_dir = (self.working_dir or Path.cwd()).resolve()
        with TemporaryDirectory(prefix="asset-inliner-") as tmp:
            metafile = Path(tmp) / "meta.json"
            process = await asyncio.create_subprocess_exec(
                esbuild,
                str(entry_path),
                "--bundle",
                "--format=iife",
                "--platform=browser",
                "--minify",
                "--log-level=error",
                f"--metafile={metafile}",
                cwd=str(working_dir),
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
            stdout, stderr = await process.communicate()
            if process.returncode != 0:
                detail = stderr.decode("utf-8", errors="replace").strip()
                raise BundleError(
                    f"esbuild failed for {entry_path} (exit {process.returncode}): {detail}"
                )
            code = stdout.decode("utf-8")
            if not code.strip():
                raise BundleError(f"esbuild produced no output for {entry_path}.")
            input_files = _input_files_from_metafile(metafile, working_dir)

        logger.debug("bundled %s from %d input file(s)", entry_path, len(input_files))
        return BundleResult(code=code, input_files=input_files)
