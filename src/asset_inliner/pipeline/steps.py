"""Concrete steps of the single-file pipeline."""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path

from asset_inliner.application.results import (
    BuildResult,
    DocumentInlineResult,
    InlinedFileSet,
)
from asset_inliner.cleanup import delete_empty_dirs, delete_inlined_files
from asset_inliner.discovery import find_html_files
from asset_inliner.errors import DocumentWriteError, InliningThresholdError
from asset_inliner.inlining.engine import AssetInliningEngine
from asset_inliner.pipeline.orchestrator import BuildContext, StepInputs, StepOutcome

logger = logging.getLogger(__name__)

DOCUMENTS = "documents"
INLINED_FILES = "inlined_files"
DELETED_FILES = "deleted_files"


class ListDocumentsStep:
    """Find every HTML document under the output directory."""

    name = "list-documents"
    requires: tuple[str, ...] = ()
    provides = DOCUMENTS

    async def run(self, context: BuildContext, inputs: StepInputs) -> StepOutcome:
        del inputs
        documents = tuple(await find_html_files(context.output_dir))
        warnings: list[str] = []
        if not documents:
            message = (
                f"No HTML files found in {context.output_dir}. Skipping asset inlining."
            )
            logger.warning(message)
            warnings.append(message)
        return StepOutcome(BuildResult.success(warnings=warnings), documents)


class InlineDocumentsStep:
    """Inline assets into every document and collect the embedded files.

    Documents are processed concurrently and all of them settle before the
    step returns, so no later step can touch an asset still being read.
    """

    name = "inline-documents"
    requires = (DOCUMENTS,)
    provides = INLINED_FILES

    def __init__(self, engine: AssetInliningEngine) -> None:
        self.engine = engine

    async def run(self, context: BuildContext, inputs: StepInputs) -> StepOutcome:
        documents: tuple[Path, ...] = inputs[DOCUMENTS]  # type: ignore[assignment]
        if not documents:
            return StepOutcome(BuildResult.success(), ())

        logger.info(
            "Inlining assets for %d HTML file(s) in %s...",
            len(documents),
            context.output_dir,
        )
        settled = await asyncio.gather(
            *(self._inline_document(path, context.output_dir) for path in documents),
            return_exceptions=True,
        )

        inlined = InlinedFileSet()
        emitted: list[str] = []
        warnings: list[str] = []
        write_errors: list[BaseException] = []
        failed_references = 0
        for path, outcome in zip(documents, settled, strict=True):
            if isinstance(outcome, DocumentWriteError):
                write_errors.append(outcome)
            elif isinstance(outcome, BaseException):
                if not isinstance(outcome, Exception):
                    raise outcome
                message = f"Error inlining assets in {path}: {outcome}"
                logger.error(message)
                warnings.append(message)
            elif outcome is not None:
                emitted.append(str(path))
                inlined.update(outcome.inlined_files)
                warnings.extend(outcome.warnings)
                failed_references += outcome.failed_references
        logger.info("Asset inlining complete.")

        if write_errors:
            return StepOutcome(BuildResult.failure(write_errors[0], emitted, warnings))

        threshold = context.options.inline.max_asset_failures
        if threshold is not None and failed_references > threshold:
            error = InliningThresholdError(
                f"{failed_references} asset reference(s) could not be inlined "
                f"(allowed: {threshold})."
            )
            return StepOutcome(BuildResult.failure(error, emitted, warnings))

        return StepOutcome(BuildResult.success(emitted, warnings), inlined.as_tuple())

    async def _inline_document(
        self, path: Path, public_dir: Path
    ) -> DocumentInlineResult | None:
        try:
            html = await asyncio.to_thread(path.read_text, encoding="utf-8")
        except FileNotFoundError:
            # Removed concurrently by another process; nothing to rewrite.
            logger.debug("document %s disappeared before inlining", path)
            return None

        result = await self.engine.inline(html, public_dir)
        try:
            await asyncio.to_thread(path.write_text, result.html, encoding="utf-8")
        except OSError as exc:
            raise DocumentWriteError(
                f"Could not write inlined document {path}: {exc}"
            ) from exc
        return result


class DeleteInlinedFilesStep:
    """Delete inlined assets and their source maps when cleanup is enabled.

    Only files under the output directory are removed; sources pulled in from
    elsewhere stay and are reported as warnings.
    """

    name = "delete-inlined-files"
    requires = (INLINED_FILES,)
    provides = DELETED_FILES

    async def run(self, context: BuildContext, inputs: StepInputs) -> StepOutcome:
        inlined: tuple[str, ...] = inputs[INLINED_FILES]  # type: ignore[assignment]
        if not context.options.cleanup.delete_inlined_files or not inlined:
            return StepOutcome(BuildResult.success(), ())

        root = context.output_dir.resolve()
        inside: list[str] = []
        warnings: list[str] = []
        for path in inlined:
            if Path(path).resolve().is_relative_to(root):
                inside.append(path)
                continue
            message = f"Not deleting {path}: outside output directory {root}"
            logger.warning(message)
            warnings.append(message)

        deleted, delete_warnings = await delete_inlined_files(inside)
        warnings.extend(delete_warnings)
        logger.info("Inlined asset deletion complete (%d file(s)).", len(deleted))
        return StepOutcome(BuildResult.success(warnings=warnings), tuple(deleted))


class CompactDirectoriesStep:
    """Remove directories emptied by asset deletion."""

    name = "compact-directories"
    requires = (DELETED_FILES,)
    provides = None

    async def run(self, context: BuildContext, inputs: StepInputs) -> BuildResult:
        deleted: tuple[str, ...] = inputs[DELETED_FILES]  # type: ignore[assignment]
        if not deleted:
            return BuildResult.success()

        logger.info("Cleaning up empty directories in %s...", context.output_dir)
        warnings = await delete_empty_dirs(context.output_dir)
        logger.info("Empty directory cleanup complete.")
        return BuildResult.success(warnings=warnings)
