"""Application-layer result objects."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from pathlib import Path

from asset_inliner.types import AssetKind, BuildStatus


@dataclass(frozen=True)
class BuildResult:
    """Outcome of one pipeline step or of a whole pipeline run.

    Parameters
    ----------
    status : {"success", "error"}
        Overall status.
    emitted_files : tuple[str, ...]
        Absolute paths produced or touched, in emission order.
    warnings : tuple[str, ...]
        Non-fatal messages, in emission order.
    error : BaseException | None
        First fatal cause. Set if and only if ``status == "error"``.
    """

    status: BuildStatus
    emitted_files: tuple[str, ...] = ()
    warnings: tuple[str, ...] = ()
    error: BaseException | None = None

    def __post_init__(self) -> None:
        if self.status not in ("success", "error"):
            raise ValueError(f"Invalid build status: {self.status!r}")
        if (self.status == "error") != (self.error is not None):
            raise ValueError("BuildResult.error must be set iff status is 'error'.")
        object.__setattr__(self, "emitted_files", tuple(self.emitted_files))
        object.__setattr__(self, "warnings", tuple(self.warnings))

    @classmethod
    def success(
        cls,
        emitted_files: Iterable[str] = (),
        warnings: Iterable[str] = (),
    ) -> BuildResult:
        return cls("success", tuple(emitted_files), tuple(warnings))

    @classmethod
    def failure(
        cls,
        error: BaseException,
        emitted_files: Iterable[str] = (),
        warnings: Iterable[str] = (),
    ) -> BuildResult:
        return cls("error", tuple(emitted_files), tuple(warnings), error)

    @property
    def ok(self) -> bool:
        return self.status == "success"


@dataclass(frozen=True)
class BundleResult:
    """Self-contained script payload plus the files folded into it."""

    code: str
    input_files: tuple[str, ...] = ()


@dataclass(frozen=True)
class AssetReference:
    """Locator extracted from a document, resolved against the public dir."""

    kind: AssetKind
    locator: str
    resolved_path: Path


@dataclass(frozen=True)
class DocumentInlineResult:
    """Rewritten markup plus the asset files successfully embedded in it."""

    html: str
    inlined_files: tuple[str, ...] = ()
    warnings: tuple[str, ...] = ()
    failed_references: int = 0


@dataclass
class InlinedFileSet:
    """Insertion-ordered, deduplicated set of inlined asset paths."""

    _paths: dict[str, None] = field(default_factory=dict)

    def add(self, path: str | Path) -> None:
        self._paths[str(path)] = None

    def update(self, paths: Iterable[str | Path]) -> None:
        for path in paths:
            self.add(path)

    def __contains__(self, path: object) -> bool:
        return str(path) in self._paths

    def __iter__(self):
        return iter(self._paths)

    def __len__(self) -> int:
        return len(self._paths)

    def as_tuple(self) -> tuple[str, ...]:
        return tuple(self._paths)
