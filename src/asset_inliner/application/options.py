"""Typed option objects shared across pipeline use-cases."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True)
class CacheOptions:
    """Bundle cache configuration.

    ``max_entries=None`` keeps every entry for the lifetime of the cache.
    """

    max_entries: int | None = None


@dataclass(frozen=True)
class CleanupOptions:
    """Post-inlining cleanup configuration."""

    delete_inlined_files: bool = True


@dataclass(frozen=True)
class InlineOptions:
    """Asset inlining configuration.

    ``max_asset_failures=None`` never fails the inlining step on
    per-reference failures; they stay warnings.
    """

    max_asset_failures: int | None = None
    esbuild_path: str | None = None


@dataclass(frozen=True)
class PipelineOptions:
    """Options passed through the single-file pipeline."""

    inline: InlineOptions = field(default_factory=InlineOptions)
    cache: CacheOptions = field(default_factory=CacheOptions)
    cleanup: CleanupOptions = field(default_factory=CleanupOptions)
