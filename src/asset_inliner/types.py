"""Shared type aliases and enums for inliner modules."""

from __future__ import annotations

from enum import StrEnum
from pathlib import Path
from typing import Literal, TypeAlias

BuildStatus: TypeAlias = Literal["success", "error"]
PathLike: TypeAlias = str | Path


class AssetKind(StrEnum):
    """Asset kinds the engine knows how to embed."""

    STYLESHEET = "stylesheet"
    IMAGE = "image"
    SCRIPT = "script"


class OrchestratorState(StrEnum):
    """Lifecycle of a step orchestrator."""

    IDLE = "idle"
    RUNNING = "running"
    SUCCEEDED = "succeeded"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in (OrchestratorState.SUCCEEDED, OrchestratorState.FAILED)
