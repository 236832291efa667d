"""Pydantic schemas for runtime validation of pipeline inputs."""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, field_validator


class PipelineConfig(BaseModel):
    """Validated input for a single-file pipeline run."""

    model_config = ConfigDict(extra="forbid")

    output_dir: Path
    delete_inlined_files: bool = True
    max_asset_failures: int | None = Field(default=None, ge=0)
    cache_size: int | None = Field(default=None, ge=1)
    esbuild_path: str | None = None

    @field_validator("output_dir")
    @classmethod
    def _absolute_output_dir(cls, value: Path) -> Path:
        if not str(value).strip():
            raise ValueError("output_dir cannot be empty.")
        return value.expanduser().resolve()

    @field_validator("esbuild_path")
    @classmethod
    def _validate_esbuild_path(cls, value: str | None) -> str | None:
        if value is None:
            return None
        if not value.strip():
            raise ValueError("esbuild_path cannot be blank.")
        return value.strip()
