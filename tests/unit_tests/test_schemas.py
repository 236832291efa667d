"""Unit tests for pipeline input validation."""

from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import ValidationError

from asset_inliner.application.use_cases import (
    build_pipeline_options,
    run_single_file_pipeline,
)
from asset_inliner.errors import ConfigurationError
from asset_inliner.schemas import PipelineConfig


def test_output_dir_made_absolute(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.chdir(tmp_path)
    config = PipelineConfig(output_dir=Path("dist"))
    assert config.output_dir == (tmp_path / "dist").resolve()


@pytest.mark.parametrize(
    "overrides",
    [
        {"max_asset_failures": -1},
        {"cache_size": 0},
        {"esbuild_path": "   "},
        {"unknown": True},
    ],
)
def test_invalid_values_rejected(tmp_path: Path, overrides: dict[str, object]) -> None:
    with pytest.raises(ValidationError):
        PipelineConfig(output_dir=tmp_path, **overrides)


@pytest.mark.asyncio
async def test_use_case_wraps_validation_errors(tmp_path: Path, bundler) -> None:
    options = build_pipeline_options(cache_size=0)
    with pytest.raises(ConfigurationError, match="Invalid pipeline parameters") as excinfo:
        await run_single_file_pipeline(output_dir=tmp_path, options=options, bundler=bundler)
    assert excinfo.value.exit_code == 2
