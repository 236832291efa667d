#!/usr/bin/env python3
"""Architecture boundary checks."""

from __future__ import annotations

from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
PACKAGE = ROOT / "src/asset_inliner"


def _read(path: Path) -> str:
    return path.read_text(encoding="utf-8")


def _assert_no_imports(path: Path, banned: list[str]) -> None:
    text = _read(path)
    for token in banned:
        if token in text:
            raise SystemExit(f"Architecture violation in {path}: found '{token}'")


def main() -> None:
    """Run repository architecture boundary checks."""
    for path in (PACKAGE / "application").glob("*.py"):
        _assert_no_imports(
            path,
            [
                "import typer",
                "from typer",
                "import bs4",
                "from bs4",
            ],
        )

    # Markup access goes through the MarkupDocument port.
    for sub in ("inlining", "pipeline", "infrastructure"):
        for path in (PACKAGE / sub).glob("*.py"):
            _assert_no_imports(path, ["import bs4", "from bs4", "import typer", "from typer"])

    for path in PACKAGE.rglob("*.py"):
        if path.parent.name == "cli":
            continue
        _assert_no_imports(path, ["import typer", "from typer"])

    print("Architecture checks passed.")


if __name__ == "__main__":
    main()
