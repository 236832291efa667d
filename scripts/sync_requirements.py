#!/usr/bin/env python3
"""Keep requirements.txt in step with the pyproject.toml declarations.

Run without arguments to regenerate the file, or with ``--check`` to fail
when it has drifted.
"""

from __future__ import annotations

import argparse
import tomllib
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
REQUIREMENTS = ROOT / "requirements.txt"
# Extras installed alongside the base dependencies in CI.
SYNC_EXTRAS = ("cli",)
HEADER = (
    f"# Generated from pyproject.toml (base + extras: {','.join(SYNC_EXTRAS)})\n"
    "# Do not edit manually; run: python scripts/sync_requirements.py\n"
    "\n"
)


def _declared() -> set[str]:
    project = tomllib.loads((ROOT / "pyproject.toml").read_text(encoding="utf-8"))["project"]
    deps = set(project.get("dependencies", []))
    optional = project.get("optional-dependencies", {})
    for extra in SYNC_EXTRAS:
        deps.update(optional.get(extra, []))
    return {dep.strip() for dep in deps if dep.strip()}


def _pinned() -> set[str]:
    lines = REQUIREMENTS.read_text(encoding="utf-8").splitlines()
    return {entry for line in lines if (entry := line.split("#", 1)[0].strip())}


def check() -> None:
    """Exit non-zero when requirements.txt and pyproject.toml disagree."""
    declared, pinned = _declared(), _pinned()
    if declared == pinned:
        print("Dependency sync check passed.")
        return
    parts = ["requirements.txt is out of sync with pyproject.toml."]
    parts.extend(f"- missing: {entry}" for entry in sorted(declared - pinned))
    parts.extend(f"- unexpected: {entry}" for entry in sorted(pinned - declared))
    raise SystemExit("\n".join(parts))


def generate() -> None:
    """Rewrite requirements.txt from pyproject.toml."""
    reqs = sorted(_declared())
    REQUIREMENTS.write_text(HEADER + "\n".join(reqs) + "\n", encoding="utf-8")
    print(f"Wrote {len(reqs)} requirements to {REQUIREMENTS.name}")


def main() -> None:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument("--check", action="store_true", help="Verify instead of writing.")
    args = parser.parse_args()
    if args.check:
        check()
    else:
        generate()


if __name__ == "__main__":
    main()
