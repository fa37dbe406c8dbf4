from __future__ import annotations

from typing import TYPE_CHECKING

from covgate.errors import CoverageDataNotFoundError

if TYPE_CHECKING:
    from collections.abc import Sequence
    from pathlib import Path

# Looked up, in this order, inside the coverage directory.
DEFAULT_FILENAMES: tuple[str, ...] = (
    "coverage-final.json",
    "coverage-summary.json",
    "lcov.info",
    "cobertura-coverage.xml",
    "coverage.xml",
)


def resolve_coverage_paths(cov_paths: Sequence[Path] | None, coverage_directory: Path) -> tuple[Path, ...]:
    """Resolve coverage inputs.

    Rules
    -----
    - If `cov_paths` are provided: they must exist.
    - Else: use the first known report file inside `coverage_directory`.
    """
    paths = tuple(cov_paths or ())
    if paths:
        missing = [p for p in paths if not p.exists()]
        if missing:
            msg = f"coverage input not found: {', '.join(str(p) for p in missing)}"
            raise CoverageDataNotFoundError(msg)
        return tuple(p.resolve() for p in paths)

    for name in DEFAULT_FILENAMES:
        candidate = coverage_directory / name
        if candidate.is_file():
            return (candidate.resolve(),)

    msg = f"no coverage input provided and none of {', '.join(DEFAULT_FILENAMES)} found in {coverage_directory}"
    raise CoverageDataNotFoundError(msg)


__all__ = ["DEFAULT_FILENAMES", "resolve_coverage_paths"]
