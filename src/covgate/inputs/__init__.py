"""Readers turning instrumentation output into :data:`FileCoverage`."""

from __future__ import annotations

from typing import TYPE_CHECKING

from covgate import logger
from covgate.errors import CoverageDataError
from covgate.files import path_label
from covgate.inputs.cobertura import read_cobertura
from covgate.inputs.discover import DEFAULT_FILENAMES, resolve_coverage_paths
from covgate.inputs.istanbul import is_summary, parse_final, parse_summary, read_json
from covgate.inputs.lcov import read_lcov

if TYPE_CHECKING:
    from collections.abc import Iterable
    from pathlib import Path

    from covgate.model.coverage import MetricCounts


def read_coverage_file(path: Path) -> dict[str, MetricCounts]:
    """Read one coverage report, choosing the reader from the file name."""
    suffix = path.suffix.lower()
    if suffix == ".json":
        data = read_json(path)
        return parse_summary(data, source=path) if is_summary(data) else parse_final(data, source=path)
    if suffix == ".xml":
        return read_cobertura(path)
    if suffix in {".info", ".lcov"}:
        return read_lcov(path)
    msg = f"unsupported coverage input format: {path.name}"
    raise CoverageDataError(msg)


def load_coverage(paths: Iterable[Path], *, base: Path) -> dict[str, MetricCounts]:
    """Merge coverage reports into one mapping keyed by root-relative path label.

    A file reported by more than one input is rejected: counters from
    separate reports cannot be merged without double counting.
    """
    merged: dict[str, MetricCounts] = {}
    origin: dict[str, Path] = {}
    for path in paths:
        try:
            entries = read_coverage_file(path)
        except OSError as exc:
            msg = f"failed to read coverage input {path}: {exc}"
            raise CoverageDataError(msg) from exc
        logger.debug("read %d file(s) from %s", len(entries), path)
        for name, counts in entries.items():
            label = path_label(name, base)
            if label in merged:
                msg = f"{label} is reported by both {origin[label]} and {path}"
                raise CoverageDataError(msg)
            merged[label] = counts
            origin[label] = path
    return merged


__all__ = [
    "DEFAULT_FILENAMES",
    "load_coverage",
    "read_coverage_file",
    "resolve_coverage_paths",
]
