"""Readers for Istanbul's ``coverage-final.json`` and ``coverage-summary.json``."""

from __future__ import annotations

import json
from typing import TYPE_CHECKING, Any

from covgate.errors import CoverageDataError
from covgate.model.coverage import Counts
from covgate.model.types import CoverageMetric

if TYPE_CHECKING:
    from pathlib import Path

    from covgate.model.coverage import MetricCounts

_SUMMARY_TOTAL_KEY = "total"


def read_json(path: Path) -> dict[str, Any]:
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        msg = f"failed to parse coverage JSON {path}: {exc}"
        raise CoverageDataError(msg) from exc
    if not isinstance(data, dict):
        msg = f"unexpected top-level value in {path}: expected an object"
        raise CoverageDataError(msg)
    return data


def is_summary(data: dict[str, Any]) -> bool:
    """``True`` for ``coverage-summary.json`` documents (per-metric totals)."""
    for key, entry in data.items():
        if key == _SUMMARY_TOTAL_KEY or not isinstance(entry, dict):
            continue
        return isinstance(entry.get("lines"), dict) and "statementMap" not in entry
    return _SUMMARY_TOTAL_KEY in data


def parse_final(data: dict[str, Any], *, source: Path) -> dict[str, MetricCounts]:
    """Count covered/total per metric from raw Istanbul hit maps."""
    out: dict[str, MetricCounts] = {}
    for key, entry in data.items():
        if not isinstance(entry, dict):
            msg = f"malformed coverage entry {key!r} in {source}"
            raise CoverageDataError(msg)
        try:
            # older istanbul versions wrap each file in {"data": {...}}
            file_data = entry.get("data", entry)
            path = str(file_data.get("path") or key)
            out[path] = _file_counts(file_data)
        except (AttributeError, KeyError, TypeError, ValueError) as exc:
            msg = f"malformed coverage entry {key!r} in {source}: {exc}"
            raise CoverageDataError(msg) from exc
    return out


def _file_counts(file_data: dict[str, Any]) -> MetricCounts:
    statements: dict[str, int] = file_data.get("s", {})
    functions: dict[str, int] = file_data.get("f", {})
    branches: dict[str, list[int]] = file_data.get("b", {})
    statement_map: dict[str, Any] = file_data.get("statementMap", {})

    line_hits: dict[int, int] = {}
    for sid, hits in statements.items():
        loc = statement_map.get(sid)
        if loc is None:
            continue
        line = int(loc["start"]["line"])
        line_hits[line] = max(line_hits.get(line, 0), int(hits))

    arms = [int(h) for counts in branches.values() for h in counts]
    return {
        CoverageMetric.STATEMENTS: _hit_counts(int(h) for h in statements.values()),
        CoverageMetric.BRANCHES: _hit_counts(arms),
        CoverageMetric.FUNCTIONS: _hit_counts(int(h) for h in functions.values()),
        CoverageMetric.LINES: _hit_counts(line_hits.values()),
    }


def _hit_counts(hits: Any) -> Counts:
    values = list(hits)
    return Counts(covered=sum(1 for h in values if h > 0), total=len(values))


def parse_summary(data: dict[str, Any], *, source: Path) -> dict[str, MetricCounts]:
    """Read per-file ``{covered, total}`` pairs; the ``total`` entry is skipped."""
    out: dict[str, MetricCounts] = {}
    for path, entry in data.items():
        if path == _SUMMARY_TOTAL_KEY:
            continue
        if not isinstance(entry, dict):
            msg = f"malformed coverage summary entry {path!r} in {source}"
            raise CoverageDataError(msg)
        metrics: dict[CoverageMetric, Counts] = {}
        for metric in CoverageMetric:
            block = entry.get(metric.value)
            if block is None:
                continue
            try:
                metrics[metric] = Counts(covered=int(block["covered"]), total=int(block["total"]))
            except (KeyError, TypeError, ValueError) as exc:
                msg = f"malformed {metric.value} summary for {path!r} in {source}"
                raise CoverageDataError(msg) from exc
        out[path] = metrics
    return out


__all__ = ["is_summary", "parse_final", "parse_summary", "read_json"]
