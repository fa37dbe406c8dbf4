"""Reader for LCOV tracefiles (``lcov.info``)."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from covgate.errors import CoverageDataError
from covgate.model.coverage import Counts
from covgate.model.types import CoverageMetric

if TYPE_CHECKING:
    from collections.abc import Iterable
    from pathlib import Path

    from covgate.model.coverage import MetricCounts

_SUMMARY_KEYS = {"LF", "LH", "FNF", "FNH", "BRF", "BRH"}


@dataclass(slots=True)
class _Record:
    file: str
    summary: dict[str, int] = field(default_factory=dict)
    lines: dict[int, int] = field(default_factory=dict)
    functions: dict[str, int] = field(default_factory=dict)
    branches: dict[tuple[str, str, str], bool] = field(default_factory=dict)
    merged: bool = False

    def merge(self, other: _Record) -> None:
        """Fold a later record for the same source file into this one."""
        for key, value in other.summary.items():
            self.summary[key] = self.summary.get(key, 0) + value
        for line_no, hits in other.lines.items():
            self.lines[line_no] = max(self.lines.get(line_no, 0), hits)
        for name, hits in other.functions.items():
            self.functions[name] = self.functions.get(name, 0) + hits
        for key, taken in other.branches.items():
            self.branches[key] = self.branches.get(key, False) or taken
        self.merged = True

    def counts(self) -> MetricCounts:
        lines = self._pair("LH", "LF", sum(1 for h in self.lines.values() if h > 0), len(self.lines))
        functions = self._pair(
            "FNH", "FNF", sum(1 for h in self.functions.values() if h > 0), len(self.functions)
        )
        branches = self._pair("BRH", "BRF", sum(1 for hit in self.branches.values() if hit), len(self.branches))
        return {
            # LCOV has no statement records; statements mirror lines
            CoverageMetric.STATEMENTS: lines,
            CoverageMetric.BRANCHES: branches,
            CoverageMetric.FUNCTIONS: functions,
            CoverageMetric.LINES: lines,
        }

    def _pair(self, hit_key: str, found_key: str, hit: int, found: int) -> Counts:
        # merged records are recounted from their detail lines when they have any
        if found_key in self.summary and hit_key in self.summary and not (self.merged and found):
            return Counts(covered=self.summary[hit_key], total=self.summary[found_key])
        return Counts(covered=hit, total=found)


def parse_lcov(lines: Iterable[str], *, source: Path) -> dict[str, MetricCounts]:
    records: dict[str, _Record] = {}
    record: _Record | None = None
    for lineno, raw in enumerate(lines, start=1):
        line = raw.strip()
        if not line or line.startswith("TN:"):
            continue
        if line.startswith("SF:"):
            record = _Record(file=line[3:])
            continue
        if line == "end_of_record":
            if record is not None:
                if record.file in records:
                    records[record.file].merge(record)
                else:
                    records[record.file] = record
            record = None
            continue
        if record is None:
            continue
        key, _, value = line.partition(":")
        try:
            _apply(record, key, value)
        except (ValueError, IndexError) as exc:
            msg = f"malformed LCOV record at {source}:{lineno}: {line!r}"
            raise CoverageDataError(msg) from exc
    if record is not None:
        msg = f"unterminated LCOV record for {record.file!r} in {source}"
        raise CoverageDataError(msg)
    return {name: rec.counts() for name, rec in records.items()}


def _apply(record: _Record, key: str, value: str) -> None:
    if key in _SUMMARY_KEYS:
        record.summary[key] = int(value)
    elif key == "DA":
        parts = value.split(",")
        line_no, hits = int(parts[0]), int(parts[1])
        record.lines[line_no] = max(record.lines.get(line_no, 0), hits)
    elif key == "FN":
        name = value.rsplit(",", 1)[1]
        record.functions.setdefault(name, 0)
    elif key == "FNDA":
        hits, name = value.split(",", 1)
        record.functions[name] = record.functions.get(name, 0) + int(hits)
    elif key == "BRDA":
        line_no, block, branch, taken = value.split(",")
        record.branches[(line_no, block, branch)] = taken not in {"-", "0"}


def read_lcov(path: Path) -> dict[str, MetricCounts]:
    try:
        with path.open(encoding="utf-8") as fh:
            return parse_lcov(fh, source=path)
    except UnicodeDecodeError as exc:
        msg = f"failed to decode LCOV tracefile {path}: {exc}"
        raise CoverageDataError(msg) from exc


__all__ = ["parse_lcov", "read_lcov"]
