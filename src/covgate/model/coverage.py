"""Coverage counters and their aggregation (pure core, no IO).

Per-file percentages come straight from each file's counters. The global
percentage of a metric is total-weighted: ``sum(covered) / sum(total)`` over
the included files, never an average of the per-file percentages, which
would bias the result toward small files.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, TypeAlias

from covgate import logger
from covgate.errors import CoverageDataError
from covgate.model.pattern import matches_any, normalize_label
from covgate.model.types import FULL_COVERAGE, METRICS, CoverageMetric

if TYPE_CHECKING:
    from collections.abc import Collection, Iterable, Mapping

    from covgate.model.pattern import PathPattern


@dataclass(frozen=True, slots=True)
class Counts:
    """Covered/total pair for one metric."""

    covered: int = 0
    total: int = 0

    def __post_init__(self) -> None:
        if self.covered < 0 or self.total < 0:
            msg = f"coverage counts must be non-negative (covered={self.covered}, total={self.total})"
            raise CoverageDataError(msg)
        if self.covered > self.total:
            msg = f"covered count exceeds total ({self.covered} > {self.total})"
            raise CoverageDataError(msg)

    @property
    def missed(self) -> int:
        return self.total - self.covered

    @property
    def percent(self) -> float:
        return pct(self.covered, self.total)

    def __add__(self, other: Counts) -> Counts:
        return Counts(self.covered + other.covered, self.total + other.total)


EMPTY = Counts()

MetricCounts: TypeAlias = "Mapping[CoverageMetric, Counts]"
FileCoverage: TypeAlias = "Mapping[str, MetricCounts]"


def pct(covered: int, total: int) -> float:
    """Percentage of *covered* in *total*; ``0.0`` when there is nothing to cover."""
    if total == 0:
        return 0.0
    return (covered / total) * FULL_COVERAGE


@dataclass(frozen=True, slots=True)
class CoverageSummary:
    """Result of :func:`aggregate`.

    Fields
    ------
    per_file:
        Percentages of every included file, keyed by path label.
    overall:
        Global percentage per metric.
    totals:
        Summed counters behind ``overall`` (after any global exclusions).
    files:
        Included path labels, sorted.
    """

    per_file: dict[str, dict[CoverageMetric, float]]
    overall: dict[CoverageMetric, float]
    totals: dict[CoverageMetric, Counts]
    files: tuple[str, ...] = field(default=())
    counts: dict[str, dict[CoverageMetric, Counts]] = field(default_factory=dict)


def aggregate(
    coverage_globs: Iterable[PathPattern],
    raw: FileCoverage,
    *,
    exclude_from_global: Mapping[str, Collection[CoverageMetric]] | None = None,
) -> CoverageSummary:
    """Compute per-file and global percentages for files matching *coverage_globs*.

    Files in *raw* that match no glob are ignored entirely. When no file is
    included the global percentage of every metric is ``100``. Metrics listed
    for a path in *exclude_from_global* do not contribute that file's counts
    to the global sums; a metric left with no contributing file is treated the
    same way as an empty file set.
    """
    globs = tuple(coverage_globs)
    exclusions = {normalize_label(k): frozenset(v) for k, v in (exclude_from_global or {}).items()}

    per_file: dict[str, dict[CoverageMetric, float]] = {}
    counts: dict[str, dict[CoverageMetric, Counts]] = {}
    sums: dict[CoverageMetric, Counts] = dict.fromkeys(METRICS, EMPTY)
    contributors: dict[CoverageMetric, int] = dict.fromkeys(METRICS, 0)

    for path in sorted(raw):
        label = normalize_label(path)
        if not matches_any(globs, label):
            logger.debug("coverage entry %s matches no coverage glob; skipped", label)
            continue
        metrics = raw[path]
        file_counts = {m: metrics.get(m, EMPTY) for m in METRICS}
        counts[label] = file_counts
        per_file[label] = {m: c.percent for m, c in file_counts.items()}

        carved = exclusions.get(label, frozenset())
        for m, c in file_counts.items():
            if m in carved:
                continue
            sums[m] += c
            contributors[m] += 1

    overall = {m: (float(FULL_COVERAGE) if contributors[m] == 0 else sums[m].percent) for m in METRICS}
    return CoverageSummary(
        per_file=per_file,
        overall=overall,
        totals=sums,
        files=tuple(per_file),
        counts=counts,
    )


__all__ = [
    "EMPTY",
    "CoverageSummary",
    "Counts",
    "FileCoverage",
    "MetricCounts",
    "aggregate",
    "pct",
]
