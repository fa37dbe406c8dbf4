"""Domain model for covgate (pure types + policy; no IO)."""

from .coverage import Counts, CoverageSummary, FileCoverage, aggregate, pct
from .pattern import PathPattern, compile_patterns, matches, normalize_label
from .thresholds import (
    ThresholdOverride,
    ThresholdSpec,
    ThresholdsResult,
    ThresholdTable,
    Verdict,
    evaluate,
    parse_threshold,
    summarize,
)
from .types import GLOBAL_SCOPE, METRICS, CoverageMetric

__all__ = [
    "GLOBAL_SCOPE",
    "METRICS",
    "Counts",
    "CoverageMetric",
    "CoverageSummary",
    "FileCoverage",
    "PathPattern",
    "ThresholdOverride",
    "ThresholdSpec",
    "ThresholdTable",
    "ThresholdsResult",
    "Verdict",
    "aggregate",
    "compile_patterns",
    "evaluate",
    "matches",
    "normalize_label",
    "parse_threshold",
    "pct",
    "summarize",
]
