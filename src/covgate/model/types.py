"""Shared type aliases and enumerations used across covgate."""

from __future__ import annotations

from enum import StrEnum

# ---------------------------------------------------------------------------
# Enumerations
# ---------------------------------------------------------------------------


class CoverageMetric(StrEnum):
    """The four counters produced by the instrumentation engine."""

    STATEMENTS = "statements"
    BRANCHES = "branches"
    FUNCTIONS = "functions"
    LINES = "lines"


METRICS: tuple[CoverageMetric, ...] = tuple(CoverageMetric)

FULL_COVERAGE: int = 100

GLOBAL_SCOPE = "global"


__all__ = [
    "FULL_COVERAGE",
    "GLOBAL_SCOPE",
    "METRICS",
    "CoverageMetric",
]
