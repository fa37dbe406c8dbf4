from __future__ import annotations

import re
from dataclasses import dataclass, fields
from typing import TYPE_CHECKING, Any

from covgate import logger
from covgate.errors import ConfigError
from covgate.model.pattern import PathPattern, normalize_label
from covgate.model.types import FULL_COVERAGE, GLOBAL_SCOPE, METRICS, CoverageMetric

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping, Sequence

_THRESHOLD_PATTERN = re.compile(r"^[a-zA-Z_-]+=")

_ALIASES: dict[str, CoverageMetric] = {
    "stmt": CoverageMetric.STATEMENTS,
    "statement": CoverageMetric.STATEMENTS,
    "statements": CoverageMetric.STATEMENTS,
    "br": CoverageMetric.BRANCHES,
    "branch": CoverageMetric.BRANCHES,
    "branches": CoverageMetric.BRANCHES,
    "fn": CoverageMetric.FUNCTIONS,
    "func": CoverageMetric.FUNCTIONS,
    "function": CoverageMetric.FUNCTIONS,
    "functions": CoverageMetric.FUNCTIONS,
    "line": CoverageMetric.LINES,
    "lines": CoverageMetric.LINES,
}


@dataclass(frozen=True, slots=True)
class ThresholdSpec:
    """Minimum coverage percentages (0..100), one optional value per metric."""

    statements: float | None = None
    branches: float | None = None
    functions: float | None = None
    lines: float | None = None

    def __post_init__(self) -> None:
        for f in fields(self):
            value = getattr(self, f.name)
            if value is None:
                continue
            if isinstance(value, bool) or not isinstance(value, int | float):
                msg = f"threshold for {f.name} must be a number, got {value!r}"
                raise ConfigError(msg)
            if value < 0 or value > FULL_COVERAGE:
                msg = f"threshold for {f.name} out of range [0, {FULL_COVERAGE}]: {value}"
                raise ConfigError(msg)

    def is_empty(self) -> bool:
        return all(getattr(self, m.value) is None for m in METRICS)

    def get(self, metric: CoverageMetric) -> float | None:
        return getattr(self, metric.value)

    def items(self) -> list[tuple[CoverageMetric, float]]:
        """Configured ``(metric, threshold)`` pairs in metric order."""
        out: list[tuple[CoverageMetric, float]] = []
        for m in METRICS:
            value = self.get(m)
            if value is not None:
                out.append((m, float(value)))
        return out

    @classmethod
    def from_mapping(cls, data: Mapping[str, object], *, where: str = "threshold") -> ThresholdSpec:
        values: dict[str, Any] = {}
        for key, value in data.items():
            metric = _ALIASES.get(str(key).strip().lower())
            if metric is None:
                msg = f"unknown coverage metric {key!r} in {where}"
                raise ConfigError(msg)
            if metric.value in values:
                msg = f"duplicate coverage metric {key!r} in {where}"
                raise ConfigError(msg)
            values[metric.value] = value
        return cls(**values)


@dataclass(frozen=True, slots=True)
class ThresholdOverride:
    """Per-path thresholds that replace the global check for the metrics they list."""

    pattern: PathPattern
    spec: ThresholdSpec


@dataclass(frozen=True, slots=True)
class ThresholdTable:
    """Global thresholds plus ordered per-path overrides."""

    global_spec: ThresholdSpec = ThresholdSpec()
    overrides: tuple[ThresholdOverride, ...] = ()

    @classmethod
    def from_mapping(
        cls,
        global_threshold: Mapping[str, object] | None = None,
        overrides: Mapping[str, Mapping[str, object]] | None = None,
    ) -> ThresholdTable:
        """Build a validated table, raising :class:`ConfigError` on any bad entry."""
        global_spec = ThresholdSpec.from_mapping(global_threshold or {}, where="global threshold")
        compiled: list[ThresholdOverride] = []
        for key, data in (overrides or {}).items():
            where = f"override {key!r}"
            spec = ThresholdSpec.from_mapping(data, where=where)
            if spec.is_empty():
                msg = f"{where} must specify at least one metric"
                raise ConfigError(msg)
            compiled.append(ThresholdOverride(pattern=PathPattern.compile(key), spec=spec))
        return cls(global_spec=global_spec, overrides=tuple(compiled))

    def override_for(self, path: str) -> ThresholdOverride | None:
        """Return the most specific override matching *path*.

        Literal paths beat globs, longer patterns beat shorter ones, and the
        first declared override wins any remaining tie.
        """
        best: ThresholdOverride | None = None
        best_rank: tuple[bool, int] = (False, -1)
        for ov in self.overrides:
            if not ov.pattern.matches(path):
                continue
            rank = (ov.pattern.is_literal, len(ov.pattern.source))
            if best is None or rank > best_rank:
                best, best_rank = ov, rank
        return best

    def global_exclusions(self, paths: Iterable[str]) -> dict[str, frozenset[CoverageMetric]]:
        """Metrics of each overridden path that must not feed the global sums."""
        out: dict[str, frozenset[CoverageMetric]] = {}
        for path in paths:
            ov = self.override_for(normalize_label(path))
            if ov is not None:
                out[normalize_label(path)] = frozenset(m for m, _ in ov.spec.items())
        return out


@dataclass(frozen=True, slots=True)
class Verdict:
    """Pass/fail outcome for one (scope, metric) pair."""

    scope: str
    metric: CoverageMetric
    actual: float
    required: float
    passed: bool


@dataclass(frozen=True, slots=True)
class ThresholdsResult:
    """Outcome of evaluating a threshold table."""

    passed: bool
    failures: list[Verdict]


def evaluate(
    table: ThresholdTable,
    per_file: Mapping[str, Mapping[CoverageMetric, float]],
    overall: Mapping[CoverageMetric, float],
) -> list[Verdict]:
    """Return a verdict for every configured (scope, metric) pair.

    A verdict fails iff ``actual < required``; equality passes. All verdicts
    are produced, so callers can report every failure in one pass.
    """
    verdicts: list[Verdict] = [
        _verdict(GLOBAL_SCOPE, metric, overall.get(metric, float(FULL_COVERAGE)), required)
        for metric, required in table.global_spec.items()
    ]

    matched: set[str] = set()
    for path in sorted(per_file):
        ov = table.override_for(path)
        if ov is None:
            continue
        matched.add(ov.pattern.source)
        verdicts.extend(
            _verdict(path, metric, per_file[path].get(metric, 0.0), required)
            for metric, required in ov.spec.items()
        )

    for ov in table.overrides:
        if ov.pattern.source not in matched:
            logger.warning("threshold override %s was not applied to any covered file", ov.pattern.source)

    return verdicts


def summarize(verdicts: Sequence[Verdict]) -> ThresholdsResult:
    failures = [v for v in verdicts if not v.passed]
    return ThresholdsResult(passed=not failures, failures=failures)


def _verdict(scope: str, metric: CoverageMetric, actual: float, required: float) -> Verdict:
    return Verdict(scope=scope, metric=metric, actual=actual, required=required, passed=not actual < required)


def parse_threshold(expression: str) -> ThresholdSpec:
    """Parse an expression like 'statements=90,branches=80 fn=50 lines=90%'."""
    if not expression or not expression.strip():
        msg = "threshold expression must be non-empty"
        raise ConfigError(msg)

    values: dict[str, object] = {}
    tokens = [token.strip() for token in re.split(r"[,\s]+", expression) if token.strip()]
    for token in tokens:
        if "=" not in token or not _THRESHOLD_PATTERN.match(token):
            msg = f"invalid threshold token: {token!r}"
            raise ConfigError(msg)

        key, raw_value = token.split("=", 1)
        key = key.strip().lower()
        metric = _ALIASES.get(key)
        if metric is None:
            msg = f"unknown threshold metric: {key!r}"
            raise ConfigError(msg)
        if metric.value in values:
            msg = f"duplicate percentage constraint in {token!r}"
            raise ConfigError(msg)
        values[metric.value] = _parse_percentage(raw_value.strip().rstrip("%"), token=token)

    return ThresholdSpec.from_mapping(values, where="threshold expression")


def _parse_percentage(value: str, *, token: str) -> float:
    try:
        percent = float(value)
    except ValueError as exc:
        msg = f"invalid percentage value in {token!r}: {value!r}"
        raise ConfigError(msg) from exc
    if percent < 0 or percent > float(FULL_COVERAGE):
        msg = f"percentage out of range in {token!r}: {percent}"
        raise ConfigError(msg)
    return percent


__all__ = [
    "ThresholdOverride",
    "ThresholdSpec",
    "ThresholdTable",
    "ThresholdsResult",
    "Verdict",
    "evaluate",
    "parse_threshold",
    "summarize",
]
