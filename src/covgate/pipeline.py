"""End-to-end check: discover -> load coverage -> aggregate -> evaluate.

Configuration and discovery failures abort the run immediately. Threshold
failures never do: every stage runs to completion and all failing verdicts
are returned together in :class:`CheckOutcome`.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from covgate import logger
from covgate.discover import discover
from covgate.errors import CovgateError
from covgate.inputs import load_coverage, resolve_coverage_paths
from covgate.model.coverage import aggregate
from covgate.model.thresholds import evaluate, summarize

if TYPE_CHECKING:
    from collections.abc import Sequence
    from pathlib import Path

    from covgate.config import Config
    from covgate.model.coverage import CoverageSummary
    from covgate.model.thresholds import ThresholdsResult, Verdict


class UnexpectedError(CovgateError):
    """Unexpected failure while running the check."""


@dataclass(frozen=True, slots=True)
class CheckOutcome:
    """Everything a reporter needs about one check run."""

    tests: tuple[str, ...] | None
    coverage: CoverageSummary
    verdicts: list[Verdict]
    result: ThresholdsResult
    inputs: tuple[Path, ...] = ()

    @property
    def passed(self) -> bool:
        return self.result.passed


def discover_tests(config: Config, *, timeout: float | None = None) -> list[str]:
    return discover(
        config.roots,
        config.test_pattern,
        config.ignore_patterns,
        base=config.root_dir,
        timeout=timeout if timeout is not None else config.discovery_timeout,
    )


def run_check(
    config: Config,
    *,
    coverage_paths: Sequence[Path] | None = None,
    run_discovery: bool = True,
    timeout: float | None = None,
) -> CheckOutcome:
    """Run the whole pipeline for *config*.

    Raises :class:`~covgate.errors.DiscoveryError` and
    :class:`~covgate.errors.CoverageDataError` as-is; anything unexpected is
    logged and re-raised as :class:`UnexpectedError`.
    """
    try:
        tests = tuple(discover_tests(config, timeout=timeout)) if run_discovery else None
        inputs = resolve_coverage_paths(coverage_paths, config.coverage_directory)
        raw = load_coverage(inputs, base=config.root_dir)
        summary = aggregate(
            config.coverage_globs,
            raw,
            exclude_from_global=config.thresholds.global_exclusions(raw),
        )
        verdicts = evaluate(config.thresholds, summary.per_file, summary.overall)
    except CovgateError:
        raise
    except Exception as exc:
        logger.exception("unexpected failure")
        raise UnexpectedError(str(exc)) from exc

    result = summarize(verdicts)
    logger.info(
        "coverage collected from %d file(s); %d verdict(s), %d failing",
        len(summary.files),
        len(verdicts),
        len(result.failures),
    )
    return CheckOutcome(tests=tests, coverage=summary, verdicts=verdicts, result=result, inputs=inputs)


__all__ = ["CheckOutcome", "UnexpectedError", "discover_tests", "run_check"]
