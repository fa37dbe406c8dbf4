from __future__ import annotations

import json
from typing import TYPE_CHECKING

from jsonschema import validate

from covgate import __version__
from covgate.config import get_schema
from covgate.model.coverage import EMPTY
from covgate.model.types import METRICS

if TYPE_CHECKING:
    from covgate.model.coverage import Counts
    from covgate.model.types import CoverageMetric
    from covgate.pipeline import CheckOutcome


def _metric_block(counts: Counts, percent: float) -> dict[str, object]:
    return {"covered": counts.covered, "total": counts.total, "pct": round(percent, 2)}


def _metrics(counts: dict[CoverageMetric, Counts], percents: dict[CoverageMetric, float]) -> dict[str, object]:
    return {m.value: _metric_block(counts.get(m, EMPTY), percents[m]) for m in METRICS}


def format_json(outcome: CheckOutcome) -> str:
    """Render a check outcome as JSON validated against the packaged report schema."""
    cov = outcome.coverage
    payload: dict[str, object] = {
        "schema": str(get_schema("report")["$id"]),
        "tool": {"name": "covgate", "version": __version__},
        "passed": outcome.passed,
        "tests": list(outcome.tests) if outcome.tests is not None else None,
        "coverage": {
            "global": _metrics(cov.totals, cov.overall),
            "files": {path: _metrics(cov.counts[path], cov.per_file[path]) for path in cov.files},
        },
        "verdicts": [
            {
                "scope": v.scope,
                "metric": v.metric.value,
                "actual": round(v.actual, 2),
                "required": v.required,
                "passed": v.passed,
            }
            for v in outcome.verdicts
        ],
    }

    validate(payload, get_schema("report"))
    return json.dumps(payload, indent=2, sort_keys=True)


__all__ = ["format_json"]
