from __future__ import annotations

import shutil
from typing import TYPE_CHECKING

import pytest

from covgate import pipeline
from covgate.config import load_config
from covgate.errors import CoverageDataNotFoundError, DiscoveryError
from covgate.model.types import GLOBAL_SCOPE, CoverageMetric
from covgate.pipeline import UnexpectedError, run_check

if TYPE_CHECKING:
    from pathlib import Path

S = CoverageMetric.STATEMENTS


def test_reform_project_check(reform_project: Path) -> None:
    outcome = run_check(load_config(cwd=reform_project))

    assert outcome.tests == (
        "__tests__/Helpers_Test.res.js",
        "__tests__/ReForm_Test.res.js",
        "src/Validation_Test.res.js",
    )
    assert outcome.inputs == ((reform_project / "coverage/coverage-summary.json").resolve(),)
    assert outcome.coverage.files == ("src/ReForm.res.js", "src/ReForm__Helpers.res.js")
    # the helper's counters are checked on their own, not folded into the global sums
    assert outcome.coverage.overall[S] == pytest.approx(20.0)

    assert len(outcome.verdicts) == 8
    assert [v.scope for v in outcome.verdicts[:4]] == [GLOBAL_SCOPE] * 4
    assert not outcome.passed
    (failure,) = outcome.result.failures
    assert (failure.scope, failure.metric, failure.required) == ("src/ReForm__Helpers.res.js", S, 100.0)
    assert failure.actual == pytest.approx(99.9)


def test_check_without_discovery(reform_project: Path) -> None:
    outcome = run_check(load_config(cwd=reform_project), run_discovery=False)
    assert outcome.tests is None


def test_missing_test_root_aborts(reform_project: Path) -> None:
    shutil.rmtree(reform_project / "__tests__")
    with pytest.raises(DiscoveryError, match="test root not found"):
        run_check(load_config(cwd=reform_project))


def test_missing_coverage_input(reform_project: Path) -> None:
    (reform_project / "coverage" / "coverage-summary.json").unlink()
    with pytest.raises(CoverageDataNotFoundError):
        run_check(load_config(cwd=reform_project))


def test_unexpected_errors_are_wrapped(reform_project: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    def boom(*_args: object, **_kwargs: object) -> None:
        msg = "disk on fire"
        raise RuntimeError(msg)

    monkeypatch.setattr(pipeline, "load_coverage", boom)
    with pytest.raises(UnexpectedError, match="disk on fire"):
        run_check(load_config(cwd=reform_project))
