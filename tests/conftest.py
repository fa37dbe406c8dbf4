from __future__ import annotations

import json
import textwrap
from collections.abc import Callable, Iterable, Mapping, Sequence
from pathlib import Path
from typing import Any

import pytest
from click.testing import CliRunner

FileSpec = Mapping[str, Any]


@pytest.fixture
def cli_runner() -> CliRunner:
    """Return a Click CLI runner for invoking the command-line interface."""
    return CliRunner()


@pytest.fixture
def make_tree(tmp_path: Path) -> Callable[[Iterable[str]], Path]:
    """Create empty files (and their parents) below ``tmp_path``."""

    def build(files: Iterable[str]) -> Path:
        for rel in files:
            p = tmp_path / rel
            p.parent.mkdir(parents=True, exist_ok=True)
            p.write_text("// test\n", encoding="utf-8")
        return tmp_path

    return build


def istanbul_file_entry(
    path: str,
    *,
    statements: list[int],
    functions: Sequence[int] = (),
    branches: Sequence[Sequence[int]] = (),
    lines: list[int] | None = None,
) -> dict[str, Any]:
    """Build one ``coverage-final.json`` entry.

    ``statements`` holds hit counts; ``lines`` (same length) gives the start
    line of each statement and defaults to one statement per line.
    """
    starts = lines or list(range(1, len(statements) + 1))
    return {
        "path": path,
        "statementMap": {
            str(i): {"start": {"line": ln, "column": 0}, "end": {"line": ln, "column": 10}}
            for i, ln in enumerate(starts)
        },
        "fnMap": {str(i): {"name": f"fn{i}"} for i in range(len(functions))},
        "branchMap": {str(i): {"type": "if"} for i in range(len(branches))},
        "s": {str(i): hits for i, hits in enumerate(statements)},
        "f": {str(i): hits for i, hits in enumerate(functions)},
        "b": {str(i): list(arms) for i, arms in enumerate(branches)},
    }


def summary_entry(**metrics: tuple[int, int]) -> dict[str, Any]:
    """Build one ``coverage-summary.json`` entry from ``metric=(covered, total)``."""
    out: dict[str, Any] = {}
    for name, (covered, total) in metrics.items():
        pct = 100.0 if total == 0 else round(100.0 * covered / total, 2)
        out[name] = {"total": total, "covered": covered, "skipped": 0, "pct": pct}
    return out


@pytest.fixture
def write_summary(tmp_path: Path) -> Callable[..., Path]:
    def write(entries: Mapping[str, FileSpec], *, filename: str = "coverage/coverage-summary.json") -> Path:
        data: dict[str, Any] = {"total": summary_entry(lines=(0, 0))}
        data.update(entries)
        out = tmp_path / filename
        out.parent.mkdir(parents=True, exist_ok=True)
        out.write_text(json.dumps(data), encoding="utf-8")
        return out

    return write


REFORM_CONFIG = """
roots = ["<rootDir>/src/", "<rootDir>/__tests__/"]
test_pattern = "**/*_Test.res.js"
ignore_patterns = ["<rootDir>/lib/"]
coverage_globs = ["src/**/*.res.js"]
coverage_directory = "<rootDir>/coverage"

[global_threshold]
statements = 10
branches = 0
functions = 5
lines = 10

[overrides."./src/ReForm__Helpers.res.js"]
statements = 100
branches = 100
functions = 100
lines = 100
"""


@pytest.fixture
def reform_project(
    tmp_path: Path,
    make_tree: Callable[[Iterable[str]], Path],
    write_summary: Callable[..., Path],
) -> Path:
    """A small project laid out like a ReScript form library with Jest config."""
    make_tree([
        "src/ReForm.res.js",
        "src/ReForm__Helpers.res.js",
        "src/Validation_Test.res.js",
        "__tests__/ReForm_Test.res.js",
        "__tests__/Helpers_Test.res.js",
        "__tests__/fixtures/data.json",
        "lib/js/Stale_Test.res.js",
    ])
    (tmp_path / "covgate.toml").write_text(textwrap.dedent(REFORM_CONFIG), encoding="utf-8")
    write_summary({
        str(tmp_path / "src/ReForm.res.js"): summary_entry(
            statements=(20, 100), branches=(0, 10), functions=(1, 10), lines=(20, 100)
        ),
        str(tmp_path / "src/ReForm__Helpers.res.js"): summary_entry(
            statements=(999, 1000), branches=(10, 10), functions=(5, 5), lines=(1000, 1000)
        ),
        str(tmp_path / "__tests__/ReForm_Test.res.js"): summary_entry(
            statements=(0, 50), branches=(0, 4), functions=(0, 5), lines=(0, 50)
        ),
    })
    return tmp_path
