from __future__ import annotations

import logging
import textwrap
from typing import TYPE_CHECKING

import pytest

from covgate.config import DEFAULT_TEST_PATTERN, get_schema, load_config
from covgate.errors import ConfigError
from covgate.model.types import CoverageMetric

if TYPE_CHECKING:
    from pathlib import Path


def _write(path: Path, text: str) -> Path:
    path.write_text(textwrap.dedent(text), encoding="utf-8")
    return path


def test_load_reform_config(reform_project: Path) -> None:
    cfg = load_config(cwd=reform_project)
    assert cfg.source == reform_project / "covgate.toml"
    assert cfg.root_dir == reform_project
    assert cfg.roots == (f"{reform_project.as_posix()}/src/", f"{reform_project.as_posix()}/__tests__/")
    assert cfg.test_pattern.source == "**/*_Test.res.js"
    assert [p.source for p in cfg.ignore_patterns] == ["lib/**"]
    assert [p.source for p in cfg.coverage_globs] == ["src/**/*.res.js"]
    assert cfg.coverage_directory == reform_project / "coverage"
    assert cfg.thresholds.global_spec.functions == 5
    (override,) = cfg.thresholds.overrides
    assert override.pattern.source == "src/ReForm__Helpers.res.js"
    assert override.pattern.is_literal
    assert [m for m, _ in override.spec.items()] == list(CoverageMetric)


def test_explicit_path_resolves_relative_to_its_directory(tmp_path: Path) -> None:
    sub = tmp_path / "project"
    sub.mkdir()
    cfg_path = _write(sub / "custom.toml", 'roots = ["tests"]\ncoverage_directory = "out"\n')
    cfg = load_config(cfg_path, cwd=tmp_path)
    assert cfg.root_dir == sub
    assert cfg.roots == ("tests",)
    assert cfg.coverage_directory == sub / "out"


def test_pyproject_table(tmp_path: Path) -> None:
    _write(
        tmp_path / "pyproject.toml",
        """
        [project]
        name = "demo"

        [tool.covgate]
        test_pattern = "**/test_*.py"

        [tool.covgate.global_threshold]
        lines = 80
        """,
    )
    cfg = load_config(cwd=tmp_path)
    assert cfg.source == tmp_path / "pyproject.toml"
    assert cfg.test_pattern.source == "**/test_*.py"
    assert cfg.thresholds.global_spec.lines == 80


def test_covgate_toml_wins_over_pyproject(tmp_path: Path) -> None:
    _write(tmp_path / "pyproject.toml", '[tool.covgate]\ntest_pattern = "a/**"\n')
    _write(tmp_path / "covgate.toml", 'test_pattern = "b/**"\n')
    assert load_config(cwd=tmp_path).test_pattern.source == "b/**"


def test_defaults_without_configuration(tmp_path: Path) -> None:
    _write(tmp_path / "pyproject.toml", '[project]\nname = "demo"\n')
    cfg = load_config(cwd=tmp_path)
    assert cfg.source is None
    assert cfg.roots == (tmp_path.as_posix(),)
    assert cfg.test_pattern.source == DEFAULT_TEST_PATTERN
    assert cfg.ignore_patterns == ()
    assert [p.source for p in cfg.coverage_globs] == ["**"]
    assert cfg.thresholds.global_spec.is_empty()
    assert cfg.thresholds.overrides == ()


@pytest.mark.parametrize(
    ("text", "message"),
    [
        ("unknown_key = 1\n", "unknown_key"),
        ('roots = "src"\n', "roots"),
        ("[global_threshold]\nlines = 101\n", "out of range"),
        ("[global_threshold]\nlines = true\n", "global_threshold.lines"),
        ("[global_threshold]\nlnes = 10\n", "unknown coverage metric"),
        ('[overrides."src/a.js"]\n', "at least one metric"),
        ('test_pattern = "src/[ab"\n', "unterminated"),
        ("discovery_timeout = 0\n", "discovery_timeout"),
        ("roots = [\n", "failed to parse"),
    ],
)
def test_invalid_configuration(tmp_path: Path, text: str, message: str) -> None:
    path = _write(tmp_path / "covgate.toml", text)
    with pytest.raises(ConfigError, match=message):
        load_config(path)


def test_missing_explicit_file(tmp_path: Path) -> None:
    with pytest.raises(ConfigError, match="configuration file not found"):
        load_config(tmp_path / "nope.toml")


def test_explicit_pyproject_needs_table(tmp_path: Path) -> None:
    path = _write(tmp_path / "pyproject.toml", '[project]\nname = "demo"\n')
    with pytest.raises(ConfigError, match=r"no \[tool.covgate\] table"):
        load_config(path)


def test_schemas_are_cached() -> None:
    assert get_schema("config") is get_schema("config")
    assert get_schema()["title"] == "covgate check report"
    with pytest.raises(ValueError, match="Unsupported schema"):
        get_schema("nope")


def test_import_does_not_configure_logging() -> None:
    assert logging.getLogger("covgate").handlers == []
