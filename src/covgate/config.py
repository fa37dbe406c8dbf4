"""Configuration loading, validation and packaged schemas for ``covgate``.

Configuration lives in ``covgate.toml`` (top-level keys) or in the
``[tool.covgate]`` table of ``pyproject.toml``. Every value is validated
when the file is loaded, so a bad pattern or threshold is reported before
any discovery work starts.
"""

from __future__ import annotations

import json
import tomllib
from dataclasses import dataclass
from functools import cache
from importlib import resources
from pathlib import Path
from typing import TYPE_CHECKING, Any

from jsonschema import ValidationError, validate

from covgate import logger
from covgate.errors import ConfigError
from covgate.model.pattern import PathPattern, compile_patterns
from covgate.model.thresholds import ThresholdTable

if TYPE_CHECKING:
    from collections.abc import Mapping

# Default logging format used by the CLI entry point.
LOG_FORMAT = "%(levelname)s: %(message)s"

CONFIG_FILENAME = "covgate.toml"
PYPROJECT_FILENAME = "pyproject.toml"

ROOT_DIR_TOKEN = "<rootDir>"
DEFAULT_TEST_PATTERN = "**/*_Test.*"
DEFAULT_COVERAGE_GLOBS = ("**",)
DEFAULT_COVERAGE_DIRECTORY = f"{ROOT_DIR_TOKEN}/coverage"

_SCHEMA_FILES: dict[str, str] = {
    "config": "config.schema.json",
    "report": "report.schema.json",
}


@cache
def get_schema(name: str = "report") -> dict[str, object]:
    """Load and cache a packaged JSON schema."""
    try:
        filename = _SCHEMA_FILES[name]
    except KeyError as exc:
        choices = ", ".join(sorted(_SCHEMA_FILES))
        msg = f"Unsupported schema: {name!r}. Available schemas: {choices}"
        raise ValueError(msg) from exc
    return json.loads(resources.files("covgate.data").joinpath(filename).read_text(encoding="utf-8"))


@dataclass(frozen=True, slots=True)
class Config:
    """Validated configuration.

    Fields
    ------
    root_dir:
        Base directory; every relative path and every path label is relative
        to it (``<rootDir>`` in the file).
    roots:
        Directories searched for test files.
    test_pattern / ignore_patterns:
        A file is a test iff it matches ``test_pattern`` and no ignore pattern.
    coverage_globs:
        Only files matching one of these take part in coverage aggregation.
    thresholds:
        Global thresholds plus per-path overrides.
    coverage_directory:
        Where coverage input is looked up when none is given explicitly.
    discovery_timeout:
        Upper bound, in seconds, for the discovery walk.
    """

    root_dir: Path
    roots: tuple[str, ...]
    test_pattern: PathPattern
    ignore_patterns: tuple[PathPattern, ...]
    coverage_globs: tuple[PathPattern, ...]
    thresholds: ThresholdTable
    coverage_directory: Path
    discovery_timeout: float | None = None
    source: Path | None = None

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any], *, base: Path, source: Path | None = None) -> Config:
        """Validate raw configuration *data*; relative paths resolve against *base*."""
        where = str(source) if source else "configuration"
        try:
            validate(dict(data), get_schema("config"))
        except ValidationError as exc:
            location = ".".join(str(p) for p in exc.absolute_path) or "<root>"
            msg = f"invalid {where} at {location}: {exc.message}"
            raise ConfigError(msg) from exc

        root_dir = _resolve_dir(data.get("root_dir"), base)
        roots = tuple(substitute_root_dir(r, root_dir) for r in data.get("roots", [ROOT_DIR_TOKEN]))
        overrides = {_substitute_pattern(k): v for k, v in data.get("overrides", {}).items()}
        coverage_dir = Path(
            substitute_root_dir(data.get("coverage_directory", DEFAULT_COVERAGE_DIRECTORY), root_dir)
        )

        return cls(
            root_dir=root_dir,
            roots=roots,
            test_pattern=PathPattern.compile(_substitute_pattern(data.get("test_pattern", DEFAULT_TEST_PATTERN))),
            ignore_patterns=compile_patterns(_substitute_pattern(p) for p in data.get("ignore_patterns", [])),
            coverage_globs=compile_patterns(
                _substitute_pattern(p) for p in data.get("coverage_globs", DEFAULT_COVERAGE_GLOBS)
            ),
            thresholds=ThresholdTable.from_mapping(data.get("global_threshold"), overrides),
            coverage_directory=coverage_dir if coverage_dir.is_absolute() else root_dir / coverage_dir,
            discovery_timeout=data.get("discovery_timeout"),
            source=source,
        )


def load_config(path: Path | None = None, *, cwd: Path | None = None) -> Config:
    """Load configuration from *path*, or look it up in *cwd*.

    Lookup order without an explicit path: ``covgate.toml``, then the
    ``[tool.covgate]`` table of ``pyproject.toml``. When neither exists the
    defaults apply with *cwd* as the root directory.
    """
    base = (cwd or Path.cwd()).absolute()
    if path is not None:
        if not path.is_file():
            msg = f"configuration file not found: {path}"
            raise ConfigError(msg)
        data = _read_table(path)
        return Config.from_mapping(data, base=path.absolute().parent, source=path)

    candidate = base / CONFIG_FILENAME
    if candidate.is_file():
        return Config.from_mapping(_read_table(candidate), base=base, source=candidate)

    pyproject = base / PYPROJECT_FILENAME
    if pyproject.is_file():
        data = _read_toml(pyproject).get("tool", {}).get("covgate")
        if data is not None:
            return Config.from_mapping(data, base=base, source=pyproject)

    logger.debug("no configuration found in %s; using defaults", base)
    return Config.from_mapping({}, base=base)


def _read_table(path: Path) -> dict[str, Any]:
    data = _read_toml(path)
    if path.name == PYPROJECT_FILENAME:
        table = data.get("tool", {}).get("covgate")
        if table is None:
            msg = f"{path} has no [tool.covgate] table"
            raise ConfigError(msg)
        return table
    return data


def _read_toml(path: Path) -> dict[str, Any]:
    try:
        with path.open("rb") as fh:
            return tomllib.load(fh)
    except tomllib.TOMLDecodeError as exc:
        msg = f"failed to parse {path}: {exc}"
        raise ConfigError(msg) from exc
    except OSError as exc:
        msg = f"failed to read {path}: {exc}"
        raise ConfigError(msg) from exc


def _resolve_dir(value: str | None, base: Path) -> Path:
    if not value:
        return base
    p = Path(value)
    return p if p.is_absolute() else base / p


def substitute_root_dir(value: str, root_dir: Path) -> str:
    """Replace the ``<rootDir>`` token in a path-like *value*."""
    return value.replace(ROOT_DIR_TOKEN, root_dir.as_posix())


def _substitute_pattern(value: str) -> str:
    # labels are already relative to the root directory
    text = value.replace(f"{ROOT_DIR_TOKEN}/", "").replace(ROOT_DIR_TOKEN, "")
    return text or "**"


__all__ = [
    "CONFIG_FILENAME",
    "DEFAULT_TEST_PATTERN",
    "LOG_FORMAT",
    "Config",
    "get_schema",
    "load_config",
    "substitute_root_dir",
]
