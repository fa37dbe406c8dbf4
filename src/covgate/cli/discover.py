from __future__ import annotations

import json
from dataclasses import replace
from pathlib import Path  # noqa: TC003
from typing import Annotated

import click
import typer

from covgate.cli._shared import fail, load_config_or_exit
from covgate.cli.exit_codes import EXIT_CONFIG, EXIT_NOINPUT, EXIT_OK
from covgate.config import substitute_root_dir
from covgate.errors import ConfigError, DiscoveryError
from covgate.io import ListFormat, write_output
from covgate.model.pattern import PathPattern, compile_patterns
from covgate.pipeline import discover_tests


def discover_cmd(
    config: Annotated[
        Path | None,
        typer.Option("-c", "--config", help="Configuration file (covgate.toml or pyproject.toml)."),
    ] = None,
    root: Annotated[
        list[str] | None,
        typer.Option("-r", "--root", help="Directory to search instead of the configured roots (repeatable)."),
    ] = None,
    test_pattern: Annotated[
        str | None,
        typer.Option("-p", "--test-pattern", help="Glob a test file must match."),
    ] = None,
    ignore: Annotated[
        list[str] | None,
        typer.Option("-x", "--ignore", help="Additional ignore glob (repeatable)."),
    ] = None,
    timeout: Annotated[
        float | None,
        typer.Option("--timeout", help="Give up after this many seconds.", click_type=click.FloatRange(min=0, min_open=True)),
    ] = None,
    format_: Annotated[
        ListFormat,
        typer.Option("--format", help="Output format.", case_sensitive=False),
    ] = ListFormat.TEXT,
    output: Annotated[
        Path | None,
        typer.Option("-o", "--output", help="Write output to PATH (use '-' for stdout)."),
    ] = None,
) -> None:
    """List test files in the order they should be executed."""
    cfg = load_config_or_exit(config)
    try:
        cfg = replace(
            cfg,
            roots=tuple(substitute_root_dir(r, cfg.root_dir) for r in root) if root else cfg.roots,
            test_pattern=PathPattern.compile(test_pattern) if test_pattern else cfg.test_pattern,
            ignore_patterns=(*cfg.ignore_patterns, *compile_patterns(ignore or ())),
        )
    except ConfigError as exc:
        raise fail(str(exc), EXIT_CONFIG) from exc

    try:
        tests = discover_tests(cfg, timeout=timeout)
    except DiscoveryError as exc:
        raise fail(str(exc), EXIT_NOINPUT) from exc

    text = json.dumps(tests, indent=2) if format_ == ListFormat.JSON else "\n".join(tests)
    write_output(text, output)
    raise typer.Exit(code=EXIT_OK)


def register(app: typer.Typer) -> None:
    app.command("discover")(discover_cmd)


__all__ = ["register"]
