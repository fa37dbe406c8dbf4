from __future__ import annotations

from dataclasses import replace
from pathlib import Path
from typing import Annotated

import click
import typer

from covgate.cli._shared import fail, load_config_or_exit, resolve_use_color
from covgate.cli.exit_codes import (
    EXIT_CONFIG,
    EXIT_DATAERR,
    EXIT_GENERIC,
    EXIT_NOINPUT,
    EXIT_OK,
    EXIT_THRESHOLD,
)
from covgate.errors import ConfigError, CoverageDataError, CoverageDataNotFoundError, DiscoveryError
from covgate.io import OutputFormat, is_tty_stdout, write_output
from covgate.model.thresholds import parse_threshold
from covgate.pipeline import CheckOutcome, UnexpectedError, run_check
from covgate.render import render


def _run(
    config: Path | None,
    coverage: list[Path] | None,
    *,
    threshold: str | None,
    run_discovery: bool,
    timeout: float | None,
) -> CheckOutcome:
    cfg = load_config_or_exit(config)
    if threshold is not None:
        try:
            cfg = replace(cfg, thresholds=replace(cfg.thresholds, global_spec=parse_threshold(threshold)))
        except ConfigError as exc:
            raise fail(str(exc), EXIT_CONFIG) from exc

    try:
        return run_check(cfg, coverage_paths=coverage, run_discovery=run_discovery, timeout=timeout)
    except DiscoveryError as exc:
        raise fail(str(exc), EXIT_NOINPUT) from exc
    except CoverageDataNotFoundError as exc:
        raise fail(str(exc), EXIT_NOINPUT) from exc
    except CoverageDataError as exc:
        raise fail(str(exc), EXIT_DATAERR) from exc
    except UnexpectedError as exc:
        raise fail(str(exc), EXIT_GENERIC) from exc


def check_cmd(
    coverage: Annotated[
        list[Path] | None,
        typer.Argument(help="Coverage report file(s). If omitted, the coverage directory is searched."),
    ] = None,
    config: Annotated[
        Path | None,
        typer.Option("-c", "--config", help="Configuration file (covgate.toml or pyproject.toml)."),
    ] = None,
    threshold: Annotated[
        str | None,
        typer.Option(
            "-t",
            "--threshold",
            help="Replace the global threshold, e.g. 'statements=80 branches=70 functions=75 lines=80'.",
        ),
    ] = None,
    discover_tests: Annotated[
        bool,
        typer.Option("--discover/--no-discover", help="Discover test files before checking coverage."),
    ] = True,
    timeout: Annotated[
        float | None,
        typer.Option(
            "--timeout",
            help="Give up test discovery after this many seconds.",
            click_type=click.FloatRange(min=0, min_open=True),
        ),
    ] = None,
    format_: Annotated[
        OutputFormat,
        typer.Option("--format", help="Output format.", case_sensitive=False),
    ] = OutputFormat.HUMAN,
    output: Annotated[
        Path | None,
        typer.Option("-o", "--output", help="Write output to PATH (use '-' for stdout)."),
    ] = None,
    color: Annotated[bool, typer.Option("--color", help="Force ANSI color codes in output.")] = False,
    no_color: Annotated[bool, typer.Option("--no-color", help="Disable ANSI color codes in output.")] = False,
) -> None:
    """Discover tests, evaluate coverage thresholds and exit non-zero on failure."""
    outcome = _run(config, coverage, threshold=threshold, run_discovery=discover_tests, timeout=timeout)

    color_allowed = format_ == OutputFormat.HUMAN and output in {None, Path("-")} and is_tty_stdout()
    use_color = resolve_use_color(color=color, no_color=no_color, color_allowed=color_allowed)
    write_output(render(outcome, fmt=format_.value, color=use_color), output)

    if not outcome.passed:
        for failure in outcome.result.failures:
            typer.echo(
                (
                    "Threshold failed: "
                    f"{failure.scope} {failure.metric} >= {failure.required:g}"
                    f" (actual {failure.actual:.2f})"
                ),
                err=True,
            )
        raise typer.Exit(code=EXIT_THRESHOLD)
    raise typer.Exit(code=EXIT_OK)


def register(app: typer.Typer) -> None:
    app.command("check")(check_cmd)


__all__ = ["register"]
