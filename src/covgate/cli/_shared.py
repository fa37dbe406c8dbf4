from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import typer

from covgate import logger
from covgate.cli.exit_codes import EXIT_CONFIG
from covgate.config import LOG_FORMAT, load_config
from covgate.errors import ConfigError

if TYPE_CHECKING:
    from pathlib import Path

    from covgate.config import Config


def configure_logging(*, quiet: bool, verbose: bool) -> None:
    """Configure logging based on *quiet*/*verbose*."""
    level = logging.ERROR if quiet else (logging.DEBUG if verbose else logging.INFO)
    logging.basicConfig(level=level, format=LOG_FORMAT)
    logger.setLevel(level)


def resolve_use_color(*, color: bool, no_color: bool, color_allowed: bool) -> bool:
    # CLI flags take precedence over the IO policy default.
    if no_color:
        return False
    if color:
        return True
    return color_allowed


def fail(message: str, code: int) -> typer.Exit:
    typer.echo(f"ERROR: {message}", err=True)
    return typer.Exit(code=code)


def load_config_or_exit(path: Path | None) -> Config:
    try:
        return load_config(path)
    except ConfigError as exc:
        raise fail(str(exc), EXIT_CONFIG) from exc
