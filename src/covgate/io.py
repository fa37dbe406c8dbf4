import sys
from enum import StrEnum
from pathlib import Path


class OutputFormat(StrEnum):
    HUMAN = "human"
    JSON = "json"


class ListFormat(StrEnum):
    TEXT = "text"
    JSON = "json"


def write_output(text: str, destination: Path | None) -> None:
    """Write output to stdout or a file (PATH or '-' for stdout)."""
    if destination is None or destination == Path("-"):
        print(text)
        return
    destination.parent.mkdir(parents=True, exist_ok=True)
    destination.write_text(text + "\n", encoding="utf-8")


def is_tty_stdout() -> bool:
    try:
        return bool(getattr(sys.stdout, "isatty", lambda: False)())
    except (OSError, ValueError):
        return False
