"""Renderers for :class:`~covgate.pipeline.CheckOutcome`."""

from __future__ import annotations

from typing import TYPE_CHECKING

from covgate.render.human import format_human
from covgate.render.json import format_json

if TYPE_CHECKING:
    from covgate.pipeline import CheckOutcome


def render(outcome: CheckOutcome, *, fmt: str, color: bool = False) -> str:
    if fmt == "json":
        return format_json(outcome)
    if fmt == "human":
        return format_human(outcome, color=color)
    msg = f"unsupported format: {fmt!r}"
    raise ValueError(msg)


__all__ = ["format_human", "format_json", "render"]
