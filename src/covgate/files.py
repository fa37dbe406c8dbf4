"""Common path utilities for covgate."""

from __future__ import annotations

from pathlib import Path

from covgate.model.pattern import normalize_label


def path_label(path: str | Path, base: Path) -> str:
    """Return the root-relative POSIX label for *path*.

    Relative paths are taken as already relative to *base*. Absolute paths
    inside *base* are made relative to it; anything else keeps its absolute
    form so it can still be matched by absolute patterns.
    """
    p = Path(path)
    if not p.is_absolute():
        return normalize_label(p.as_posix())
    for candidate, root in ((p, base), (p.resolve(), base.resolve())):
        try:
            return candidate.relative_to(root).as_posix()
        except ValueError:
            continue
    return p.as_posix()


__all__ = ["path_label"]
