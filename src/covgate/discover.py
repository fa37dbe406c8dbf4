"""Test-file discovery across the configured root directories."""

from __future__ import annotations

import os
import threading
from concurrent.futures import ThreadPoolExecutor, wait
from pathlib import Path
from typing import TYPE_CHECKING

from covgate import logger
from covgate.errors import DiscoveryError
from covgate.files import path_label
from covgate.model.pattern import PathPattern, matches_any, normalize_label

if TYPE_CHECKING:
    from collections.abc import Iterable

_MAX_WORKERS = 8


def discover(
    roots: Iterable[str | Path],
    test_pattern: PathPattern | str,
    ignore_patterns: Iterable[PathPattern | str] = (),
    *,
    base: Path | None = None,
    timeout: float | None = None,
) -> list[str]:
    """Return the sorted, de-duplicated test files found under *roots*.

    Rules
    -----
    - Every root must exist and be a directory, else :class:`DiscoveryError`.
    - A file is included iff its label (path relative to *base*) matches
      *test_pattern* and none of *ignore_patterns*.
    - Roots are walked in parallel; the result is sorted afterwards, so the
      order never depends on scheduling.
    - If *timeout* elapses, :class:`DiscoveryError` is raised instead of
      returning partial results.
    """
    base_path = (base or Path.cwd()).absolute()
    pattern = test_pattern if isinstance(test_pattern, PathPattern) else PathPattern.compile(test_pattern)
    ignores = _compile_ignores(ignore_patterns)
    root_paths = _resolve_roots(roots, base_path)
    if not root_paths:
        return []

    stop = threading.Event()
    executor = ThreadPoolExecutor(
        max_workers=min(len(root_paths), _MAX_WORKERS),
        thread_name_prefix="covgate-discover",
    )
    try:
        futures = [executor.submit(_walk_root, r, base_path, pattern, ignores, stop) for r in root_paths]
        _done, pending = wait(futures, timeout=timeout)
        if pending:
            msg = f"test discovery timed out after {timeout}s"
            raise DiscoveryError(msg)
        found: set[str] = set()
        for fut in futures:
            found.update(fut.result())
    finally:
        stop.set()
        executor.shutdown(wait=False, cancel_futures=True)

    result = sorted(found)
    logger.info("discovered %d test file(s) under %d root(s)", len(result), len(root_paths))
    return result


def _compile_ignores(patterns: Iterable[PathPattern | str]) -> tuple[PathPattern, ...]:
    return tuple(p if isinstance(p, PathPattern) else PathPattern.compile(str(p)) for p in patterns)


def _resolve_roots(roots: Iterable[str | Path], base: Path) -> list[Path]:
    candidates = sorted({Path(r) if Path(r).is_absolute() else base / r for r in roots})
    missing = [p for p in candidates if not p.exists()]
    if missing:
        msg = f"test root not found: {', '.join(str(p) for p in missing)}"
        raise DiscoveryError(msg)
    not_dirs = [p for p in candidates if not p.is_dir()]
    if not_dirs:
        msg = f"test root is not a directory: {', '.join(str(p) for p in not_dirs)}"
        raise DiscoveryError(msg)
    return candidates


def _raise_walk_error(exc: OSError) -> None:
    msg = f"failed to read {exc.filename}: {exc.strerror}"
    raise DiscoveryError(msg) from exc


def _join(dir_label: str, name: str) -> str:
    if dir_label in {"", "."}:
        return name
    return normalize_label(f"{dir_label}/{name}")


def _walk_root(
    root: Path,
    base: Path,
    test_pattern: PathPattern,
    ignores: tuple[PathPattern, ...],
    stop: threading.Event,
) -> list[str]:
    found: list[str] = []
    for dirpath, dirnames, filenames in os.walk(root, onerror=_raise_walk_error):
        if stop.is_set():
            break
        dir_label = path_label(dirpath, base)
        # prune subtrees an ignore pattern swallows whole
        dirnames[:] = [d for d in dirnames if not any(p.covers_directory(_join(dir_label, d)) for p in ignores)]
        for name in filenames:
            label = _join(dir_label, name)
            if test_pattern.matches(label) and not matches_any(ignores, label):
                found.append(label)
    logger.debug("root %s: %d test file(s)", root, len(found))
    return found


__all__ = ["discover"]
