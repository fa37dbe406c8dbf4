"""Compiled glob patterns for root-relative file paths.

A pattern is split on ``/`` once, at compile time, into a tuple of segments.
Each segment is either the ``**`` globstar, a literal, or a compiled regular
expression that has to match one whole path segment. Brace alternatives
(``*.{js,ts}``) are expanded up front, so a compiled pattern holds one segment
tuple per alternative.

Matching walks the path segments while tracking the set of live pattern
positions. Every path segment has to be consumed, so matching is anchored:
``lib/**`` never matches ``my-lib/foo.js``.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from functools import lru_cache
from typing import TYPE_CHECKING

from covgate.errors import ConfigError

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence

_GLOBSTAR = "**"
_WILDCARDS = frozenset("*?[")
_REPEATED_SLASHES = re.compile(r"/{2,}")


def normalize_label(path: str) -> str:
    """Return *path* with POSIX separators and no leading ``./``."""
    label = _REPEATED_SLASHES.sub("/", path.replace("\\", "/"))
    while label.startswith("./"):
        label = label[2:]
    return label


@dataclass(frozen=True, slots=True)
class Segment:
    """One ``/``-separated piece of a compiled pattern."""

    text: str
    regex: re.Pattern[str] | None = None

    @property
    def is_globstar(self) -> bool:
        return self.text == _GLOBSTAR

    @property
    def is_literal(self) -> bool:
        return self.regex is None and not self.is_globstar

    def accepts(self, part: str) -> bool:
        if self.regex is None:
            return part == self.text
        return self.regex.fullmatch(part) is not None


@dataclass(frozen=True, slots=True)
class PathPattern:
    """A glob pattern compiled into pre-split segment alternatives."""

    source: str
    alternatives: tuple[tuple[Segment, ...], ...]

    @classmethod
    def compile(cls, source: str) -> PathPattern:
        return _compile(source)

    @property
    def is_literal(self) -> bool:
        """``True`` when the pattern names exactly one path."""
        return len(self.alternatives) == 1 and all(seg.is_literal for seg in self.alternatives[0])

    def matches(self, path: str) -> bool:
        parts = tuple(normalize_label(path).split("/"))
        return any(_match_segments(alt, parts) for alt in self.alternatives)

    def covers_directory(self, path: str) -> bool:
        """``True`` if every path below directory *path* is matched."""
        parts = tuple(normalize_label(path).split("/"))
        return any(alt[-1].is_globstar and _match_segments(alt, parts) for alt in self.alternatives)

    def __str__(self) -> str:
        return self.source


def matches(pattern: PathPattern | str, path: str) -> bool:
    """Return ``True`` if the whole of *path* matches *pattern*."""
    compiled = pattern if isinstance(pattern, PathPattern) else PathPattern.compile(pattern)
    return compiled.matches(path)


def matches_any(patterns: Iterable[PathPattern], path: str) -> bool:
    return any(p.matches(path) for p in patterns)


def compile_patterns(sources: Iterable[str]) -> tuple[PathPattern, ...]:
    """Compile *sources*, dropping duplicates while keeping declaration order."""
    seen: set[str] = set()
    out: list[PathPattern] = []
    for src in sources:
        compiled = PathPattern.compile(src)
        if compiled.source in seen:
            continue
        seen.add(compiled.source)
        out.append(compiled)
    return tuple(out)


# --------------------------- Compilation -------------------------------------


@lru_cache(maxsize=1024)
def _compile(source: str) -> PathPattern:
    if not source or not source.strip():
        msg = "glob pattern must be non-empty"
        raise ConfigError(msg)

    text = normalize_label(source.strip())
    if text.endswith("/"):
        # directory pattern: everything below it
        text += _GLOBSTAR

    alternatives = tuple(
        tuple(_compile_segment(seg, source) for seg in alt.split("/")) for alt in _expand_braces(text, source)
    )
    return PathPattern(source=text, alternatives=alternatives)


def _compile_segment(segment: str, source: str) -> Segment:
    if segment == _GLOBSTAR:
        return Segment(_GLOBSTAR)
    if not _WILDCARDS.intersection(segment):
        return Segment(segment)
    return Segment(segment, re.compile(_translate(segment, source)))


def _translate(segment: str, source: str) -> str:
    out: list[str] = []
    i, n = 0, len(segment)
    while i < n:
        ch = segment[i]
        if ch == "*":
            # a run of stars inside a segment never crosses "/"
            while i < n and segment[i] == "*":
                i += 1
            out.append("[^/]*")
            continue
        if ch == "?":
            out.append("[^/]")
        elif ch == "[":
            end = _class_end(segment, i)
            if end < 0:
                msg = f"unterminated character class in pattern {source!r}"
                raise ConfigError(msg)
            out.append(_translate_class(segment[i + 1 : end]))
            i = end + 1
            continue
        else:
            out.append(re.escape(ch))
        i += 1
    return "".join(out)


def _class_end(segment: str, start: int) -> int:
    j = start + 1
    if j < len(segment) and segment[j] in "!^":
        j += 1
    if j < len(segment) and segment[j] == "]":
        j += 1
    while j < len(segment) and segment[j] != "]":
        j += 1
    return j if j < len(segment) else -1


def _translate_class(body: str) -> str:
    negate = body[:1] in {"!", "^"}
    if negate:
        body = body[1:]
    escaped = "".join("\\" + c if c in "\\[]^" else c for c in body)
    return f"[^{escaped}]" if negate else f"[{escaped}]"


def _expand_braces(text: str, source: str) -> list[str]:
    depth = 0
    start = -1
    for i, ch in enumerate(text):
        if ch == "{":
            if depth == 0:
                start = i
            depth += 1
        elif ch == "}" and depth:
            depth -= 1
            if depth == 0:
                head, body, tail = text[:start], text[start + 1 : i], text[i + 1 :]
                out: list[str] = []
                for alt in _split_alternatives(body):
                    out.extend(_expand_braces(head + alt + tail, source))
                return out
    if depth:
        msg = f"unterminated brace group in pattern {source!r}"
        raise ConfigError(msg)
    return [text]


def _split_alternatives(body: str) -> list[str]:
    parts: list[str] = []
    depth = 0
    current: list[str] = []
    for ch in body:
        if ch == "," and depth == 0:
            parts.append("".join(current))
            current = []
            continue
        if ch == "{":
            depth += 1
        elif ch == "}":
            depth -= 1
        current.append(ch)
    parts.append("".join(current))
    return parts


# --------------------------- Matching ----------------------------------------


def _match_segments(segments: Sequence[Segment], parts: Sequence[str]) -> bool:
    end = len(segments)
    states = _closure(segments, {0})
    for part in parts:
        advanced: set[int] = set()
        for idx in states:
            if idx == end:
                continue
            seg = segments[idx]
            if seg.is_globstar:
                advanced.add(idx)
            elif seg.accepts(part):
                advanced.add(idx + 1)
        if not advanced:
            return False
        states = _closure(segments, advanced)
    return end in states


def _closure(segments: Sequence[Segment], states: set[int]) -> set[int]:
    # "**" may also match zero segments
    out = set(states)
    stack = list(states)
    while stack:
        idx = stack.pop()
        if idx < len(segments) and segments[idx].is_globstar and idx + 1 not in out:
            out.add(idx + 1)
            stack.append(idx + 1)
    return out


__all__ = [
    "PathPattern",
    "Segment",
    "compile_patterns",
    "matches",
    "matches_any",
    "normalize_label",
]
