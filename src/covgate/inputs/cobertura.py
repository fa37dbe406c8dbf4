from __future__ import annotations

import re
from collections import defaultdict
from pathlib import PurePosixPath
from typing import TYPE_CHECKING

from defusedxml import ElementTree

from covgate.errors import CoverageDataError
from covgate.model.coverage import Counts
from covgate.model.types import CoverageMetric

if TYPE_CHECKING:
    from pathlib import Path
    from xml.etree.ElementTree import Element

    from covgate.model.coverage import MetricCounts

_COND_RE = re.compile(r"\(\s*(?P<covered>\d+)\s*/\s*(?P<total>\d+)\s*\)")


def read_root(path: Path) -> Element:
    """Parse Cobertura XML and return the root element."""
    try:
        root = ElementTree.parse(path).getroot()
    except ElementTree.ParseError as exc:
        msg = f"failed to parse coverage XML {path}: {exc}"
        raise CoverageDataError(msg) from exc
    tag = (root.tag or "").split("}")[-1]
    if tag.lower() != "coverage":
        msg = f"unexpected root tag {root.tag!r} in {path}"
        raise CoverageDataError(msg)
    return root


def parse_condition_coverage(text: str) -> tuple[int, int] | None:
    """Parse values like '50% (1/2)' into ``(covered, total)``."""
    if not text:
        return None
    m = _COND_RE.search(text.strip())
    if not m:
        return None
    return int(m.group("covered")), int(m.group("total"))


def _line_hits(elem: Element) -> tuple[int, int] | None:
    n_raw = elem.get("number")
    hits_raw = elem.get("hits")
    if not n_raw or hits_raw is None:
        return None
    try:
        return int(n_raw), int(hits_raw)
    except ValueError:
        return None


def _first_source(root: Element) -> str | None:
    for elem in root.findall("./sources/source"):
        text = (elem.text or "").strip()
        if text:
            return text
    return None


def parse_cobertura(root: Element) -> dict[str, MetricCounts]:
    source_dir = _first_source(root)
    line_hits: dict[str, dict[int, int]] = defaultdict(dict)
    branch_counts: dict[str, dict[int, tuple[int, int]]] = defaultdict(dict)
    methods: dict[str, dict[tuple[str, str], bool]] = defaultdict(dict)

    for cls in root.findall(".//class"):
        filename = cls.get("filename")
        if not filename:
            continue
        if source_dir and not PurePosixPath(filename).is_absolute():
            filename = f"{source_dir.rstrip('/')}/{filename}"
        hits_by_line = line_hits[filename]
        for line_elem in cls.findall("./lines/line"):
            parsed = _line_hits(line_elem)
            if parsed is None:
                continue
            n, hits = parsed
            hits_by_line[n] = max(hits_by_line.get(n, 0), hits)
            if line_elem.get("branch") == "true":
                cc = parse_condition_coverage(line_elem.get("condition-coverage", "") or "")
                if cc is not None:
                    prev = branch_counts[filename].get(n, (0, 0))
                    branch_counts[filename][n] = max(prev, cc)

        for method in cls.findall("./methods/method"):
            key = (method.get("name", ""), method.get("signature", ""))
            hit = any((p := _line_hits(ln)) is not None and p[1] > 0 for ln in method.findall("./lines/line"))
            methods[filename][key] = methods[filename].get(key, False) or hit

    out: dict[str, MetricCounts] = {}
    for filename, hits_by_line in line_hits.items():
        lines = Counts(covered=sum(1 for h in hits_by_line.values() if h > 0), total=len(hits_by_line))
        br = branch_counts.get(filename, {}).values()
        fns = methods.get(filename, {}).values()
        out[filename] = {
            # Cobertura reports lines only; statements mirror lines
            CoverageMetric.STATEMENTS: lines,
            CoverageMetric.BRANCHES: Counts(covered=sum(c for c, _ in br), total=sum(t for _, t in br)),
            CoverageMetric.FUNCTIONS: Counts(covered=sum(1 for hit in fns if hit), total=len(fns)),
            CoverageMetric.LINES: lines,
        }
    return out


def read_cobertura(path: Path) -> dict[str, MetricCounts]:
    return parse_cobertura(read_root(path))


__all__ = ["parse_condition_coverage", "parse_cobertura", "read_cobertura", "read_root"]
