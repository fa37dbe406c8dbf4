from __future__ import annotations

import pytest

from covgate.errors import ConfigError
from covgate.model.pattern import PathPattern, compile_patterns, matches, normalize_label


@pytest.mark.parametrize(
    ("pattern", "path", "expected"),
    [
        # anchoring: the whole path has to match
        ("lib/**", "lib/foo.js", True),
        ("lib/**", "my-lib/foo.js", False),
        ("lib/**", "src/lib/foo.js", False),
        ("src/*.js", "src/a.js", True),
        ("src/*.js", "src/a.jsx", False),
        ("src/*.js", "prefix/src/a.js", False),
        # "*" stays inside one segment, "**" spans any number of them
        ("src/*.js", "src/nested/a.js", False),
        ("src/**/*.js", "src/a.js", True),
        ("src/**/*.js", "src/x/y/z/a.js", True),
        ("**/*_Test.*", "a_Test.js", True),
        ("**/*_Test.*", "src/deep/a_Test.res.js", True),
        ("**/*_Test.*", "src/a_Test", False),
        ("**/lib/**", "src/lib/b_Test.js", True),
        ("**/lib/**", "src/my-lib/b_Test.js", False),
        # single-character wildcards and classes
        ("src/?.js", "src/a.js", True),
        ("src/?.js", "src/ab.js", False),
        ("src/[ab].js", "src/b.js", True),
        ("src/[ab].js", "src/c.js", False),
        ("src/[!ab].js", "src/c.js", True),
        ("src/[!ab].js", "src/a.js", False),
        ("src/[a-c]x.js", "src/bx.js", True),
        # brace alternatives
        ("src/**/*.{js,ts}", "src/a/b.ts", True),
        ("src/**/*.{js,ts}", "src/a/b.py", False),
        # directory patterns and leading "./"
        ("lib/", "lib/js/Stale_Test.res.js", True),
        ("lib/", "my-lib/x.js", False),
        ("./src/Helpers.js", "src/Helpers.js", True),
        ("src/Helpers.js", "./src/Helpers.js", True),
        ("src/Helpers.js", "src/Helpers.jsx", False),
    ],
)
def test_matches(pattern: str, path: str, expected: bool) -> None:
    assert matches(pattern, path) is expected


def test_windows_separators_are_normalized() -> None:
    assert matches("src/**/*.js", "src\\nested\\a.js")
    assert normalize_label(".\\src\\a.js") == "src/a.js"


def test_absolute_patterns_match_absolute_paths() -> None:
    pat = PathPattern.compile("/repo/src/**")
    assert pat.matches("/repo/src/a.js")
    assert not pat.matches("repo/src/a.js")


@pytest.mark.parametrize("source", ["", "   ", "src/[ab.js", "src/{a,b.js"])
def test_malformed_patterns_raise_config_error(source: str) -> None:
    with pytest.raises(ConfigError):
        PathPattern.compile(source)


def test_compile_normalizes_source() -> None:
    assert PathPattern.compile("./lib/").source == "lib/**"
    assert str(PathPattern.compile("src//a.js")) == "src/a.js"


def test_compiled_patterns_are_cached() -> None:
    assert PathPattern.compile("src/**/*.js") is PathPattern.compile("src/**/*.js")


def test_is_literal() -> None:
    assert PathPattern.compile("src/Helpers.js").is_literal
    assert not PathPattern.compile("src/*.js").is_literal
    assert not PathPattern.compile("src/**").is_literal
    assert not PathPattern.compile("src/{a,b}.js").is_literal


def test_covers_directory() -> None:
    pat = PathPattern.compile("**/lib/**")
    assert pat.covers_directory("src/lib")
    assert pat.covers_directory("src/lib/nested")
    assert not pat.covers_directory("src")
    # a literal file pattern never swallows a whole directory
    assert not PathPattern.compile("src/lib").covers_directory("src/lib")


def test_compile_patterns_dedupes_in_order() -> None:
    pats = compile_patterns(["b/**", "a/**", "./b/**"])
    assert [p.source for p in pats] == ["b/**", "a/**"]
