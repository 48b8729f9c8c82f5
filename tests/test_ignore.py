from __future__ import annotations

import logging

from codepack.ignore import DEFAULT_PATTERNS, Ignorer, Matcher, Rule, build_ignorer


def test_rule_parse_flags():
    assert Rule.parse("!build/") == Rule("build", negate=True, dir_only=True)
    assert Rule.parse("  *.log  ") == Rule("*.log")
    assert Rule.parse("/dist") == Rule("/dist")


def test_rule_parse_skips_blank_and_comments():
    assert Rule.parse("") is None
    assert Rule.parse("   ") is None
    assert Rule.parse("# comment") is None
    assert Rule.parse("!") is None


def test_basename_glob_matches_at_any_depth():
    m = Matcher.from_lines(["*.log", "dat?.csv", "[ab].txt"])
    assert m.match("app.log", False) is True
    assert m.match("deep/nested/app.log", False) is True
    assert m.match("data.csv", False) is True
    assert m.match("a.txt", False) is True
    assert m.match("c.txt", False) is None
    assert m.match("APP.LOG", False) is None


def test_dir_only_rule_skips_files():
    m = Matcher.from_lines(["cache/"])
    assert m.match("cache", True) is True
    assert m.match("cache", False) is None


def test_path_pattern_exact_suffix_and_glob():
    m = Matcher.from_lines(["docs/build", "/src/gen/*.py", "/vendor/lib"])
    assert m.match("docs/build", True) is True
    assert m.match("project/docs/build", True) is True
    assert m.match("src/gen/models.py", False) is True
    assert m.match("pkg/src/gen/models.py", False) is None
    assert m.match("third_party/vendor/lib", True) is True
    assert m.match("docs/builder", True) is None


def test_path_glob_star_does_not_cross_separator():
    m = Matcher.from_lines(["a/*.py"])
    assert m.match("a/x.py", False) is True
    assert m.match("a/b/x.py", False) is None


def test_double_star_is_not_recursive():
    m = Matcher.from_lines(["src/**/*.py"])
    assert m.match("src/a/b/x.py", False) is None


def test_last_rule_wins_within_matcher():
    m = Matcher.from_lines(["*.txt", "!keep.txt"])
    assert m.match("drop.txt", False) is True
    assert m.match("keep.txt", False) is False

    m = Matcher.from_lines(["!keep.txt", "*.txt"])
    assert m.match("keep.txt", False) is True


def test_last_rule_wins_across_matchers():
    ignorer = Ignorer(
        [
            Matcher.from_lines(["*.txt"]),
            Matcher.from_lines(["!notes.txt"]),
            Matcher.from_lines(["other.py"]),
        ]
    )
    assert ignorer.should_ignore("notes.txt", False) is False
    assert ignorer.should_ignore("todo.txt", False) is True

    ignorer.add_matcher(Matcher.from_lines(["notes.txt"]))
    assert ignorer.should_ignore("notes.txt", False) is True


def test_nothing_matches_means_included():
    assert Ignorer().should_ignore("anything.py", False) is False


def test_defaults_registered_first_and_overridable(tmp_path):
    ignorer = build_ignorer(tmp_path, ["!.env"])
    assert ignorer.matchers[0].origin == "<defaults>"
    assert len(ignorer.matchers[0]) == len(DEFAULT_PATTERNS)
    assert ignorer.should_ignore(".git", True) is True
    assert ignorer.should_ignore(".env", False) is False


def test_source_order(tmp_path):
    extra = tmp_path / "extra.ignore"
    extra.write_text("*.tmp\n")
    (tmp_path / ".code-packignore").write_text("!keep.tmp\n")
    (tmp_path / ".gitignore").write_text("*.o\n")
    (tmp_path / ".dockerignore").write_text("Dockerfile\n")

    ignorer = build_ignorer(tmp_path, ["*.bak"], [extra])

    origins = [m.origin for m in ignorer.matchers]
    assert origins == [
        "<defaults>",
        "<command line>",
        str(extra),
        str(tmp_path / ".code-packignore"),
        str(tmp_path / ".gitignore"),
        str(tmp_path / ".dockerignore"),
    ]
    assert ignorer.should_ignore("x.tmp", False) is True
    assert ignorer.should_ignore("keep.tmp", False) is False
    assert ignorer.should_ignore("Dockerfile", False) is True


def test_missing_conventional_files_are_fine(tmp_path):
    ignorer = build_ignorer(tmp_path)
    assert len(ignorer.matchers) == 1


def test_missing_explicit_ignore_file_warns(tmp_path, caplog):
    with caplog.at_level(logging.WARNING, logger="codepack"):
        ignorer = build_ignorer(tmp_path, [], [tmp_path / "nope.ignore"])
    assert len(ignorer.matchers) == 1
    assert "does not exist" in caplog.text


def test_comments_and_blank_lines_in_file(tmp_path):
    path = tmp_path / "rules"
    path.write_text("# header\n\n*.log\n   \n!keep.log\n")
    m = Matcher.from_file(path)
    assert [r.pattern for r in m.rules] == ["*.log", "keep.log"]


def test_caret_class_negates():
    m = Matcher.from_lines(["[^a]*.txt"])
    assert m.match("b.txt", False) is True
    assert m.match("a.txt", False) is None


def test_backslash_escapes_glob_characters():
    m = Matcher.from_lines([r"what\?.md", r"docs/\*.txt"])
    assert m.match("what?.md", False) is True
    assert m.match("whatX.md", False) is None
    assert m.match("docs/*.txt", False) is True
    assert m.match("docs/readme.txt", False) is None
