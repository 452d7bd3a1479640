"""Tests for analytics/rules.py - globs and the three rule files."""

import re

import pytest

from gitrends.analytics.rules import (
    ROOT_MODULE,
    AuthorAliases,
    GlobPattern,
    GlobSyntaxError,
    IgnoreRules,
    ModuleRules,
    load_rules,
    translate_glob,
)
from gitrends.exceptions import RuleParseError


def _matches(pattern: str, path: str) -> bool:
    return GlobPattern.compile(pattern).matches(path)


class TestGlobs:
    @pytest.mark.parametrize(
        "pattern,path",
        [
            ("*.md", "README.md"),
            # "*" and "?" cross directory separators
            ("*.md", "docs/guide/intro.md"),
            ("src/?.py", "src/a.py"),
            ("a?c", "a/c"),
            ("**/test_*.py", "test_a.py"),
            ("**/test_*.py", "pkg/tests/test_a.py"),
            ("vendor/**", "vendor/lib/x.c"),
            ("src/**/mod.rs", "src/mod.rs"),
            ("src/**/mod.rs", "src/a/b/mod.rs"),
            ("[abc].txt", "b.txt"),
            ("[!abc].txt", "d.txt"),
            ("[a-c]x", "bx"),
            ("[]]", "]"),
            ("file(1).txt", "file(1).txt"),
            ("a]b", "a]b"),
        ],
    )
    def test_matches(self, pattern, path):
        assert _matches(pattern, path)

    @pytest.mark.parametrize(
        "pattern,path",
        [
            ("*.md", "README.mdx"),
            ("src/?.py", "src/ab.py"),
            ("[abc].txt", "d.txt"),
            ("[!abc].txt", "a.txt"),
            ("src/**/mod.rs", "lib/mod.rs"),
            # Case-sensitive, whole path
            ("*.MD", "README.md"),
            ("src", "src/a.py"),
        ],
    )
    def test_does_not_match(self, pattern, path):
        assert not _matches(pattern, path)

    @pytest.mark.parametrize("pattern", ["a**", "**b", "a/**b/c", "***", "[abc", "[!"])
    def test_invalid_patterns(self, pattern):
        with pytest.raises(GlobSyntaxError):
            GlobPattern.compile(pattern)

    def test_translation_escapes_regex_characters(self):
        assert re.fullmatch(translate_glob("a+b.c"), "a+b.c")
        assert not re.fullmatch(translate_glob("a+b.c"), "aab-c")


class TestIgnoreRules:
    def test_blank_lines_are_skipped(self):
        rules = IgnoreRules.parse("*.md\n\n   \nvendor/**\n")
        assert [p.pattern for p in rules.patterns] == ["*.md", "vendor/**"]
        assert rules.is_ignored("vendor/x.c")
        assert not rules.is_ignored("src/x.c")

    def test_crlf_lines(self):
        rules = IgnoreRules.parse("*.md\r\n*.txt\r\n")
        assert rules.is_ignored("notes.txt")

    def test_invalid_pattern_reports_line(self):
        with pytest.raises(RuleParseError) as excinfo:
            IgnoreRules.parse("*.md\n\nsrc/a**\n")
        assert excinfo.value.line_number == 3
        assert excinfo.value.text == "src/a**"

    def test_empty_rules_ignore_nothing(self):
        assert not IgnoreRules().is_ignored("anything")


class TestModuleRules:
    def test_first_matching_rule_wins(self):
        rules = ModuleRules.parse("src/core/** => core\nsrc/** => app\n")
        assert rules.module_name("src/core/x.rs") == "core"
        assert rules.module_name("src/ui/y.rs") == "app"

    def test_fallback_is_parent_directory(self):
        rules = ModuleRules.parse("src/** => app\n")
        assert rules.get_module("lib/deep/z.c") is None
        assert rules.module_name("lib/deep/z.c") == "lib/deep"
        assert rules.module_name("top.c") == ROOT_MODULE

    def test_lines_without_arrow_are_skipped(self):
        rules = ModuleRules.parse("# comment\nsrc/** =>  app  \nnot a rule\n")
        assert len(rules.rules) == 1
        assert rules.module_name("src/a") == "app"

    def test_invalid_pattern_raises(self):
        with pytest.raises(RuleParseError):
            ModuleRules.parse("src/[ab => app\n")


class TestAuthorAliases:
    def test_normalize(self):
        aliases = AuthorAliases.parse("Bob B => bob\nbobby=>bob\n")
        assert aliases.normalize("Bob B") == "bob"
        assert aliases.normalize("bobby") == "bob"
        assert aliases.normalize("alice") == "alice"

    def test_repeated_identical_alias_is_allowed(self):
        aliases = AuthorAliases.parse("a => b\na => b\n")
        assert aliases.aliases == {"a": "b"}

    def test_conflicting_alias_raises(self):
        with pytest.raises(RuleParseError) as excinfo:
            AuthorAliases.parse("a => b\na => c\n")
        assert excinfo.value.line_number == 2

    def test_lines_without_arrow_are_skipped(self):
        assert AuthorAliases.parse("just a name\n").aliases == {}


class TestLoadRules:
    def test_missing_files_give_empty_rules(self, tmp_path):
        rules = load_rules(tmp_path)
        assert rules.ignore.patterns == ()
        assert rules.modules.rules == ()
        assert rules.authors.aliases == {}

    def test_reads_all_three_files(self, tmp_path):
        (tmp_path / "ignore.txt").write_text("*.lock\n")
        (tmp_path / "modules.txt").write_text("web/** => frontend\n")
        (tmp_path / "authors.txt").write_text("A. Smith => alice\n")

        rules = load_rules(tmp_path)
        assert rules.ignore.is_ignored("Cargo.lock")
        assert rules.modules.module_name("web/app.ts") == "frontend"
        assert rules.authors.normalize("A. Smith") == "alice"

    def test_error_names_the_file(self, tmp_path):
        (tmp_path / "ignore.txt").write_text("[oops\n")
        with pytest.raises(RuleParseError) as excinfo:
            load_rules(tmp_path)
        assert excinfo.value.source == tmp_path / "ignore.txt"
        assert "ignore.txt" in str(excinfo.value)
