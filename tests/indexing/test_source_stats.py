"""Tests for indexing/source_stats.py - line classification and indentation."""

import math

import pytest

from gitrends.indexing.source_stats import calculate_source_code_stats, language_hint

RUST_SOURCE = "\n".join(
    [
        "/*",
        " * Module docs",
        " */",
        "fn main() {",
        "",
        "    // Entry point",
        "    let x = 1;",
        "    if x > 0 {",
        '        println!("{}", x);',
        "        return;",
        "    }",
        "",
        "    // Done",
        "}",
        "",
        "",
    ]
) + "\n"

PYTHON_SOURCE = "\n".join(
    [
        "import os",
        "",
        "",
        "# Helper",
        "def walk(root):",
        "    for name in os.listdir(root):",
        '        if name.startswith("."):',
        "            continue",
        "",
        "",
        'walk(".")',
    ]
) + "\n"


class TestFixtures:
    """Known files with hand-counted statistics."""

    def test_rust_file(self):
        stats = calculate_source_code_stats("rs", RUST_SOURCE)
        assert stats.num_code_lines == 8
        assert stats.num_comment_lines == 4
        assert stats.num_blank_lines == 4
        assert stats.total_indent_levels == 7
        assert stats.avg_indent_levels == pytest.approx(7 / 8)
        assert stats.std_indent_level == pytest.approx((11 - 49 / 8) / 8)

    def test_python_file(self):
        stats = calculate_source_code_stats("py", PYTHON_SOURCE)
        assert stats.num_code_lines == 6
        assert stats.num_comment_lines == 1
        assert stats.num_blank_lines == 4
        assert stats.total_indent_levels == 6
        assert stats.avg_indent_levels == pytest.approx(1.0)
        assert stats.std_indent_level == pytest.approx(8 / 6)


class TestClassification:
    def test_plain_code_counts_every_line(self):
        stats = calculate_source_code_stats("c", "a();\nb();\nc();\n")
        assert stats.num_code_lines == 3
        assert stats.num_comment_lines == 0
        assert stats.num_blank_lines == 0
        assert stats.avg_indent_levels == 0.0
        assert stats.std_indent_level == 0.0

    def test_hash_is_code_outside_python(self):
        stats = calculate_source_code_stats("rs", "# not a comment\n")
        assert stats.num_code_lines == 1
        assert stats.num_comment_lines == 0

    def test_slashes_are_code_in_python(self):
        stats = calculate_source_code_stats("py", "// floor division\n")
        assert stats.num_code_lines == 1

    def test_lone_marker_needs_following_text(self):
        """A bare "#" or "//" does not match the single-line comment form."""
        assert calculate_source_code_stats("py", "#\n").num_code_lines == 1
        assert calculate_source_code_stats("js", "//\n").num_code_lines == 1

    def test_block_comment_closing_line_is_code(self):
        stats = calculate_source_code_stats("c", "/* one\ntwo\nthree */\nx = 1;\n")
        assert stats.num_comment_lines == 2
        assert stats.num_code_lines == 2

    def test_single_line_block_comment_is_code(self):
        """A block opened and closed on the same line is no longer open after it."""
        stats = calculate_source_code_stats("c", "/* short */\n")
        assert stats.num_code_lines == 1
        assert stats.num_comment_lines == 0

    def test_block_start_must_be_at_column_zero(self):
        stats = calculate_source_code_stats("c", "  /* indented\nstill code\n")
        assert stats.num_comment_lines == 0
        assert stats.num_code_lines == 2

    def test_blank_line_inside_block_counts_twice(self):
        stats = calculate_source_code_stats("c", "/*\n\n*/\n")
        assert stats.num_comment_lines == 2
        assert stats.num_blank_lines == 1
        assert stats.num_code_lines == 1

    def test_whitespace_only_is_blank(self):
        stats = calculate_source_code_stats("py", "   \n\t\n")
        assert stats.num_blank_lines == 2
        assert stats.num_code_lines == 0


class TestIndentation:
    def test_spaces_floor_to_levels(self):
        stats = calculate_source_code_stats("c", "   a\n     b\n        c\n")
        assert stats.total_indent_levels == 0 + 1 + 2

    def test_tabs_count_as_four_spaces(self):
        stats = calculate_source_code_stats("c", "\ta\n\t\tb\n")
        assert stats.total_indent_levels == 3

    def test_mixed_leading_whitespace_measures_first_run(self):
        # Spaces then a tab: the tab run is not anchored at column 0
        stats = calculate_source_code_stats("c", "    \tx\n")
        assert stats.total_indent_levels == 1

    def test_comment_lines_are_not_indented(self):
        stats = calculate_source_code_stats("py", "        # deep comment\nx\n")
        assert stats.total_indent_levels == 0


class TestEmptyInput:
    def test_empty_file_has_nan_averages(self):
        stats = calculate_source_code_stats("py", "")
        assert stats.num_code_lines == 0
        assert math.isnan(stats.avg_indent_levels)
        assert math.isnan(stats.std_indent_level)

    def test_comment_only_file_has_nan_averages(self):
        stats = calculate_source_code_stats("py", "# only\n")
        assert stats.num_comment_lines == 1
        assert math.isnan(stats.avg_indent_levels)

    def test_missing_final_newline(self):
        assert calculate_source_code_stats("c", "a\nb").num_code_lines == 2

    def test_crlf_line_endings(self):
        stats = calculate_source_code_stats("py", "x = 1\r\n\r\n# c\r\n")
        assert stats.num_code_lines == 1
        assert stats.num_blank_lines == 1
        assert stats.num_comment_lines == 1


class TestLanguageHint:
    @pytest.mark.parametrize(
        "path,expected",
        [
            ("src/main.rs", "rs"),
            ("tool.py", "py"),
            ("a/b/archive.tar.gz", "gz"),
            ("Makefile", "unknown"),
            (".gitignore", "unknown"),
            ("dir.d/README", "unknown"),
        ],
    )
    def test_extension(self, path, expected):
        assert language_hint(path) == expected
