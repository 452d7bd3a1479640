"""Per-file line classification: code, comment and blank lines plus indentation.

Classification is a single forward pass with one piece of state, whether the
pass is inside a ``/* ... */`` block comment. The block start is only
recognised at column 0 and the block end only at the end of a line; the line
that closes a block is no longer inside it and is classified like any other
line.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

import numpy as np

_BLANK_LINE = re.compile(r"^\s*$")
_PYTHON_COMMENT_LINE = re.compile(r"^\s*(#.+)")
_SLASH_COMMENT_LINE = re.compile(r"^\s*(//.+)")
_BLOCK_COMMENT_START = re.compile(r"^/\*")
_BLOCK_COMMENT_END = re.compile(r"\*/$")
_SPACE_INDENT = re.compile(r"^ +")
_TAB_INDENT = re.compile(r"^\t+")

TAB_WIDTH = 4
INDENT_WIDTH = 4


@dataclass(frozen=True)
class SourceCodeStats:
    num_code_lines: int
    num_comment_lines: int
    num_blank_lines: int

    total_indent_levels: int
    avg_indent_levels: float  # nan when there are no code lines
    std_indent_level: float  # population variance of indent levels, nan when no code lines


def language_hint(file_name: str) -> str:
    """Language hint from a path's extension, ``"unknown"`` when it has none."""
    base = file_name.rsplit("/", 1)[-1]
    stem, dot, extension = base.rpartition(".")
    if not dot or not stem or not extension:
        return "unknown"
    return extension


def calculate_source_code_stats(file_extension: str, content: str) -> SourceCodeStats:
    """Classify every physical line of *content* and accumulate indentation.

    Args:
        file_extension: Language hint; ``"py"`` selects ``#`` comments, anything
            else ``//`` comments.
        content: Full decoded file text.

    Returns:
        SourceCodeStats for the file. The mean and dispersion are plain
        divisions by the code line count and are NaN for files without code.
    """
    single_comment_line = _PYTHON_COMMENT_LINE if file_extension == "py" else _SLASH_COMMENT_LINE

    block_comment = False
    num_code_lines = 0
    num_comment_lines = 0
    num_blank_lines = 0

    total_indent_levels = 0
    square_total_indent_levels = 0

    for line in _physical_lines(content):
        if not block_comment and _BLOCK_COMMENT_START.search(line):
            block_comment = True

        if block_comment and _BLOCK_COMMENT_END.search(line):
            block_comment = False

        is_comment = block_comment or single_comment_line.search(line) is not None
        is_blank = _BLANK_LINE.search(line) is not None
        is_code = not (is_comment or is_blank)

        if is_comment:
            num_comment_lines += 1

        if is_blank:
            num_blank_lines += 1

        if is_code:
            num_code_lines += 1
            indent_level = _indent_level(line)
            total_indent_levels += indent_level
            square_total_indent_levels += indent_level * indent_level

    with np.errstate(divide="ignore", invalid="ignore"):
        code_lines = np.float64(num_code_lines)
        total = np.float64(total_indent_levels)
        avg_indent_levels = total / code_lines
        std_indent_level = (np.float64(square_total_indent_levels) - (total * total) / code_lines) / code_lines

    return SourceCodeStats(
        num_code_lines=num_code_lines,
        num_comment_lines=num_comment_lines,
        num_blank_lines=num_blank_lines,
        total_indent_levels=total_indent_levels,
        avg_indent_levels=float(avg_indent_levels),
        std_indent_level=float(std_indent_level),
    )


def _indent_level(line: str) -> int:
    # Leading spaces and leading tabs are separate runs anchored at column 0,
    # so at most one of them is non-zero for any given line.
    space_match = _SPACE_INDENT.match(line)
    tab_match = _TAB_INDENT.match(line)
    num_spaces = len(space_match.group()) if space_match else 0
    num_tabs = len(tab_match.group()) if tab_match else 0
    return (num_spaces + num_tabs * TAB_WIDTH) // INDENT_WIDTH


def _physical_lines(content: str) -> list[str]:
    """Split on ``\\n`` only, dropping a trailing ``\\r`` and the empty tail after a final newline."""
    if not content:
        return []
    lines = content.split("\n")
    if lines[-1] == "":
        lines.pop()
    return [line[:-1] if line.endswith("\r") else line for line in lines]
