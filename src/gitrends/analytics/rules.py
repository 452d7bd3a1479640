"""Rule files that shape the analytics: ignore patterns, module rules, author aliases.

All three files are optional and live in the data directory:

``ignore.txt``
    One glob pattern per line. Files matching any pattern are left out of
    every report.
``modules.txt``
    Lines of the form ``pattern => module name``. The first matching rule
    assigns a file to a module; lines without ``=>`` are skipped.
``authors.txt``
    Lines of the form ``raw author => canonical author``; lines without
    ``=>`` are skipped.

Globs match whole repository-relative paths. ``*`` and ``?`` also match
``/``, ``**`` must be a whole path component and ``[...]`` / ``[!...]`` are
character classes. Matching is case-sensitive.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from ..config import AUTHORS_FILE, IGNORE_FILE, MODULES_FILE
from ..exceptions import RuleParseError
from ..logging_config import get_logger

logger = get_logger(__name__)

ROOT_MODULE = "<root>"

_RULE_LINE = re.compile(r"(.*)=>(.*)")


class GlobSyntaxError(ValueError):
    pass


def translate_glob(pattern: str) -> str:
    """Translate a glob into an equivalent regular expression (without anchors)."""
    parts: list[str] = []
    i = 0
    n = len(pattern)

    while i < n:
        char = pattern[i]

        if char == "?":
            parts.append(".")
            i += 1

        elif char == "*":
            run = 1
            while i + run < n and pattern[i + run] == "*":
                run += 1

            if run == 1:
                parts.append(".*")
                i += 1
                continue
            if run > 2:
                raise GlobSyntaxError("wildcards are either regular `*` or recursive `**`")

            at_start = i == 0 or pattern[i - 1] == "/"
            end = i + 2
            if not at_start or (end < n and pattern[end] != "/"):
                raise GlobSyntaxError("recursive wildcards must form a single path component")

            if end < n:
                # "**/" matches zero or more leading directories
                parts.append("(?:.*/)?")
                i = end + 1
            else:
                parts.append(".*")
                i = end

        elif char == "[":
            j = i + 1
            negate = j < n and pattern[j] == "!"
            if negate:
                j += 1
            # A "]" right after the opening bracket is a literal member
            start = j
            if j < n and pattern[j] == "]":
                j += 1
            close = pattern.find("]", j)
            if close < 0:
                raise GlobSyntaxError("invalid range pattern")

            members = pattern[start:close]
            escaped = "".join("\\" + c if c in "\\^[]" else c for c in members)
            parts.append("[" + ("^" if negate else "") + escaped + "]")
            i = close + 1

        else:
            parts.append(re.escape(char))
            i += 1

    return "".join(parts)


@dataclass(frozen=True)
class GlobPattern:
    pattern: str
    regex: re.Pattern = field(repr=False, compare=False)

    @classmethod
    def compile(cls, pattern: str) -> GlobPattern:
        try:
            regex = re.compile(translate_glob(pattern), re.DOTALL)
        except re.error as e:
            raise GlobSyntaxError(str(e)) from e
        return cls(pattern=pattern, regex=regex)

    def matches(self, path: str) -> bool:
        return self.regex.fullmatch(path) is not None


@dataclass(frozen=True)
class IgnoreRules:
    patterns: tuple[GlobPattern, ...] = ()

    @classmethod
    def parse(cls, text: str, source: Optional[Path] = None) -> IgnoreRules:
        patterns = []
        for line_number, line in enumerate(_lines(text), start=1):
            if not line.strip():
                continue
            patterns.append(_compile(line, source, line_number))
        return cls(tuple(patterns))

    def is_ignored(self, file_name: str) -> bool:
        return any(pattern.matches(file_name) for pattern in self.patterns)


@dataclass(frozen=True)
class ModuleRules:
    rules: tuple[tuple[GlobPattern, str], ...] = ()

    @classmethod
    def parse(cls, text: str, source: Optional[Path] = None) -> ModuleRules:
        rules = []
        for line_number, line in enumerate(_lines(text), start=1):
            match = _RULE_LINE.search(line)
            if match is None:
                continue
            pattern = _compile(match.group(1).strip(), source, line_number)
            rules.append((pattern, match.group(2).strip()))
        return cls(tuple(rules))

    def get_module(self, file_name: str) -> Optional[str]:
        """Module of the first matching rule, if any."""
        for pattern, module_name in self.rules:
            if pattern.matches(file_name):
                return module_name
        return None

    def module_name(self, file_name: str) -> str:
        """Module of *file_name*: first matching rule, else its parent directory."""
        module = self.get_module(file_name)
        if module is not None:
            return module
        if not file_name:
            return file_name
        parent, sep, _ = file_name.rstrip("/").rpartition("/")
        return parent if sep and parent else ROOT_MODULE


@dataclass(frozen=True)
class AuthorAliases:
    aliases: dict[str, str] = field(default_factory=dict)

    @classmethod
    def parse(cls, text: str, source: Optional[Path] = None) -> AuthorAliases:
        aliases: dict[str, str] = {}
        for line_number, line in enumerate(_lines(text), start=1):
            match = _RULE_LINE.search(line)
            if match is None:
                continue
            raw, canonical = match.group(1).strip(), match.group(2).strip()
            if not raw or not canonical:
                continue
            if aliases.get(raw, canonical) != canonical:
                raise RuleParseError(
                    source,
                    line_number,
                    line,
                    f"{raw!r} is already an alias of {aliases[raw]!r}",
                )
            aliases[raw] = canonical
        return cls(aliases)

    def normalize(self, author: str) -> str:
        return self.aliases.get(author, author)


@dataclass(frozen=True)
class RuleSet:
    """The three rule files as loaded for one analytics engine."""

    ignore: IgnoreRules = field(default_factory=IgnoreRules)
    modules: ModuleRules = field(default_factory=ModuleRules)
    authors: AuthorAliases = field(default_factory=AuthorAliases)


def load_rules(data_dir: str | Path) -> RuleSet:
    """Load whichever rule files exist in *data_dir*.

    Raises:
        RuleParseError: A pattern does not compile or an alias is contradictory.
    """
    data_dir = Path(data_dir)
    ignore_text = _read_optional(data_dir / IGNORE_FILE)
    modules_text = _read_optional(data_dir / MODULES_FILE)
    authors_text = _read_optional(data_dir / AUTHORS_FILE)

    rules = RuleSet(
        ignore=IgnoreRules.parse(ignore_text, data_dir / IGNORE_FILE) if ignore_text else IgnoreRules(),
        modules=ModuleRules.parse(modules_text, data_dir / MODULES_FILE) if modules_text else ModuleRules(),
        authors=AuthorAliases.parse(authors_text, data_dir / AUTHORS_FILE) if authors_text else AuthorAliases(),
    )
    logger.debug(
        "Loaded %d ignore patterns, %d module rules, %d author aliases",
        len(rules.ignore.patterns),
        len(rules.modules.rules),
        len(rules.authors.aliases),
    )
    return rules


def _compile(pattern: str, source: Optional[Path], line_number: int) -> GlobPattern:
    try:
        return GlobPattern.compile(pattern)
    except GlobSyntaxError as e:
        raise RuleParseError(source, line_number, pattern, str(e)) from e


def _lines(text: str) -> list[str]:
    return [line[:-1] if line.endswith("\r") else line for line in text.split("\n")]


def _read_optional(path: Path) -> Optional[str]:
    try:
        text = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        return None
    logger.info("Using rule file %s", path)
    return text
