"""Analytics over the active view: hotspots, coupling, ownership, commit spread."""

from __future__ import annotations

from collections import defaultdict
from functools import cached_property
from pathlib import Path
from typing import Optional, TypeVar

from ..indexing.models import CommitLogEntry, FileRevisionEntry
from ..logging_config import get_logger
from ..storage import IndexReader
from .coupling import build_couplings, couplings_for, sum_of_couplings
from .models import (
    AuthorActivity,
    ChangeCouplingEdge,
    CommitSpreadEntry,
    HotspotEntry,
    ModuleEntry,
    OwnershipEntry,
    SumOfCouplingsEntry,
    Summary,
)
from .rules import RuleSet, load_rules
from .trees import (
    DEFAULT_MIN_COUPLED_REVISIONS,
    DEFAULT_MIN_COUPLING_RATIO,
    Tree,
    build_change_coupling_tree,
    build_hotspot_tree,
    build_main_developer_tree,
)
from .view import ActiveView, DateRange

logger = get_logger(__name__)

T = TypeVar("T")


def _limit(items: list[T], count: Optional[int]) -> list[T]:
    return items if count is None else items[:count]


class AnalyticsEngine:
    """Read-only reports over one :class:`ActiveView`.

    Engines never change after construction. Derived results that several
    reports share (coupling edges, hotspot lists) are computed lazily once.
    """

    def __init__(self, view: ActiveView):
        self.view = view

    @classmethod
    def from_data_dir(
        cls, data_dir: str | Path, date_range: Optional[DateRange] = None
    ) -> AnalyticsEngine:
        """Load both tables and the rule files from *data_dir*.

        Raises:
            QueryError: No completed index exists in *data_dir*.
            RuleParseError: A rule file is malformed.
            StorageError: A table cannot be read.
        """
        reader = IndexReader(data_dir)
        commits = reader.read_commit_log()
        entries = reader.read_file_entries()
        rules = load_rules(data_dir)
        return cls.from_tables(commits, entries, rules, date_range)

    @classmethod
    def from_tables(
        cls,
        commits: list[CommitLogEntry],
        entries: list[FileRevisionEntry],
        rules: Optional[RuleSet] = None,
        date_range: Optional[DateRange] = None,
    ) -> AnalyticsEngine:
        view = ActiveView(commits, entries, rules, date_range)
        logger.info(
            "Built view: %d commits, %d active entries, %d files",
            len(view.commits),
            len(view.entries),
            len(view.latest),
        )
        return cls(view)

    @property
    def date_range(self) -> DateRange:
        return self.view.date_range

    # ── Log, files and modules ───────────────────────────────────────

    def commit_log(self) -> list[CommitLogEntry]:
        return list(self.view.commits)

    def summary(self, top_authors: int = 10) -> Summary:
        commits = self.view.commits

        author_revisions: dict[str, set[str]] = defaultdict(set)
        for commit in commits:
            author_revisions[self.view.author_of(commit.revision)].add(commit.revision)
        authors = sorted(
            (AuthorActivity(name, len(revisions)) for name, revisions in author_revisions.items()),
            key=lambda a: (-a.num_revisions, a.name),
        )

        return Summary(
            num_revisions=len({c.revision for c in commits}),
            first_commit=commits[0].date if commits else None,
            last_commit=commits[-1].date if commits else None,
            num_code_lines=sum(e.num_code_lines for e in self.view.latest.values()),
            num_files=len(self.view.latest),
            num_modules=len(self.view.module_files()),
            top_authors=tuple(authors[:top_authors]),
        )

    def files(self, count: Optional[int] = None) -> list[FileRevisionEntry]:
        """Latest snapshot of every active file, largest first."""
        latest = sorted(self.view.latest.values(), key=lambda e: (-e.num_code_lines, e.file_name))
        return _limit(latest, count)

    def file_history(self, file_name: str) -> list[FileRevisionEntry]:
        return [e for e in self.view.entries if e.file_name == file_name]

    def modules(self) -> list[ModuleEntry]:
        return [ModuleEntry(name, tuple(files)) for name, files in self.view.module_files().items()]

    def module_files(self, module_name: str) -> list[str]:
        return self.view.module_files().get(module_name, [])

    # ── Hotspots ─────────────────────────────────────────────────────

    @cached_property
    def _file_hotspots(self) -> list[HotspotEntry]:
        hotspots = []
        for file_name, latest in self.view.latest.items():
            revisions = self.view.file_revisions[file_name]
            hotspots.append(
                HotspotEntry(
                    name=file_name,
                    num_revisions=len(revisions),
                    num_authors=len({self.view.author_of(r) for r in revisions}),
                    num_code_lines=latest.num_code_lines,
                    num_comment_lines=latest.num_comment_lines,
                    num_blank_lines=latest.num_blank_lines,
                    total_indent_levels=latest.total_indent_levels,
                )
            )
        hotspots.sort(key=lambda h: (-h.num_revisions, h.name))
        return hotspots

    @cached_property
    def _module_hotspots(self) -> list[HotspotEntry]:
        # Revision and author totals count every entry in range, including
        # files deleted since or ignored; sizes come from active files only.
        revisions: dict[str, set[str]] = defaultdict(set)
        for entry in self.view.ranged_entries:
            revisions[self.view.module_of(entry.file_name)].add(entry.revision)

        sizes: dict[str, list[int]] = {}
        for file_name, latest in self.view.latest.items():
            size = sizes.setdefault(self.view.module_of(file_name), [0, 0, 0, 0])
            size[0] += latest.num_code_lines
            size[1] += latest.num_comment_lines
            size[2] += latest.num_blank_lines
            size[3] += latest.total_indent_levels

        hotspots = [
            HotspotEntry(
                name=module,
                num_revisions=len(revisions[module]),
                num_authors=len({self.view.author_of(r) for r in revisions[module]}),
                num_code_lines=size[0],
                num_comment_lines=size[1],
                num_blank_lines=size[2],
                total_indent_levels=size[3],
            )
            for module, size in sizes.items()
        ]
        hotspots.sort(key=lambda h: (-h.num_revisions, h.name))
        return hotspots

    def file_hotspots(self, count: Optional[int] = None) -> list[HotspotEntry]:
        return _limit(self._file_hotspots, count)

    def module_hotspots(self, count: Optional[int] = None) -> list[HotspotEntry]:
        return _limit(self._module_hotspots, count)

    # ── Change coupling ──────────────────────────────────────────────

    @cached_property
    def _file_couplings(self) -> list[ChangeCouplingEdge]:
        num_revisions = {name: len(revs) for name, revs in self.view.file_revisions.items()}
        return build_couplings(self.view.revision_files, num_revisions)

    @cached_property
    def _module_couplings(self) -> list[ChangeCouplingEdge]:
        revision_modules = self.view.revision_modules()
        num_revisions: dict[str, int] = defaultdict(int)
        for modules in revision_modules.values():
            for module in modules:
                num_revisions[module] += 1
        return build_couplings(revision_modules, num_revisions)

    def file_couplings(self, count: Optional[int] = None) -> list[ChangeCouplingEdge]:
        return _limit(self._file_couplings, count)

    def module_couplings(self, count: Optional[int] = None) -> list[ChangeCouplingEdge]:
        return _limit(self._module_couplings, count)

    def file_couplings_for(self, file_name: str, count: Optional[int] = None) -> list[ChangeCouplingEdge]:
        return couplings_for(self._file_couplings, file_name, count)

    def module_couplings_for(
        self, module_name: str, count: Optional[int] = None
    ) -> list[ChangeCouplingEdge]:
        return couplings_for(self._module_couplings, module_name, count)

    def file_sum_of_couplings(self, count: Optional[int] = None) -> list[SumOfCouplingsEntry]:
        return _limit(sum_of_couplings(self._file_couplings), count)

    def module_sum_of_couplings(self, count: Optional[int] = None) -> list[SumOfCouplingsEntry]:
        return _limit(sum_of_couplings(self._module_couplings), count)

    # ── Ownership and spread ─────────────────────────────────────────

    def files_main_developer(self, count: Optional[int] = None) -> list[OwnershipEntry]:
        return _limit(self._main_developers(lambda file_name: file_name), count)

    def modules_main_developer(self, count: Optional[int] = None) -> list[OwnershipEntry]:
        return _limit(self._main_developers(self.view.module_of), count)

    def _main_developers(self, entity_of) -> list[OwnershipEntry]:
        # Net growth is summed per (entity, revision) and clamped at zero
        # before it is credited to the revision's author.
        deltas: dict[tuple[str, str], int] = defaultdict(int)
        for entry in self.view.entries:
            deltas[(entity_of(entry.file_name), entry.revision)] += (
                entry.num_added_lines - entry.num_removed_lines
            )

        net_added: dict[str, dict[str, int]] = defaultdict(lambda: defaultdict(int))
        for (entity, revision), delta in deltas.items():
            net_added[entity][self.view.author_of(revision)] += max(0, delta)

        owners = []
        for entity, by_author in net_added.items():
            main_developer, main_lines = min(by_author.items(), key=lambda item: (-item[1], item[0]))
            owners.append(
                OwnershipEntry(
                    name=entity,
                    main_developer=main_developer,
                    main_developer_net_added_lines=main_lines,
                    total_net_added_lines=sum(by_author.values()),
                )
            )

        owners.sort(key=lambda o: (-o.ownership_ratio, -o.total_net_added_lines, o.name))
        return owners

    def commit_spread(self) -> list[CommitSpreadEntry]:
        revisions: dict[tuple[str, str], set[str]] = defaultdict(set)
        for entry in self.view.entries:
            module = self.view.module_of(entry.file_name)
            revisions[(module, self.view.author_of(entry.revision))].add(entry.revision)

        spread = [
            CommitSpreadEntry(module=module, author=author, num_revisions=len(revs))
            for (module, author), revs in revisions.items()
        ]
        spread.sort(key=lambda s: (s.module, -s.num_revisions, s.author))
        return spread

    # ── Structures ───────────────────────────────────────────────────

    def hotspot_tree(self) -> Tree:
        return build_hotspot_tree(self._file_hotspots)

    def file_coupling_tree(
        self,
        min_coupled_revisions: int = DEFAULT_MIN_COUPLED_REVISIONS,
        min_coupling_ratio: float = DEFAULT_MIN_COUPLING_RATIO,
    ) -> Tree:
        return build_change_coupling_tree(
            self._file_couplings, True, min_coupled_revisions, min_coupling_ratio
        )

    def module_coupling_tree(
        self,
        min_coupled_revisions: int = DEFAULT_MIN_COUPLED_REVISIONS,
        min_coupling_ratio: float = DEFAULT_MIN_COUPLING_RATIO,
    ) -> Tree:
        return build_change_coupling_tree(
            self._module_couplings, False, min_coupled_revisions, min_coupling_ratio
        )

    def main_developer_tree(self) -> Tree:
        return build_main_developer_tree(self.files_main_developer())
