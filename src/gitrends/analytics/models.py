"""Report entries computed by the analytics engine."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any, Optional


@dataclass(frozen=True)
class HotspotEntry:
    """A file or module with its change activity and current size."""

    name: str
    num_revisions: int
    num_authors: int
    num_code_lines: int
    num_comment_lines: int
    num_blank_lines: int
    total_indent_levels: int

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class ChangeCouplingEdge:
    """Two entities changed in the same revisions.

    ``left_name < right_name``. The revision totals are each side's own
    activity, independent of the pairing.
    """

    left_name: str
    right_name: str
    coupled_revisions: int
    num_left_revisions: int
    num_right_revisions: int

    @property
    def average_revisions(self) -> int:
        # Whole revisions; the ratio divides by the truncated mean
        return (self.num_left_revisions + self.num_right_revisions) // 2

    @property
    def coupling_ratio(self) -> float:
        average = self.average_revisions
        return self.coupled_revisions / average if average > 0 else 0.0

    def partner_of(self, name: str) -> str:
        return self.right_name if name == self.left_name else self.left_name

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["coupling_ratio"] = self.coupling_ratio
        return data


@dataclass(frozen=True)
class SumOfCouplingsEntry:
    name: str
    sum_of_couplings: int

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class OwnershipEntry:
    """Main developer of a file or module by net added lines."""

    name: str
    main_developer: str
    main_developer_net_added_lines: int
    total_net_added_lines: int

    @property
    def ownership_ratio(self) -> float:
        if self.total_net_added_lines == 0:
            return 0.0
        return self.main_developer_net_added_lines / self.total_net_added_lines

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["ownership_ratio"] = self.ownership_ratio
        return data


@dataclass(frozen=True)
class CommitSpreadEntry:
    module: str
    author: str
    num_revisions: int

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class ModuleEntry:
    name: str
    files: tuple[str, ...]

    def to_dict(self) -> dict[str, Any]:
        return {"name": self.name, "files": list(self.files)}


@dataclass(frozen=True)
class AuthorActivity:
    name: str
    num_revisions: int

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class Summary:
    num_revisions: int
    first_commit: Optional[int]
    last_commit: Optional[int]
    num_code_lines: int
    num_files: int
    num_modules: int
    top_authors: tuple[AuthorActivity, ...] = field(default_factory=tuple)

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["top_authors"] = [author.to_dict() for author in self.top_authors]
        return data
