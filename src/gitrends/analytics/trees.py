"""Path-hierarchy trees over report entries.

Entity names are split on ``/``; every segment but the last becomes an
internal node and the last one a leaf carrying the entry's payload. Nodes
are collected in name-keyed builders first and frozen into immutable trees
with children sorted by name.

JSON form (``to_dict``)::

    {"type": "Tree", "name": "src", "children": [...]}
    {"type": "Leaf", "name": "main.rs", ...payload}
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any, Callable, Iterable, Union

from .models import ChangeCouplingEdge, HotspotEntry, OwnershipEntry

ROOT_NAME = "root"

DEFAULT_MIN_COUPLED_REVISIONS = 15
DEFAULT_MIN_COUPLING_RATIO = 0.2


@dataclass(frozen=True)
class HotspotLeaf:
    name: str
    size: int
    revision_weight: float
    author_weight: float

    def is_empty(self) -> bool:
        return False

    def to_dict(self) -> dict[str, Any]:
        return {"type": "Leaf", **asdict(self)}


@dataclass(frozen=True)
class CouplingPartner:
    coupled: str
    coupled_revisions: int
    coupling_ratio: float


@dataclass(frozen=True)
class ChangeCouplingLeaf:
    name: str
    couplings: tuple[CouplingPartner, ...]

    def is_empty(self) -> bool:
        return not self.couplings

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": "Leaf",
            "name": self.name,
            "couplings": [asdict(partner) for partner in self.couplings],
        }


@dataclass(frozen=True)
class MainDeveloperLeaf:
    name: str
    size: int
    main_developer: str

    def is_empty(self) -> bool:
        return False

    def to_dict(self) -> dict[str, Any]:
        return {"type": "Leaf", **asdict(self)}


Leaf = Union[HotspotLeaf, ChangeCouplingLeaf, MainDeveloperLeaf]


@dataclass(frozen=True)
class Tree:
    name: str
    children: tuple[Union[Tree, Leaf], ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": "Tree",
            "name": self.name,
            "children": [child.to_dict() for child in self.children],
        }

    def leaves(self) -> list[Leaf]:
        """Every leaf, depth first in child order."""
        result: list[Leaf] = []
        for child in self.children:
            if isinstance(child, Tree):
                result.extend(child.leaves())
            else:
                result.append(child)
        return result


@dataclass
class _TreeBuilder:
    name: str
    subtrees: dict[str, _TreeBuilder] = field(default_factory=dict)
    leaves: dict[str, Leaf] = field(default_factory=dict)

    def insert(self, segments: list[str], make_leaf: Callable[[str], Leaf]) -> None:
        node = self
        for segment in segments[:-1]:
            node = node.subtrees.setdefault(segment, _TreeBuilder(segment))
        node.leaves[segments[-1]] = make_leaf(segments[-1])

    def freeze(self) -> Tree:
        """Immutable tree, bottom-up pruning empty leaves and childless nodes."""
        children: list[Union[Tree, Leaf]] = []
        for subtree in self.subtrees.values():
            frozen = subtree.freeze()
            if frozen.children:
                children.append(frozen)
        children.extend(leaf for leaf in self.leaves.values() if not leaf.is_empty())
        children.sort(key=lambda child: child.name)
        return Tree(self.name, tuple(children))


def split_path(name: str) -> list[str]:
    segments = [segment for segment in name.split("/") if segment]
    return segments or [name]


def _build(
    entries: Iterable[tuple[str, Callable[[str], Leaf]]], split: bool = True
) -> Tree:
    root = _TreeBuilder(ROOT_NAME)
    for name, make_leaf in entries:
        root.insert(split_path(name) if split else [name], make_leaf)
    return root.freeze()


def build_hotspot_tree(hotspots: Iterable[HotspotEntry]) -> Tree:
    """Leaves sized by code lines, weighted by revisions and authors relative to the maximum."""
    hotspots = list(hotspots)
    max_revisions = max((h.num_revisions for h in hotspots), default=0)
    max_authors = max((h.num_authors for h in hotspots), default=0)

    def leaf_factory(hotspot: HotspotEntry) -> Callable[[str], Leaf]:
        return lambda segment: HotspotLeaf(
            name=segment,
            size=hotspot.num_code_lines,
            revision_weight=hotspot.num_revisions / max_revisions if max_revisions else 0.0,
            author_weight=hotspot.num_authors / max_authors if max_authors else 0.0,
        )

    return _build((h.name, leaf_factory(h)) for h in hotspots)


def build_change_coupling_tree(
    edges: Iterable[ChangeCouplingEdge],
    split: bool = True,
    min_coupled_revisions: int = DEFAULT_MIN_COUPLED_REVISIONS,
    min_coupling_ratio: float = DEFAULT_MIN_COUPLING_RATIO,
) -> Tree:
    """Leaves list the partners that pass both thresholds, in both pairing directions.

    With ``split=False`` every entity is a direct child of the root (used for
    modules, whose names are not paths in the tree sense).
    """
    partners: dict[str, list[CouplingPartner]] = {}
    for edge in edges:
        if edge.coupled_revisions < min_coupled_revisions:
            continue
        ratio = edge.coupling_ratio
        if ratio < min_coupling_ratio:
            continue
        partners.setdefault(edge.left_name, []).append(
            CouplingPartner(edge.right_name, edge.coupled_revisions, ratio)
        )
        partners.setdefault(edge.right_name, []).append(
            CouplingPartner(edge.left_name, edge.coupled_revisions, ratio)
        )

    def leaf_factory(coupled: list[CouplingPartner]) -> Callable[[str], Leaf]:
        ordered = tuple(sorted(coupled, key=lambda p: (-p.coupled_revisions, p.coupled)))
        return lambda segment: ChangeCouplingLeaf(name=segment, couplings=ordered)

    return _build(
        ((name, leaf_factory(coupled)) for name, coupled in partners.items()), split=split
    )


def build_main_developer_tree(owners: Iterable[OwnershipEntry]) -> Tree:
    def leaf_factory(owner: OwnershipEntry) -> Callable[[str], Leaf]:
        return lambda segment: MainDeveloperLeaf(
            name=segment,
            size=owner.total_net_added_lines,
            main_developer=owner.main_developer,
        )

    return _build((o.name, leaf_factory(o)) for o in owners)
