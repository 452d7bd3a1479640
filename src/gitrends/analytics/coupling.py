"""Change coupling: entities modified in the same revisions."""

from collections import defaultdict
from itertools import combinations
from typing import Iterable, Mapping, Optional

from .models import ChangeCouplingEdge, SumOfCouplingsEntry


def count_coupled_revisions(
    revision_members: Mapping[str, Iterable[str]],
) -> dict[tuple[str, str], int]:
    """Count, for every unordered pair, the revisions that touched both.

    Keys are ``(left, right)`` with ``left < right``. Each revision counts
    once per pair regardless of how many entries it holds for either side.
    """
    pair_counts: dict[tuple[str, str], int] = defaultdict(int)

    for members in revision_members.values():
        for left, right in combinations(sorted(set(members)), 2):
            pair_counts[(left, right)] += 1

    return dict(pair_counts)


def build_couplings(
    revision_members: Mapping[str, Iterable[str]],
    num_revisions: Mapping[str, int],
) -> list[ChangeCouplingEdge]:
    """All coupling edges, most coupled revisions first.

    *num_revisions* holds each entity's own revision total, which is the
    normalizer of the coupling ratio.
    """
    edges = [
        ChangeCouplingEdge(
            left_name=left,
            right_name=right,
            coupled_revisions=count,
            num_left_revisions=num_revisions[left],
            num_right_revisions=num_revisions[right],
        )
        for (left, right), count in count_coupled_revisions(revision_members).items()
    ]
    edges.sort(key=lambda e: (-e.coupled_revisions, e.left_name, e.right_name))
    return edges


def couplings_for(
    edges: Iterable[ChangeCouplingEdge], name: str, count: Optional[int] = None
) -> list[ChangeCouplingEdge]:
    """Edges touching *name*, oriented so that *name* is the left side."""
    result = []
    for edge in edges:
        if name not in (edge.left_name, edge.right_name):
            continue
        if edge.left_name != name:
            edge = ChangeCouplingEdge(
                left_name=name,
                right_name=edge.left_name,
                coupled_revisions=edge.coupled_revisions,
                num_left_revisions=edge.num_right_revisions,
                num_right_revisions=edge.num_left_revisions,
            )
        result.append(edge)

    result.sort(key=lambda e: (-e.coupled_revisions, e.right_name))
    return result if count is None else result[:count]


def sum_of_couplings(edges: Iterable[ChangeCouplingEdge]) -> list[SumOfCouplingsEntry]:
    """Coupled revisions summed over every partner, both pairing directions."""
    totals: dict[str, int] = defaultdict(int)
    for edge in edges:
        totals[edge.left_name] += edge.coupled_revisions
        totals[edge.right_name] += edge.coupled_revisions

    entries = [SumOfCouplingsEntry(name, total) for name, total in totals.items()]
    entries.sort(key=lambda e: (-e.sum_of_couplings, e.name))
    return entries
