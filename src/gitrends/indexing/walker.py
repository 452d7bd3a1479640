"""Commit graph traversal with the merge ignore-set policy.

Commits live in an arena keyed by full id and reference their parents by id.
The walk is an explicit worklist ordered newest first by committer time, so
every commit reachable from the head is visited exactly once.

The ignore set decides which commits get diffed:

* a commit found in the ignore set is removed from it and not diffed;
* a root commit is diffed against the empty tree;
* a commit with one parent is diffed against that parent;
* a merge is diffed against each parent in turn, and every parent id is
  added to the ignore set.

This is an approximation of "effective change" across merges and can under-
or over-count in tangled topologies; downstream counts depend on it as-is.
"""

from __future__ import annotations

import heapq
from dataclasses import dataclass
from typing import Iterator, Mapping, Optional

from ..exceptions import RepositoryError
from ..logging_config import get_logger
from .models import Commit

logger = get_logger(__name__)


@dataclass(frozen=True)
class WalkStep:
    """One visited commit and the parents to diff it against.

    ``parents_to_diff`` is empty for ignored commits and ``(None,)`` for a
    root commit (diff against the empty tree).
    """

    commit: Commit
    parents_to_diff: tuple[Optional[str], ...]
    ignored: bool = False


class CommitGraphWalker:
    """Walk every commit reachable from *head_id* in a commit arena."""

    def __init__(self, commits: Mapping[str, Commit], head_id: str):
        if head_id not in commits:
            raise RepositoryError("<arena>", f"head commit {head_id} not found in history")
        self.commits = commits
        self.head_id = head_id
        self._ignore: set[str] = set()

    @property
    def ignore_set(self) -> frozenset[str]:
        """Snapshot of the commit ids currently waiting to be skipped."""
        return frozenset(self._ignore)

    def traverse(self) -> Iterator[Commit]:
        """Yield reachable commits newest first, each exactly once."""
        visited: set[str] = set()
        seq = 0
        head = self.commits[self.head_id]
        worklist: list[tuple[int, int, str]] = [(-head.timestamp, seq, head.id)]

        while worklist:
            _, _, commit_id = heapq.heappop(worklist)
            if commit_id in visited:
                continue
            visited.add(commit_id)

            commit = self.commits[commit_id]
            yield commit

            for parent_id in commit.parents:
                if parent_id in visited:
                    continue
                parent = self.commits.get(parent_id)
                if parent is None:
                    # Shallow clones cut history; the boundary commit keeps its parent id
                    logger.debug("Parent %s of %s is not available", parent_id, commit.revision)
                    continue
                seq += 1
                heapq.heappush(worklist, (-parent.timestamp, seq, parent_id))

    def walk(self) -> Iterator[WalkStep]:
        """Apply the ignore-set policy in traversal order.

        The set is mutated between steps, so consumers must finish with one
        step before asking for the next.
        """
        self._ignore.clear()

        for commit in self.traverse():
            if commit.id in self._ignore:
                self._ignore.discard(commit.id)
                logger.debug("Skipping diff of %s (parent of an indexed merge)", commit.revision)
                yield WalkStep(commit=commit, parents_to_diff=(), ignored=True)
                continue

            if commit.is_root:
                yield WalkStep(commit=commit, parents_to_diff=(None,))
                continue

            if commit.is_merge:
                self._ignore.update(commit.parents)

            yield WalkStep(commit=commit, parents_to_diff=tuple(commit.parents))
