"""Tests for analytics/coupling.py."""

import pytest

from gitrends.analytics.coupling import (
    build_couplings,
    count_coupled_revisions,
    couplings_for,
    sum_of_couplings,
)
from gitrends.analytics.models import ChangeCouplingEdge


class TestCountCoupledRevisions:
    def test_pairs_are_ordered_and_counted_once_per_revision(self):
        counts = count_coupled_revisions(
            {
                "r1": ["b", "a", "a"],
                "r2": {"a", "b", "c"},
                "r3": ["c"],
            }
        )
        assert counts == {("a", "b"): 2, ("a", "c"): 1, ("b", "c"): 1}

    def test_single_member_revisions_have_no_pairs(self):
        assert count_coupled_revisions({"r1": ["a"], "r2": []}) == {}


class TestBuildCouplings:
    def test_sorted_by_coupled_revisions_then_names(self):
        edges = build_couplings(
            {"r1": {"x", "y"}, "r2": {"a", "b"}, "r3": {"a", "b"}},
            {"a": 2, "b": 3, "x": 1, "y": 1},
        )
        assert [(e.left_name, e.right_name, e.coupled_revisions) for e in edges] == [
            ("a", "b", 2),
            ("x", "y", 1),
        ]
        assert edges[0].num_left_revisions == 2
        assert edges[0].num_right_revisions == 3

    def test_ratio_stays_within_bounds(self):
        revisions = {f"r{i}": {"a", "b"} for i in range(4)}
        revisions["r9"] = {"a"}
        num_revisions = {"a": 5, "b": 4}
        (edge,) = build_couplings(revisions, num_revisions)
        assert 0.0 < edge.coupling_ratio <= 1.0
        assert edge.average_revisions == 4
        assert edge.coupling_ratio == 1.0


class TestEdgeModel:
    def test_ratio_is_zero_without_revisions(self):
        edge = ChangeCouplingEdge("a", "b", 0, 0, 0)
        assert edge.coupling_ratio == 0.0

    def test_average_is_truncated(self):
        edge = ChangeCouplingEdge("a", "b", 1, 1, 2)
        assert edge.average_revisions == 1
        assert edge.coupling_ratio == 1.0

    def test_partner_of(self):
        edge = ChangeCouplingEdge("a", "b", 1, 1, 1)
        assert edge.partner_of("a") == "b"
        assert edge.partner_of("b") == "a"

    def test_to_dict_includes_ratio(self):
        data = ChangeCouplingEdge("a", "b", 1, 1, 3).to_dict()
        assert data["coupling_ratio"] == pytest.approx(0.5)
        assert data["left_name"] == "a"


class TestDerivedViews:
    @pytest.fixture
    def edges(self):
        return [
            ChangeCouplingEdge("a", "b", 5, 6, 7),
            ChangeCouplingEdge("b", "c", 3, 7, 3),
            ChangeCouplingEdge("a", "c", 3, 6, 3),
        ]

    def test_couplings_for(self, edges):
        result = couplings_for(edges, "c")
        assert [(e.left_name, e.right_name, e.coupled_revisions) for e in result] == [
            ("c", "a", 3),
            ("c", "b", 3),
        ]
        assert result[0].num_left_revisions == 3
        assert couplings_for(edges, "c", count=1)[0].right_name == "a"
        assert couplings_for(edges, "zzz") == []

    def test_sum_of_couplings_counts_both_sides(self, edges):
        sums = [(s.name, s.sum_of_couplings) for s in sum_of_couplings(edges)]
        assert sums == [("a", 8), ("b", 8), ("c", 6)]
