"""ConditionIndex tests — lookups, cycle detection, ordering helpers."""

import pytest

from questionnaire_rules.errors import CyclicConditionGraph, SelfReferentialCondition
from questionnaire_rules.index import ConditionIndex, build_index
from questionnaire_rules.models import Condition


def _c(cid, origin, dest, option=None):
    """Shorthand to build a Condition; option ids are not checked by the index."""
    return Condition(id=cid, origin_id=origin, option_id=option or f"{origin}_0", destination_id=dest)


class TestLookups:

    def test_conditions_for_preserves_insertion_order(self):
        index = build_index([_c("c1", "a", "d"), _c("c2", "b", "x"), _c("c3", "c", "d")])
        assert [c.id for c in index.conditions_for("d")] == ["c1", "c3"]

    def test_conditions_for_unknown_is_empty(self):
        assert build_index([]).conditions_for("q1") == []

    def test_dependents_of(self):
        index = build_index([_c("c1", "a", "b"), _c("c2", "a", "c"), _c("c3", "a", "b", "a_1")])
        assert index.dependents_of("a") == {"b", "c"}
        assert index.dependents_of("b") == set()

    def test_returned_collections_are_copies(self):
        index = build_index([_c("c1", "a", "b")])
        index.conditions_for("b").clear()
        index.dependents_of("a").add("zz")
        assert len(index.conditions_for("b")) == 1
        assert index.dependents_of("a") == {"b"}

    def test_views_and_len(self):
        index = build_index([_c("c1", "a", "b"), _c("c2", "b", "c")])
        assert len(index) == 2
        assert index.origins() == {"a", "b"}
        assert index.destinations() == {"b", "c"}
        assert index.is_conditional("c")
        assert not index.is_conditional("a")


class TestCycles:

    def test_two_node_cycle_rejected(self):
        with pytest.raises(CyclicConditionGraph) as exc:
            build_index([_c("c1", "A", "B"), _c("c2", "B", "A")])
        assert exc.value.question_ids == ["A", "B"]

    def test_transitive_cycle_lists_participants_only(self):
        conditions = [
            _c("c0", "root", "a"),
            _c("c1", "a", "b"),
            _c("c2", "b", "c"),
            _c("c3", "c", "a"),
        ]
        with pytest.raises(CyclicConditionGraph) as exc:
            ConditionIndex.build(conditions)
        assert exc.value.question_ids == ["a", "b", "c"]

    def test_self_loop_rejected(self):
        with pytest.raises(SelfReferentialCondition):
            build_index([_c("c1", "a", "a")])

    def test_diamond_is_not_a_cycle(self):
        index = build_index([
            _c("c1", "a", "b"), _c("c2", "a", "c"),
            _c("c3", "b", "d"), _c("c4", "c", "d"),
        ])
        assert len(index) == 4


class TestTraversal:

    def test_affected_by_is_transitive(self):
        index = build_index([_c("c1", "a", "b"), _c("c2", "b", "c"), _c("c3", "x", "y")])
        assert index.affected_by(["a"]) == {"b", "c"}
        assert index.affected_by(["c"]) == set()
        assert index.affected_by(["a", "x"]) == {"b", "c", "y"}

    def test_topological_order_keeps_form_order_when_possible(self):
        index = build_index([_c("c1", "q1", "q3")])
        assert index.topological_order(["q1", "q2", "q3"]) == ["q1", "q2", "q3"]

    def test_topological_order_moves_origins_first(self):
        # q1 is controlled by q3, which appears later in the form
        index = build_index([_c("c1", "q3", "q1"), _c("c2", "q2", "q3")])
        assert index.topological_order(["q1", "q2", "q3", "q4"]) == ["q2", "q3", "q1", "q4"]

    def test_topological_order_ignores_unknown_ids(self):
        index = build_index([_c("c1", "ghost", "q2")])
        assert index.topological_order(["q1", "q2"]) == ["q1", "q2"]
