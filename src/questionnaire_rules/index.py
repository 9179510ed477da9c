"""ConditionIndex — fast lookup over a form's display conditions.

Built once per form load (not per answer change) and shared read-only by the
visibility evaluator afterwards:

    index = build_index(definition.conditions)
    index.conditions_for("q2")   # conditions governing q2, insertion order
    index.dependents_of("q1")    # destinations q1 directly controls
    index.affected_by({"q1"})    # everything downstream of q1

The origin → destination graph must be acyclic; a chain in which a
question's visibility ends up depending on itself raises
:class:`CyclicConditionGraph` naming the questions on the cycle.
"""

from __future__ import annotations

import heapq
import logging
from typing import Iterable

from questionnaire_rules.errors import CyclicConditionGraph, SelfReferentialCondition
from questionnaire_rules.models.form import Condition

logger = logging.getLogger(__name__)

_WHITE, _GREY, _BLACK = 0, 1, 2


class ConditionIndex:
    """Destination → conditions and origin → destinations lookups.

    Use :func:`build_index` (or :meth:`build`) rather than the constructor;
    only ``build`` checks the graph for cycles.
    """

    def __init__(
        self,
        by_destination: dict[str, list[Condition]],
        by_origin: dict[str, dict[str, None]],
        count: int,
    ) -> None:
        self._by_destination = by_destination
        # dict used as an insertion-ordered set of destination ids
        self._by_origin = by_origin
        self._count = count

    @classmethod
    def build(cls, conditions: Iterable[Condition]) -> "ConditionIndex":
        """Index ``conditions`` and reject cyclic dependency graphs.

        Raises:
            SelfReferentialCondition: a condition's origin is its destination.
            CyclicConditionGraph: the origin → destination graph has a cycle.
        """
        by_destination: dict[str, list[Condition]] = {}
        by_origin: dict[str, dict[str, None]] = {}
        count = 0
        for cond in conditions:
            if cond.origin_id == cond.destination_id:
                raise SelfReferentialCondition(cond.id, cond.origin_id)
            by_destination.setdefault(cond.destination_id, []).append(cond)
            by_origin.setdefault(cond.origin_id, {})[cond.destination_id] = None
            count += 1

        cycle = _find_cycle(by_origin)
        if cycle is not None:
            raise CyclicConditionGraph(cycle)

        logger.debug(
            "ConditionIndex built: %d conditions, %d destinations, %d origins",
            count, len(by_destination), len(by_origin),
        )
        return cls(by_destination, by_origin, count)

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    def conditions_for(self, destination_id: str) -> list[Condition]:
        """Conditions governing ``destination_id`` in insertion order."""
        return list(self._by_destination.get(destination_id, ()))

    def dependents_of(self, origin_id: str) -> set[str]:
        """Destination ids whose conditions name ``origin_id`` directly."""
        return set(self._by_origin.get(origin_id, ()))

    def is_conditional(self, question_id: str) -> bool:
        """True if at least one condition governs ``question_id``."""
        return question_id in self._by_destination

    def affected_by(self, origin_ids: Iterable[str]) -> set[str]:
        """Every destination reachable from ``origin_ids``, transitively.

        The origins themselves are included only if some other origin in the
        chain points back at them, which an acyclic index never allows.
        """
        affected: set[str] = set()
        pending = list(origin_ids)
        while pending:
            node = pending.pop()
            for dest in self._by_origin.get(node, ()):
                if dest not in affected:
                    affected.add(dest)
                    pending.append(dest)
        return affected

    def topological_order(self, question_ids: Iterable[str]) -> list[str]:
        """Order ``question_ids`` so every origin precedes its destinations.

        Ties are broken by the position in ``question_ids`` (form order), so
        a form whose conditions only point forward keeps its order.  Edges to
        ids outside ``question_ids`` are ignored.
        """
        ids = list(dict.fromkeys(question_ids))
        position = {qid: i for i, qid in enumerate(ids)}
        in_degree = {qid: 0 for qid in ids}
        for origin, dests in self._by_origin.items():
            if origin not in position:
                continue
            for dest in dests:
                if dest in in_degree:
                    in_degree[dest] += 1

        ready = [position[qid] for qid in ids if in_degree[qid] == 0]
        heapq.heapify(ready)
        ordered: list[str] = []
        while ready:
            qid = ids[heapq.heappop(ready)]
            ordered.append(qid)
            for dest in self._by_origin.get(qid, ()):
                if dest in in_degree:
                    in_degree[dest] -= 1
                    if in_degree[dest] == 0:
                        heapq.heappush(ready, position[dest])
        return ordered

    def origins(self) -> set[str]:
        return set(self._by_origin)

    def destinations(self) -> set[str]:
        return set(self._by_destination)

    def __len__(self) -> int:
        return self._count


def build_index(conditions: Iterable[Condition]) -> ConditionIndex:
    """Build a :class:`ConditionIndex`; see :meth:`ConditionIndex.build`."""
    return ConditionIndex.build(conditions)


def _find_cycle(graph: dict[str, dict[str, None]]) -> list[str] | None:
    """Return the nodes of one cycle in ``graph``, or None if it is acyclic.

    Iterative depth-first search; a GREY node reached again closes a cycle
    made of the current path from that node onwards.
    """
    state: dict[str, int] = {}
    for root in graph:
        if state.get(root, _WHITE) != _WHITE:
            continue
        state[root] = _GREY
        path = [root]
        stack = [iter(graph.get(root, ()))]
        while stack:
            for child in stack[-1]:
                child_state = state.get(child, _WHITE)
                if child_state == _GREY:
                    return path[path.index(child):]
                if child_state == _WHITE:
                    state[child] = _GREY
                    path.append(child)
                    stack.append(iter(graph.get(child, ())))
                    break
            else:
                state[path.pop()] = _BLACK
                stack.pop()
    return None
