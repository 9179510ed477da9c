"""Visibility evaluator — which questions are shown for the current answers.

Rules:
  - a question with no governing conditions is always visible
  - a question with conditions is visible iff ANY of them is satisfied
  - a condition is satisfied when the normalized answer to its origin
    equals the triggering option's label (or, for multi_select origins,
    contains it); an unanswered origin satisfies nothing

Conditions read the *stored* answer of their origin whatever the origin's
own visibility: hiding a question does not erase or ignore what was typed
into it.  Questions are still resolved in topological order of the
(acyclic) condition graph so every origin is settled before the
questions it controls.
"""

from __future__ import annotations

import logging
from typing import Any, Iterable, Mapping, Optional

from questionnaire_rules.index import ConditionIndex
from questionnaire_rules.models.form import Condition, Question
from questionnaire_rules.models.response import VisibilityDelta
from questionnaire_rules.normalizer import is_blank, normalize

logger = logging.getLogger(__name__)


def is_condition_satisfied(
    condition: Condition,
    questions_by_id: Mapping[str, Question],
    answers: Mapping[str, Any],
) -> bool:
    """Return True if the origin's current answer matches the trigger option.

    The option is looked up among the origin's own options, so two questions
    may reuse the same option ids.
    """
    origin = questions_by_id.get(condition.origin_id)
    if origin is None:
        return False
    raw = answers.get(origin.id)
    if is_blank(raw):
        return False

    option = origin.get_option(condition.option_id)
    if option is None or option.question_id != origin.id:
        return False

    value = normalize(origin, raw)
    if isinstance(value, list):
        return option.label in value
    return value == option.label


def compute_visible(
    questions: Iterable[Question],
    index: ConditionIndex,
    answers: Mapping[str, Any],
) -> set[str]:
    """Return the ids of the questions visible for ``answers``."""
    question_list = list(questions)
    return _resolve(question_list, index, answers, [q.id for q in question_list])


def visible_in_order(
    questions: Iterable[Question],
    index: ConditionIndex,
    answers: Mapping[str, Any],
) -> list[str]:
    """Visible question ids in form order (the order a viewer renders them)."""
    question_list = list(questions)
    visible = _resolve(question_list, index, answers, [q.id for q in question_list])
    return [q.id for q in question_list if q.id in visible]


def recompute_visible(
    questions: Iterable[Question],
    index: ConditionIndex,
    answers: Mapping[str, Any],
    previous: Iterable[str],
    changed_ids: Iterable[str],
) -> set[str]:
    """Update a previous visible set after the answers in ``changed_ids`` changed.

    Only questions downstream of a changed answer are re-evaluated; the
    result equals :func:`compute_visible` for the same ``answers`` as long
    as ``previous`` was computed for the same form.
    """
    question_list = list(questions)
    affected = index.affected_by(changed_ids)
    visible = set(previous) - affected
    if not affected:
        return visible
    visible |= _resolve(question_list, index, answers, affected)
    return visible


def visibility_delta(
    before: Iterable[str],
    after: Iterable[str],
    order: Optional[Iterable[str]] = None,
) -> VisibilityDelta:
    """Describe which questions appeared and disappeared between two sets.

    With ``order`` (form order of question ids) the lists follow it;
    otherwise they are sorted.
    """
    before_set, after_set = set(before), set(after)
    shown = after_set - before_set
    hidden = before_set - after_set
    if order is not None:
        order_list = list(order)
        return VisibilityDelta(
            now_visible=[qid for qid in order_list if qid in shown],
            now_hidden=[qid for qid in order_list if qid in hidden],
        )
    return VisibilityDelta(now_visible=sorted(shown), now_hidden=sorted(hidden))


def _resolve(
    question_list: list[Question],
    index: ConditionIndex,
    answers: Mapping[str, Any],
    targets: Iterable[str],
) -> set[str]:
    """Evaluate the questions in ``targets`` in topological order."""
    by_id = {q.id: q for q in question_list}
    target_set = set(targets)
    ordered = [qid for qid in index.topological_order(by_id) if qid in target_set]

    visible: set[str] = set()
    for qid in ordered:
        conditions = index.conditions_for(qid)
        if not conditions:
            visible.add(qid)
            continue
        # OR semantics: the order of the conditions never changes the result
        if any(is_condition_satisfied(c, by_id, answers) for c in conditions):
            visible.add(qid)
        else:
            logger.debug("question %s hidden: none of %d conditions satisfied", qid, len(conditions))
    return visible
