"""FormEngine — evaluates answer snapshots against one form definition.

Stateless engine pattern: the engine is built once per form load (integrity
checks + condition index) and every call receives its own answers snapshot
and returns fresh result models.  No per-respondent state is kept, so one
engine can serve many sessions at once.

Typical form-viewer loop::

    engine = FormEngine(definition)
    ev = engine.evaluate(answers)              # after every answer change
    ev = engine.evaluate_change(answers, ev.visible, ["q1"])
    final = engine.submit(response_set)        # authoritative gate
"""

from __future__ import annotations

import logging
from typing import Any, Iterable, Mapping

from questionnaire_rules.errors import ResponseSetFrozen, SubmissionRejected
from questionnaire_rules.index import ConditionIndex, build_index
from questionnaire_rules.models.form import FormDefinition, Question
from questionnaire_rules.models.response import (
    Evaluation,
    ResponseSet,
    ValidationReport,
)
from questionnaire_rules.validation import validate
from questionnaire_rules.visibility import (
    compute_visible,
    recompute_visible,
    visibility_delta,
)

logger = logging.getLogger(__name__)


class FormEngine:
    """Visibility + validation decisions for one form.

    Args:
        definition: the form snapshot.  Structural defects (invalid or
            self-referential conditions, cycles, duplicate questions) raise
            here, before any answer is looked at.
    """

    def __init__(self, definition: FormDefinition) -> None:
        definition.check_integrity()
        self._definition = definition
        self._index = build_index(definition.conditions)
        self._questions: list[Question] = list(definition.questions)
        self._order: list[str] = [q.id for q in self._questions]

    @property
    def form_id(self) -> str:
        return self._definition.form.id

    @property
    def definition(self) -> FormDefinition:
        return self._definition

    @property
    def index(self) -> ConditionIndex:
        return self._index

    # ==================================================================
    # Visibility
    # ==================================================================

    def visible_ids(self, answers: Mapping[str, Any]) -> list[str]:
        """Visible question ids in form order."""
        visible = compute_visible(self._questions, self._index, answers)
        return [qid for qid in self._order if qid in visible]

    def visible_questions(self, answers: Mapping[str, Any]) -> list[Question]:
        """Visible questions in form order."""
        visible = compute_visible(self._questions, self._index, answers)
        return [q for q in self._questions if q.id in visible]

    # ==================================================================
    # Validation / evaluation
    # ==================================================================

    def validate(
        self, answers: Mapping[str, Any], visible: Iterable[str] | None = None
    ) -> ValidationReport:
        """Validate ``answers``; computes the visible set when not given."""
        if visible is None:
            visible = compute_visible(self._questions, self._index, answers)
        return validate(self._questions, visible, answers)

    def evaluate(
        self,
        answers: Mapping[str, Any],
        previous_visible: Iterable[str] | None = None,
    ) -> Evaluation:
        """Full evaluation: visible questions plus their validation outcomes.

        ``previous_visible`` only feeds the reported ``delta``; the visible
        set itself is always recomputed from ``answers``.
        """
        self._warn_unknown(answers)
        visible = self.visible_ids(answers)
        report = validate(self._questions, visible, answers)
        delta = None
        if previous_visible is not None:
            delta = visibility_delta(previous_visible, visible, self._order)
        return Evaluation(
            form_id=self.form_id,
            visible=visible,
            report=report,
            success=report.success,
            delta=delta,
        )

    def evaluate_change(
        self,
        answers: Mapping[str, Any],
        previous_visible: Iterable[str],
        changed_ids: Iterable[str],
    ) -> Evaluation:
        """Evaluate after ``changed_ids`` were edited, reporting what flipped.

        Only questions downstream of the changed answers are re-evaluated
        for visibility; validation always covers the whole visible set.
        ``previous_visible`` is trusted as the result of an earlier call for
        this form, so this is for in-process callers that own that set.
        """
        self._warn_unknown(answers)
        previous = list(previous_visible)
        visible_set = recompute_visible(
            self._questions, self._index, answers, previous, changed_ids,
        )
        visible = [qid for qid in self._order if qid in visible_set]
        report = validate(self._questions, visible, answers)
        return Evaluation(
            form_id=self.form_id,
            visible=visible,
            report=report,
            success=report.success,
            delta=visibility_delta(previous, visible, self._order),
        )

    # ==================================================================
    # Submission
    # ==================================================================

    def submit(self, response_set: ResponseSet) -> ResponseSet:
        """Validate once more and return the frozen, submitted response set.

        Raises:
            ValueError: the response set belongs to another form.
            ResponseSetFrozen: it was already submitted.
            SubmissionRejected: a visible question failed validation; the
                exception carries the full report.
        """
        if response_set.form_id != self.form_id:
            raise ValueError(
                f"Response set for form {response_set.form_id!r} "
                f"cannot be submitted to form {self.form_id!r}"
            )
        if response_set.submitted:
            raise ResponseSetFrozen(response_set.form_id)

        report = self.validate(response_set.answers)
        if not report.success:
            logger.info(
                "Submission rejected for form %s: %d failing questions",
                self.form_id, len(report.errors),
            )
            raise SubmissionRejected(report)

        logger.info("Response set submitted for form %s", self.form_id)
        return response_set.freeze()

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _warn_unknown(self, answers: Mapping[str, Any]) -> None:
        known = set(self._order)
        unknown = [qid for qid in answers if qid not in known]
        if unknown:
            logger.warning(
                "form %s: ignoring answers for unknown questions %s",
                self.form_id, sorted(unknown),
            )
