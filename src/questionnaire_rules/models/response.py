"""Response-side models — the contract between the engine and its callers.

  - ResponseSet: one respondent's answers; frozen once submitted
  - QuestionResult: validation outcome for a single visible question
  - ValidationReport: outcomes for every visible question plus ``success``
  - VisibilityDelta: questions that appeared / disappeared after a change
  - Evaluation: everything a form viewer needs after an answer changes

These models are intentionally decoupled from any storage layout so that
callers never depend on how response sets are persisted.
"""

from __future__ import annotations

from typing import Any, Literal, Optional

from pydantic import BaseModel, computed_field

from questionnaire_rules.errors import ResponseSetFrozen
from questionnaire_rules.models.form import FormDefinition

Outcome = Literal["ok", "missing", "not_a_number", "invalid_option"]


class QuestionResult(BaseModel):
    """Validation outcome for one question."""

    question_id: str
    outcome: Outcome = "ok"
    message: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.outcome == "ok"


class ValidationReport(BaseModel):
    """Per-question outcomes for the visible questions of a form.

    Questions that were not visible are absent from ``results``.
    """

    results: dict[str, QuestionResult] = {}

    @computed_field
    @property
    def success(self) -> bool:
        """True iff no question failed."""
        return all(r.ok for r in self.results.values())

    @property
    def errors(self) -> dict[str, QuestionResult]:
        """Only the failing entries, keyed by question id."""
        return {qid: r for qid, r in self.results.items() if not r.ok}

    def outcome(self, question_id: str) -> Optional[str]:
        """Outcome code for ``question_id``, or None if it was not validated."""
        result = self.results.get(question_id)
        return result.outcome if result is not None else None

    def first_error(self) -> Optional[QuestionResult]:
        """First failing result in form order (results are built in form order)."""
        for result in self.results.values():
            if not result.ok:
                return result
        return None


class VisibilityDelta(BaseModel):
    """Questions whose visibility flipped between two evaluations."""

    now_visible: list[str] = []
    now_hidden: list[str] = []

    @property
    def changed(self) -> bool:
        return bool(self.now_visible or self.now_hidden)


class Evaluation(BaseModel):
    """Result of evaluating one answer snapshot against a form."""

    form_id: str
    # Visible question ids in form order
    visible: list[str]
    report: ValidationReport
    success: bool
    delta: Optional[VisibilityDelta] = None


class ResponseSet(BaseModel):
    """Answers collected in one respondent session.

    Mutable while in progress; :meth:`freeze` returns the submitted copy,
    which rejects any further change with :class:`ResponseSetFrozen`.
    """

    form_id: str
    answers: dict[str, Any] = {}
    submitted: bool = False

    def set_answer(self, question_id: str, value: Any) -> None:
        self._ensure_open()
        self.answers[question_id] = value

    def clear_answer(self, question_id: str) -> None:
        self._ensure_open()
        self.answers.pop(question_id, None)

    def freeze(self) -> "ResponseSet":
        """Return a submitted deep copy; the receiver is left untouched."""
        self._ensure_open()
        return self.model_copy(deep=True, update={"submitted": True})

    def to_entries(self, definition: FormDefinition) -> list[dict[str, Any]]:
        """Flatten answers into ``{question_id, value, answer_kind}`` records.

        Answers keyed by a question id the form does not know get an empty
        ``answer_kind``, matching how submitted responses were stored.
        """
        questions = definition.question_map
        entries = []
        for qid, value in self.answers.items():
            q = questions.get(qid)
            entries.append({
                "question_id": qid,
                "value": value,
                "answer_kind": q.answer_kind if q is not None else "",
            })
        return entries

    def _ensure_open(self) -> None:
        if self.submitted:
            raise ResponseSetFrozen(self.form_id)
