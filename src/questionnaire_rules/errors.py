"""Exceptions raised by the questionnaire SDK.

Structural errors describe defects in authored form data.  They are raised
while a form is loaded or its condition index is built, and abort the whole
evaluation for that form.  They derive from ``ValueError`` so callers that
already treat bad rule data as a ``ValueError`` keep working.

Per-question validation problems are *not* exceptions; they are collected
into a :class:`~questionnaire_rules.models.response.ValidationReport`.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Iterable

if TYPE_CHECKING:
    from questionnaire_rules.models.response import ValidationReport


class FormStructureError(ValueError):
    """Base class for authoring-time defects in a form definition."""


class InvalidCondition(FormStructureError):
    """A condition references an option that does not belong to its origin."""

    def __init__(self, condition_id: str, reason: str) -> None:
        self.condition_id = condition_id
        self.reason = reason
        super().__init__(f"Invalid condition {condition_id!r}: {reason}")


class SelfReferentialCondition(FormStructureError):
    """A condition whose origin and destination are the same question."""

    def __init__(self, condition_id: str, question_id: str) -> None:
        self.condition_id = condition_id
        self.question_id = question_id
        super().__init__(
            f"Condition {condition_id!r} makes question {question_id!r} depend on itself"
        )


class CyclicConditionGraph(FormStructureError):
    """Question visibility depends on itself through a chain of conditions."""

    def __init__(self, question_ids: Iterable[str]) -> None:
        self.question_ids = sorted(set(question_ids))
        super().__init__(
            "Cyclic condition graph between questions: " + ", ".join(self.question_ids)
        )


class DuplicateQuestion(FormStructureError):
    """Two questions in one form share the same id."""

    def __init__(self, question_id: str) -> None:
        self.question_id = question_id
        super().__init__(f"Duplicate question id {question_id!r}")


class ResponseSetFrozen(ValueError):
    """A submitted response set was asked to change."""

    def __init__(self, form_id: str) -> None:
        self.form_id = form_id
        super().__init__(f"Response set for form {form_id!r} is already submitted")


class SubmissionRejected(ValueError):
    """Submit was refused because the response set does not validate."""

    def __init__(self, report: "ValidationReport") -> None:
        self.report = report
        failing = ", ".join(sorted(report.errors))
        super().__init__(f"Response set is not submittable; failing questions: {failing}")
