"""Form definition models — the authored side of a questionnaire.

A form snapshot is made of:

  - Form: title, description and display order of the questionnaire
  - Question: one field with a declared ``answer_kind``:
      * yes_no: pick "Sim" or "Não" (or the authored options)
      * single_select: pick one option
      * multi_select: pick zero or more options
      * free_text: open-ended text input
      * integer: whole number input
      * decimal: real number input
  - AnswerOption: one selectable label of a choice question
  - Condition: show ``destination_id`` when the answer to ``origin_id``
    matches the label of option ``option_id``

``FormDefinition`` bundles all of them and is what the YAML files under
``forms/`` deserialize into.  The models carry no evaluation logic; the
structural checks in :func:`check_condition` and
:meth:`FormDefinition.check_integrity` are the only behaviour here.
"""

from __future__ import annotations

from typing import List, Literal, Optional

from pydantic import BaseModel, model_validator

from questionnaire_rules.constants import CHOICE_KINDS, NO_LABEL, YES_LABEL, YES_NO
from questionnaire_rules.errors import (
    DuplicateQuestion,
    InvalidCondition,
    SelfReferentialCondition,
)

AnswerKind = Literal[
    "yes_no", "multi_select", "single_select", "free_text", "integer", "decimal",
]

Orientation = Literal["horizontal", "vertical"]


class Form(BaseModel):
    """Questionnaire header."""

    id: str
    title: str
    description: str = ""
    order: int = 0


class AnswerOption(BaseModel):
    """A selectable label for yes_no, single_select and multi_select questions.

    ``open_answer`` marks an option whose selection implies a free-text
    elaboration.  It is carried for renderers only and never validated.
    """

    id: str
    question_id: str = ""
    label: str
    order: int = 0
    open_answer: bool = False


class Question(BaseModel):
    """One form field.

    ``question_id`` of nested options defaults to the owning question, and
    options are kept sorted by ``order``.  A yes_no question without authored
    options gets the two default labels so conditions can point at them
    (option ids ``<question id>.yes`` and ``<question id>.no``).
    """

    id: str
    form_id: str = ""
    title: str
    code: str = ""
    orientation: Orientation = "vertical"
    order: int = 0
    required: bool = False
    sub_question: bool = False
    answer_kind: AnswerKind
    options: List[AnswerOption] = []

    @model_validator(mode="after")
    def _normalize_options(self):
        if self.answer_kind == YES_NO and not self.options:
            self.options = [
                AnswerOption(id=f"{self.id}.yes", label=YES_LABEL, order=0),
                AnswerOption(id=f"{self.id}.no", label=NO_LABEL, order=1),
            ]
        # Copies, so the caller's AnswerOption instances keep their own owner
        owned = [
            opt if opt.question_id else opt.model_copy(update={"question_id": self.id})
            for opt in self.options
        ]
        # sorted() is stable, so options sharing an order keep authored order
        self.options = sorted(owned, key=lambda o: o.order)
        return self

    @property
    def has_options(self) -> bool:
        """True for kinds whose answers are picked from ``options``."""
        return self.answer_kind in CHOICE_KINDS

    @property
    def option_labels(self) -> list[str]:
        """Labels of the options in display order."""
        return [opt.label for opt in self.options]

    def get_option(self, option_id: str) -> Optional[AnswerOption]:
        """Return the option with ``option_id`` or None."""
        for opt in self.options:
            if opt.id == option_id:
                return opt
        return None


class Condition(BaseModel):
    """Show ``destination_id`` when ``origin_id`` is answered with ``option_id``.

    Several conditions on one destination are OR-combined.

    A Condition is a plain record: whether its option belongs to the origin
    and whether it points a question at itself is checked against the form
    by :func:`check_condition` (run by ``FormDefinition.check_integrity``,
    ``add_condition`` and ``FormEngine``).  The ``self_referential`` flag is
    available right away so builders can reject a self-loop before the
    form exists.
    """

    id: str
    origin_id: str
    option_id: str
    destination_id: str

    @property
    def self_referential(self) -> bool:
        """True when the condition would show or hide its own origin."""
        return self.origin_id == self.destination_id


def check_condition(condition: Condition, origin: Optional[Question]) -> None:
    """Raise if ``condition`` breaks a structural invariant.

    The trigger option is looked up on ``origin`` only; option ids need not
    be unique across the form.

    Raises:
        SelfReferentialCondition: origin and destination are the same question.
        InvalidCondition: the origin is unknown (``None``), or the triggering
            option is not one of the origin's options.
    """
    if condition.self_referential:
        raise SelfReferentialCondition(condition.id, condition.origin_id)
    if origin is None:
        raise InvalidCondition(condition.id, f"unknown origin question {condition.origin_id!r}")

    option = origin.get_option(condition.option_id)
    if option is None:
        raise InvalidCondition(
            condition.id,
            f"option {condition.option_id!r} is not an option of origin {origin.id!r}",
        )
    if option.question_id != origin.id:
        raise InvalidCondition(
            condition.id,
            f"option {condition.option_id!r} belongs to question "
            f"{option.question_id!r}, not origin {origin.id!r}",
        )


class FormDefinition(BaseModel):
    """Complete snapshot of one form: header, questions with options, conditions.

    Questions are kept sorted by ``order`` (stable for ties).
    """

    form: Form
    questions: List[Question] = []
    conditions: List[Condition] = []

    @model_validator(mode="after")
    def _normalize_questions(self):
        owned = [
            q if q.form_id else q.model_copy(update={"form_id": self.form.id})
            for q in self.questions
        ]
        self.questions = sorted(owned, key=lambda q: q.order)
        return self

    @property
    def question_map(self) -> dict[str, Question]:
        """Questions keyed by id."""
        return {q.id: q for q in self.questions}

    def get_question(self, question_id: str) -> Question:
        """Look up a question by id.

        Raises:
            KeyError: if the form has no such question.
        """
        for q in self.questions:
            if q.id == question_id:
                return q
        raise KeyError(question_id)

    def check_integrity(self) -> "FormDefinition":
        """Run the structural checks over the whole snapshot and return self.

        Raises:
            DuplicateQuestion: two questions share an id.
            InvalidCondition: a condition names a question or option that is
                not part of this form, or an option of another question.
            SelfReferentialCondition: a condition points a question at itself.
        """
        seen: set[str] = set()
        for q in self.questions:
            if q.id in seen:
                raise DuplicateQuestion(q.id)
            seen.add(q.id)

        by_id = self.question_map
        for cond in self.conditions:
            self._check_endpoints(cond, seen)
            check_condition(cond, by_id.get(cond.origin_id))
        return self

    def add_condition(self, condition: Condition) -> Condition:
        """Validate ``condition`` against this form and append it."""
        self._check_endpoints(condition, {q.id for q in self.questions})
        check_condition(condition, self.question_map.get(condition.origin_id))
        self.conditions.append(condition)
        return condition

    @staticmethod
    def _check_endpoints(condition: Condition, question_ids: set[str]) -> None:
        # Self-reference is reported as such even when the id is unknown
        if condition.self_referential:
            raise SelfReferentialCondition(condition.id, condition.origin_id)
        for role, qid in (("origin", condition.origin_id), ("destination", condition.destination_id)):
            if qid not in question_ids:
                raise InvalidCondition(condition.id, f"unknown {role} question {qid!r}")
