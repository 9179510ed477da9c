"""Validation engine — per-question outcomes for the visible questions.

Only questions in the visible set are validated; hidden questions are never
reported, whatever their ``required`` flag.  Outcomes:

  - ok
  - missing:        required, and the normalized answer is absent, an empty
                    list, or an empty / whitespace-only string
  - not_a_number:   integer / decimal question whose raw value is present
                    but does not parse as that numeric subtype
  - invalid_option: a choice answer that names no option of the question

Problems are collected for every question; nothing here raises.
"""

from __future__ import annotations

from typing import Any, Iterable, Mapping

from questionnaire_rules.constants import (
    NUMERIC_KINDS,
    OUTCOME_INVALID_OPTION,
    OUTCOME_MESSAGES,
    OUTCOME_MISSING,
    OUTCOME_NOT_A_NUMBER,
)
from questionnaire_rules.models.form import Question
from questionnaire_rules.models.response import QuestionResult, ValidationReport
from questionnaire_rules.normalizer import NormalizedValue, is_blank, normalize


def validate(
    questions: Iterable[Question],
    visible_ids: Iterable[str],
    answers: Mapping[str, Any],
) -> ValidationReport:
    """Validate every visible question; results keep the order of ``questions``."""
    visible = set(visible_ids)
    results: dict[str, QuestionResult] = {}
    for question in questions:
        if question.id not in visible:
            continue
        results[question.id] = validate_question(question, answers.get(question.id))
    return ValidationReport(results=results)


def validate_question(question: Question, raw: Any) -> QuestionResult:
    """Outcome for a single question, assuming it is visible."""
    value = normalize(question, raw)

    if question.answer_kind in NUMERIC_KINDS:
        if value is None:
            if not is_blank(raw):
                return _fail(question, OUTCOME_NOT_A_NUMBER)
            if question.required:
                return _fail(question, OUTCOME_MISSING)
        return QuestionResult(question_id=question.id)

    if _is_empty(value):
        if question.required:
            return _fail(question, OUTCOME_MISSING)
        return QuestionResult(question_id=question.id)

    if question.has_options and question.options and not _matches_options(question, value):
        return _fail(question, OUTCOME_INVALID_OPTION)
    return QuestionResult(question_id=question.id)


def _is_empty(value: NormalizedValue) -> bool:
    if isinstance(value, list):
        return len(value) == 0
    if isinstance(value, str):
        return not value.strip()
    return value is None


def _matches_options(question: Question, value: NormalizedValue) -> bool:
    labels = set(question.option_labels)
    if isinstance(value, list):
        return all(item in labels for item in value)
    return value in labels


def _fail(question: Question, outcome: str) -> QuestionResult:
    return QuestionResult(
        question_id=question.id,
        outcome=outcome,
        message=OUTCOME_MESSAGES[outcome],
    )
