"""Response normalizer — maps raw answer values to a canonical shape.

Answers arrive from form viewers as loosely-typed JSON: strings, numbers,
lists, booleans or nothing at all.  :func:`normalize` converts a raw value
into the shape declared by the question's ``answer_kind``:

    yes_no, single_select, free_text  → str   (absent → "")
    integer                           → int   (absent / unparsable → None)
    decimal                           → float (absent / unparsable / non-finite → None)
    multi_select                      → list[str] (absent / not a list → [])

Normalization never raises.  Unparsable numbers collapse to ``None`` so the
validation engine can report them as ``missing`` / ``not_a_number`` instead
of the evaluation pass crashing.
"""

from __future__ import annotations

import math
from typing import Any, Iterable, Mapping, Union

from questionnaire_rules.constants import (
    DECIMAL,
    INTEGER,
    MULTI_SELECT,
    NO_LABEL,
    YES_LABEL,
    YES_NO,
)
from questionnaire_rules.models.form import Question

NormalizedValue = Union[str, list[str], int, float, None]


def normalize(question: Question, raw: Any) -> NormalizedValue:
    """Return the canonical value of ``raw`` for ``question``."""
    kind = question.answer_kind
    if kind == MULTI_SELECT:
        return _normalize_list(raw)
    if kind == INTEGER:
        return parse_integer(raw)
    if kind == DECIMAL:
        return parse_decimal(raw)
    return _normalize_text(kind, raw)


def normalize_answers(
    questions: Iterable[Question], answers: Mapping[str, Any]
) -> dict[str, NormalizedValue]:
    """Normalize the answer of every question, answered or not.

    Keys of ``answers`` that match no question are dropped.
    """
    return {q.id: normalize(q, answers.get(q.id)) for q in questions}


def is_blank(raw: Any) -> bool:
    """True if ``raw`` counts as "not provided".

    None, empty or whitespace-only strings, and empty lists are blank.
    Zero and False are real answers.
    """
    if raw is None:
        return True
    if isinstance(raw, str):
        return not raw.strip()
    if isinstance(raw, (list, tuple)):
        return len(raw) == 0
    return False


# ------------------------------------------------------------------
# Numeric parsing
# ------------------------------------------------------------------

def parse_decimal(raw: Any) -> float | None:
    """Parse any finite real number; None when absent or unparsable."""
    # bool is an int subclass but never a numeric answer
    if raw is None or isinstance(raw, bool):
        return None
    try:
        if isinstance(raw, (int, float)):
            value = float(raw)
        elif isinstance(raw, str):
            text = raw.strip()
            if not text:
                return None
            value = float(text)
        else:
            return None
    except (TypeError, ValueError, OverflowError):
        return None
    return value if math.isfinite(value) else None


def parse_integer(raw: Any) -> int | None:
    """Parse a whole number; values with a fractional part are rejected.

    "12" and 12.0 parse to 12; "12.5" is not an integer and yields None.
    """
    if raw is None or isinstance(raw, bool):
        return None
    if isinstance(raw, int):
        return raw
    if isinstance(raw, str):
        try:
            return int(raw.strip())
        except ValueError:
            pass  # may still be "12.0"
    value = parse_decimal(raw)
    if value is None or not value.is_integer():
        return None
    return int(value)


# ------------------------------------------------------------------
# Text / list shapes
# ------------------------------------------------------------------

def _normalize_text(kind: str, raw: Any) -> str:
    if raw is None:
        return ""
    if isinstance(raw, str):
        return raw
    if isinstance(raw, bool):
        if kind == YES_NO:
            return YES_LABEL if raw else NO_LABEL
        return "true" if raw else "false"
    if isinstance(raw, (int, float)):
        if isinstance(raw, float) and raw.is_integer():
            return str(int(raw))
        return str(raw)
    # Lists, dicts and other containers have no single-string form
    return ""


def _normalize_list(raw: Any) -> list[str]:
    if not isinstance(raw, (list, tuple)):
        return []
    return [item if isinstance(item, str) else str(item) for item in raw if item is not None]
