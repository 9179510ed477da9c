"""Public model re-exports for questionnaire_rules.

Consumers should import from ``questionnaire_rules.models`` rather than
reaching into sub-modules directly.
"""

# --- Form definition ---
from questionnaire_rules.models.form import (
    AnswerKind,
    AnswerOption,
    Condition,
    Form,
    FormDefinition,
    Orientation,
    Question,
    check_condition,
)

# --- Responses / results ---
from questionnaire_rules.models.response import (
    Evaluation,
    Outcome,
    QuestionResult,
    ResponseSet,
    ValidationReport,
    VisibilityDelta,
)

__all__ = [
    # Form definition
    "AnswerKind",
    "AnswerOption",
    "Condition",
    "Form",
    "FormDefinition",
    "Orientation",
    "Question",
    "check_condition",
    # Responses
    "Evaluation",
    "Outcome",
    "QuestionResult",
    "ResponseSet",
    "ValidationReport",
    "VisibilityDelta",
]
