"""questionnaire_rules — conditional visibility & validation engine for forms.

Public API:
    FormEngine        — evaluates answer snapshots against one form
    FormStore         — loads YAML form definitions into typed models
    build_index       — builds the ConditionIndex for a list of conditions
    ConditionIndex    — destination/origin lookups over display conditions
    compute_visible   — visible question ids for an answer snapshot
    validate          — per-question validation of the visible questions
    normalize         — canonical shape of one raw answer

Models:
    Form, Question, AnswerOption, Condition, FormDefinition
    ResponseSet, QuestionResult, ValidationReport, VisibilityDelta, Evaluation

Errors:
    FormStructureError — base of InvalidCondition, SelfReferentialCondition,
                         CyclicConditionGraph, DuplicateQuestion
    ResponseSetFrozen, SubmissionRejected
"""

from questionnaire_rules.engine import FormEngine
from questionnaire_rules.errors import (
    CyclicConditionGraph,
    DuplicateQuestion,
    FormStructureError,
    InvalidCondition,
    ResponseSetFrozen,
    SelfReferentialCondition,
    SubmissionRejected,
)
from questionnaire_rules.index import ConditionIndex, build_index
from questionnaire_rules.models import (
    AnswerOption,
    Condition,
    Evaluation,
    Form,
    FormDefinition,
    Question,
    QuestionResult,
    ResponseSet,
    ValidationReport,
    VisibilityDelta,
)
from questionnaire_rules.normalizer import normalize
from questionnaire_rules.store import FormStore
from questionnaire_rules.validation import validate
from questionnaire_rules.visibility import compute_visible

__all__ = [
    # Engine & store
    "FormEngine",
    "FormStore",
    "ConditionIndex",
    "build_index",
    "compute_visible",
    "normalize",
    "validate",
    # Models
    "AnswerOption",
    "Condition",
    "Evaluation",
    "Form",
    "FormDefinition",
    "Question",
    "QuestionResult",
    "ResponseSet",
    "ValidationReport",
    "VisibilityDelta",
    # Errors
    "CyclicConditionGraph",
    "DuplicateQuestion",
    "FormStructureError",
    "InvalidCondition",
    "ResponseSetFrozen",
    "SelfReferentialCondition",
    "SubmissionRejected",
]
