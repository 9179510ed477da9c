"""Questionnaire constants shared across the SDK.

These values are referenced by the models, normalizer, and validator.
Answer kind strings mirror the ``answer_kind`` keys used in the YAML form
definitions under ``forms/``.

The yes/no labels can be overridden via environment variables so that
deployments in another language can change them without code changes.
"""

import os

# --- Answer kinds ---
YES_NO = "yes_no"
MULTI_SELECT = "multi_select"
SINGLE_SELECT = "single_select"
FREE_TEXT = "free_text"
INTEGER = "integer"
DECIMAL = "decimal"

# Kinds whose answers are picked from the question's options.
CHOICE_KINDS: set[str] = {YES_NO, SINGLE_SELECT, MULTI_SELECT}

# Kinds whose answers normalize to a single string.
TEXT_KINDS: set[str] = {YES_NO, SINGLE_SELECT, FREE_TEXT}

# Kinds whose answers normalize to a number.
NUMERIC_KINDS: set[str] = {INTEGER, DECIMAL}

# Labels shown for yes/no questions that carry no authored options.
# Overridable via QUESTIONNAIRE_YES_LABEL / QUESTIONNAIRE_NO_LABEL env vars.
YES_LABEL = os.getenv("QUESTIONNAIRE_YES_LABEL", "Sim")
NO_LABEL = os.getenv("QUESTIONNAIRE_NO_LABEL", "Não")

# --- Validation outcome codes ---
OUTCOME_OK = "ok"
OUTCOME_MISSING = "missing"
OUTCOME_NOT_A_NUMBER = "not_a_number"
OUTCOME_INVALID_OPTION = "invalid_option"

# Messages shown next to the field for each failing outcome.
OUTCOME_MESSAGES: dict[str, str] = {
    OUTCOME_MISSING: "Esta pergunta é obrigatória",
    OUTCOME_NOT_A_NUMBER: "Informe um número válido",
    OUTCOME_INVALID_OPTION: "Opção de resposta inválida",
}
