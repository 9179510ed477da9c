"""Response endpoints — evaluate answers and submit a response set.

The form viewer calls ``evaluate`` after every answer change to learn which
questions to render and whether submit should be enabled, then ``submit``
once as the authoritative gate.  Neither endpoint stores anything.
"""

from typing import Any

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from questionnaire_rules.models.response import Evaluation, ResponseSet
from questionnaire_rules.store import FormStore

from questionnaire_server.dependencies import get_store

router = APIRouter(prefix="/forms", tags=["responses"])


# ------------------------------------------------------------------
# Request models
# ------------------------------------------------------------------

class EvaluateRequest(BaseModel):
    """Body for POST /forms/{form_id}/evaluate.

    With ``previous_visible`` (what the viewer currently renders) the
    response also carries a visibility ``delta``.  The list is only diffed
    against; visibility is recomputed from ``answers`` on every call, so a
    stale list cannot change ``visible`` or ``success``.
    """
    answers: dict[str, Any] = {}
    previous_visible: list[str] | None = None


class SubmitRequest(BaseModel):
    """Body for POST /forms/{form_id}/submit."""
    answers: dict[str, Any] = {}


# ------------------------------------------------------------------
# Endpoints
# ------------------------------------------------------------------

@router.post("/{form_id}/evaluate")
def evaluate_answers(
    form_id: str,
    body: EvaluateRequest,
    store: FormStore = Depends(get_store),
) -> Evaluation:
    """Return the visible questions and their validation outcomes."""
    engine = store.engine_for(form_id)
    return engine.evaluate(body.answers, previous_visible=body.previous_visible)


@router.post("/{form_id}/submit")
def submit_response(
    form_id: str,
    body: SubmitRequest,
    store: FormStore = Depends(get_store),
) -> ResponseSet:
    """Validate and freeze the response set.

    Returns the submitted response set, or 422 with the validation report
    when a visible question fails.
    """
    engine = store.engine_for(form_id)
    return engine.submit(ResponseSet(form_id=form_id, answers=body.answers))
