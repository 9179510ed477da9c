"""Form endpoints — read-only access to the loaded form definitions."""

from fastapi import APIRouter, Depends

from questionnaire_rules.models.form import FormDefinition
from questionnaire_rules.store import FormStore

from questionnaire_server.dependencies import get_store

router = APIRouter(prefix="/forms", tags=["forms"])


@router.get("")
def list_forms(
    store: FormStore = Depends(get_store),
) -> list[dict]:
    """Return the header of every loaded form, in display order."""
    return [
        {
            "id": d.form.id,
            "title": d.form.title,
            "description": d.form.description,
            "order": d.form.order,
        }
        for d in store.list_forms()
    ]


@router.get("/{form_id}")
def get_form(
    form_id: str,
    store: FormStore = Depends(get_store),
) -> FormDefinition:
    """Return the complete definition of one form.  404 if unknown."""
    return store.get(form_id)
