"""FastAPI dependency injection — provides the form store loaded at startup."""

from fastapi import Request

from questionnaire_rules.store import FormStore


def get_store(request: Request) -> FormStore:
    """Return the FormStore singleton from ``app.state``."""
    return request.app.state.store
