"""questionnaire_server — FastAPI REST API for the questionnaire SDK.

Exposes the FormEngine as a stateless HTTP API: form listing, answer
evaluation (visible questions + validation outcomes) and the final submit
gate.  Nothing is persisted here.
"""
