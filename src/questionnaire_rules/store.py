"""FormStore — loads YAML form definitions from ``forms/`` into typed models.

The store is the read-only snapshot source for the engine: it is loaded
once at startup and provides lookup by form id.  It never writes anything
back; authoring happens elsewhere.

Each ``*.yaml`` file holds one form::

    form:
      id: intake
      title: Triagem
    questions:
      - id: q1
        title: Possui alergias?
        answer_kind: yes_no
        required: true
    conditions:
      - id: c1
        origin_id: q1
        option_id: q1.yes
        destination_id: q2

Usage::

    store = FormStore()          # defaults to forms/ relative to repo root
    store.load()                 # parse and integrity-check every file

    engine = store.engine_for("intake")
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Optional

import yaml

from questionnaire_rules.engine import FormEngine
from questionnaire_rules.models.form import FormDefinition

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Utility helpers
# ---------------------------------------------------------------------------

def find_repo_root(start: Optional[Path] = None) -> Path:
    """Walk upwards from *start* to find the repo root (dir with pyproject.toml or .git).

    Falls back to cwd if no marker is found.
    """
    p = (start or Path(__file__).resolve()).parent
    for parent in [p, *p.parents]:
        if (parent / "pyproject.toml").exists() or (parent / ".git").exists():
            return parent
    return Path.cwd()


def load_yaml(path: Path | str) -> Any:
    """Load a single YAML file and return the parsed contents."""
    if isinstance(path, str):
        path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Missing YAML file: {path}")
    with path.open("r", encoding="utf-8") as f:
        return yaml.safe_load(f)


def parse_form(raw: Any, source: str = "<memory>") -> FormDefinition:
    """Build an integrity-checked :class:`FormDefinition` from parsed YAML.

    Raises:
        ValueError: ``raw`` is not a mapping, or a structural check failed.
        pydantic.ValidationError: a record is missing fields or has bad types.
    """
    if not isinstance(raw, dict):
        raise ValueError(f"Form file {source} must contain a mapping, got {type(raw).__name__}")
    return FormDefinition(**raw).check_integrity()


# ---------------------------------------------------------------------------
# FormStore
# ---------------------------------------------------------------------------

class FormStore:
    """Loads every form under the form directory and provides typed lookup.

    Attributes populated after :meth:`load`:

        forms — dict[form_id, FormDefinition]
    """

    def __init__(self, form_dir: str | Path | None = None) -> None:
        if form_dir is None:
            form_dir = find_repo_root() / "forms"
        self._base = Path(form_dir)

        # Populated by load()
        self.forms: dict[str, FormDefinition] = {}
        self._sources: dict[str, Path] = {}
        # One engine per form, built at load time or on first use
        self._engines: dict[str, FormEngine] = {}

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    def load(self) -> None:
        """Parse every ``*.yaml`` / ``*.yml`` file in the form directory.

        Call this once at startup.  Raises ``FileNotFoundError`` if the
        directory is missing; structural defects in any file (including cyclic
        conditions) abort loading.
        """
        if not self._base.is_dir():
            raise FileNotFoundError(f"Missing form directory: {self._base}")

        paths = sorted([*self._base.glob("*.yaml"), *self._base.glob("*.yml")])
        for path in paths:
            definition = parse_form(load_yaml(path), source=str(path))
            form_id = definition.form.id
            if form_id in self.forms:
                raise ValueError(
                    f"Form {form_id!r} already exists (defined in "
                    f"{self._sources[form_id].name} and {path.name})"
                )
            # Building the engine indexes the conditions and rejects cycles
            self._engines[form_id] = FormEngine(definition)
            self.forms[form_id] = definition
            self._sources[form_id] = path

        logger.info("FormStore loaded: %d forms from %s", len(self.forms), self._base)

    def add(self, definition: FormDefinition) -> None:
        """Register an in-memory definition (used by tests and embedders).

        The engine is built here, as in :meth:`load`, so a structural defect
        (including cyclic conditions) is rejected before the form is stored.
        """
        engine = FormEngine(definition)
        self.forms[definition.form.id] = definition
        self._engines[definition.form.id] = engine

    # ------------------------------------------------------------------
    # Lookup helpers
    # ------------------------------------------------------------------

    def get(self, form_id: str) -> FormDefinition:
        """Look up a form definition by id.

        Raises:
            KeyError: if no form with ``form_id`` was loaded.
        """
        return self.forms[form_id]

    def list_forms(self) -> list[FormDefinition]:
        """All loaded forms sorted by display order, then id."""
        return sorted(self.forms.values(), key=lambda d: (d.form.order, d.form.id))

    def engine_for(self, form_id: str) -> FormEngine:
        """Return the (cached) engine for a form.

        Raises:
            KeyError: if no form with ``form_id`` was loaded.
        """
        engine = self._engines.get(form_id)
        if engine is None:
            engine = FormEngine(self.forms[form_id])
            self._engines[form_id] = engine
        return engine
