import pytest

from helpers.builders import cond, definition, question
from questionnaire_rules.engine import FormEngine


@pytest.fixture
def scenario():
    """Q1 yes/no (required) controls Q2 free text (required) on "Sim"."""
    q1 = question("q1", "yes_no", required=True, options=["Sim", "Não"])
    q2 = question("q2", "free_text", required=True)
    return definition([q1, q2], [cond("c1", q1, "Sim", "q2")])


@pytest.fixture
def chain():
    """q1 → q2 → q3: each question shows the next when answered "Sim"."""
    q1 = question("q1", "yes_no", options=["Sim", "Não"])
    q2 = question("q2", "yes_no", options=["Sim", "Não"])
    q3 = question("q3", "free_text", required=True)
    return definition(
        [q1, q2, q3],
        [cond("c1", q1, "Sim", "q2"), cond("c2", q2, "Sim", "q3")],
    )


@pytest.fixture
def scenario_engine(scenario):
    return FormEngine(scenario)
