"""FormEngine tests — end-to-end evaluation, incremental change, submission.

The first class walks the reference scenario: Q1 yes/no (required,
"Sim"/"Não") and Q2 free text (required) shown only when Q1 = "Sim".
"""

import logging

import pytest

from helpers.builders import cond, definition, question
from questionnaire_rules.engine import FormEngine
from questionnaire_rules.errors import (
    CyclicConditionGraph,
    InvalidCondition,
    ResponseSetFrozen,
    SubmissionRejected,
)
from questionnaire_rules.models import Condition, ResponseSet


# =====================================================================
# Reference scenario
# =====================================================================


class TestScenario:

    def test_no_hides_follow_up(self, scenario_engine):
        ev = scenario_engine.evaluate({"q1": "Não"})
        assert ev.visible == ["q1"]
        assert {qid: r.outcome for qid, r in ev.report.results.items()} == {"q1": "ok"}
        assert ev.success is True

    def test_yes_requires_follow_up(self, scenario_engine):
        ev = scenario_engine.evaluate({"q1": "Sim"})
        assert ev.visible == ["q1", "q2"]
        assert ev.report.outcome("q1") == "ok"
        assert ev.report.outcome("q2") == "missing"
        assert ev.success is False

    def test_complete_answers_succeed(self, scenario_engine):
        ev = scenario_engine.evaluate({"q1": "Sim", "q2": "hello"})
        assert ev.report.outcome("q2") == "ok"
        assert ev.success is True

    def test_nothing_answered(self, scenario_engine):
        ev = scenario_engine.evaluate({})
        assert ev.visible == ["q1"]
        assert ev.report.outcome("q1") == "missing"

    def test_visible_questions_returns_models(self, scenario_engine):
        assert [q.id for q in scenario_engine.visible_questions({"q1": "Sim"})] == ["q1", "q2"]

    def test_repeated_calls_are_deterministic(self, scenario_engine):
        answers = {"q1": "Sim", "q2": " "}
        assert scenario_engine.evaluate(answers) == scenario_engine.evaluate(answers)


# =====================================================================
# Construction
# =====================================================================


class TestConstruction:

    def test_cycle_aborts_construction(self):
        a = question("a", "yes_no", options=["Sim", "Não"])
        b = question("b", "yes_no", options=["Sim", "Não"])
        d = definition([a, b], [cond("c1", a, "Sim", "b"), cond("c2", b, "Sim", "a")])
        with pytest.raises(CyclicConditionGraph) as exc:
            FormEngine(d)
        assert exc.value.question_ids == ["a", "b"]

    def test_invalid_condition_aborts_construction(self, scenario):
        scenario.conditions.append(
            Condition(id="c2", origin_id="q2", option_id="q1_0", destination_id="q1")
        )
        with pytest.raises(InvalidCondition):
            FormEngine(scenario)

    def test_exposes_index(self, scenario_engine):
        assert scenario_engine.form_id == "f1"
        assert scenario_engine.index.dependents_of("q1") == {"q2"}


# =====================================================================
# Incremental evaluation
# =====================================================================


class TestEvaluateChange:

    def test_delta_after_answer_change(self, chain):
        engine = FormEngine(chain)
        first = engine.evaluate({"q1": "Sim", "q2": "Sim"})
        assert first.visible == ["q1", "q2", "q3"]

        second = engine.evaluate_change({"q1": "Não", "q2": "Sim"}, first.visible, ["q1"])
        assert second.visible == ["q1", "q3"]
        assert second.delta.now_hidden == ["q2"]
        assert second.delta.now_visible == []
        assert second.report.outcome("q3") == "missing"

    def test_matches_full_evaluation(self, chain):
        engine = FormEngine(chain)
        before = engine.evaluate({})
        answers = {"q1": "Sim"}
        incremental = engine.evaluate_change(answers, before.visible, ["q1"])
        full = engine.evaluate(answers)
        assert incremental.visible == full.visible
        assert incremental.report == full.report
        assert incremental.delta.now_visible == ["q2"]

    def test_evaluate_diffs_against_stale_previous(self, chain):
        """A stale previous set only shapes the delta, never the visible set."""
        engine = FormEngine(chain)
        ev = engine.evaluate({"q1": "Sim"}, previous_visible=["q1", "q2", "q3", "ghost"])
        assert ev.visible == ["q1", "q2"]
        assert ev.delta.now_hidden == ["q3"]
        assert ev.delta.now_visible == []
        assert ev.success is True

    def test_unknown_answers_are_logged(self, scenario_engine, caplog):
        with caplog.at_level(logging.WARNING, logger="questionnaire_rules.engine"):
            scenario_engine.evaluate({"q1": "Não", "stray": 1})
        assert "stray" in caplog.text


# =====================================================================
# Submission
# =====================================================================


class TestSubmit:

    def test_submit_freezes(self, scenario_engine):
        draft = ResponseSet(form_id="f1", answers={"q1": "Sim", "q2": "hello"})
        final = scenario_engine.submit(draft)
        assert final.submitted is True
        assert final.answers == draft.answers
        assert draft.submitted is False

    def test_submit_keeps_hidden_answers(self, scenario_engine):
        draft = ResponseSet(form_id="f1", answers={"q1": "Não", "q2": "old text"})
        final = scenario_engine.submit(draft)
        assert final.answers["q2"] == "old text"

    def test_submit_rejected_with_report(self, scenario_engine):
        draft = ResponseSet(form_id="f1", answers={"q1": "Sim"})
        with pytest.raises(SubmissionRejected) as exc:
            scenario_engine.submit(draft)
        assert set(exc.value.report.errors) == {"q2"}

    def test_submit_twice_rejected(self, scenario_engine):
        final = scenario_engine.submit(ResponseSet(form_id="f1", answers={"q1": "Não"}))
        with pytest.raises(ResponseSetFrozen):
            scenario_engine.submit(final)

    def test_submit_to_other_form_rejected(self, scenario_engine):
        with pytest.raises(ValueError, match="cannot be submitted"):
            scenario_engine.submit(ResponseSet(form_id="other", answers={"q1": "Não"}))
