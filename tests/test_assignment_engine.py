"""
Tests for the Assignment Engine.

Covers single and batch recommendations, the least-loaded fallback,
token reconciliation and engine construction from settings.
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from decimal import Decimal

import pytest

from assignment.engine import AssignmentEngine, get_assignment_engine, index_phases
from assignment.models import CandidateTask, Member, Phase
from assignment.scorer import ScoringWeights


@pytest.fixture
def engine():
    return AssignmentEngine()


class TestRecommend:
    """Single-task recommendations."""

    def test_reference_scenario(self, engine, regression_task, testing_phase, roster):
        assert engine.recommend(regression_task, testing_phase, roster) == "A"

    def test_evaluate_returns_ranked_candidates(self, engine, regression_task, testing_phase, roster):
        result = engine.evaluate(regression_task, testing_phase, roster)

        assert result.member_id == "A"
        assert result.is_assigned
        assert not result.used_fallback
        assert [c.member_id for c in result.candidates] == ["A", "B"]
        assert result.top_score == Decimal("4.9")

    @pytest.mark.parametrize("phase_number,title,expected,score", [
        (1, "Define product roadmap", "u-pm", "4.8"),
        (2, "Create checkout wireframes", "u-des", "4.7"),
        (3, "Write regression tests", "u-qa", "5.0"),
        (4, "Implement payments API", "u-be", "4.6"),
    ])
    def test_team_routing(self, engine, team, phases, phase_number, title, expected, score):
        phase = index_phases(phases)[phase_number]
        task = CandidateTask(title=title, phase_number=phase_number)

        result = engine.evaluate(task, phase, team)

        assert result.member_id == expected
        assert result.top_score == Decimal(score)

    def test_no_fit_leaves_task_unassigned(self, engine, team):
        task = CandidateTask(title="Team offsite planning")
        result = engine.evaluate(task, None, team)

        assert result.member_id is None
        assert not result.is_assigned
        assert len(result.candidates) == len(team)

    def test_empty_roster(self, engine, regression_task, testing_phase):
        result = engine.evaluate(regression_task, testing_phase, [])
        assert result.member_id is None
        assert result.candidates == []
        assert result.top_score is None

    def test_empty_roster_with_required_assignee(self, engine, regression_task):
        result = engine.evaluate(regression_task, None, [], require_assignee=True)
        assert result.member_id is None
        assert not result.used_fallback

    def test_inputs_are_not_mutated(self, engine, regression_task, testing_phase, roster):
        before = [m.to_dict() for m in roster]
        engine.recommend(regression_task, testing_phase, roster)
        assert [m.to_dict() for m in roster] == before
        assert regression_task.title == "Write regression tests"

    def test_deterministic(self, engine, team, phases):
        task = CandidateTask(title="Implement payments API", phase_number=4)
        phase = index_phases(phases)[4]
        results = {engine.recommend(task, phase, team) for _ in range(20)}
        assert results == {"u-be"}

    def test_ties_keep_roster_order(self, engine):
        task = CandidateTask(title="Write unit tests")
        first = Member(id="first", role_name="QA Engineer", current_task_count=2)
        second = Member(id="second", role_name="Test Engineer", current_task_count=2)

        assert engine.recommend(task, None, [first, second]) == "first"
        assert engine.recommend(task, None, [second, first]) == "second"


class TestFallback:
    """Least-loaded fallback when an assignee is required."""

    def test_fallback_picks_least_loaded(self, engine, team):
        task = CandidateTask(title="Team offsite planning")
        result = engine.evaluate(task, None, team, require_assignee=True)

        assert result.member_id == "u-qa"
        assert result.used_fallback

    def test_fallback_not_used_when_a_candidate_fits(self, engine, regression_task, testing_phase, roster):
        result = engine.evaluate(regression_task, testing_phase, roster, require_assignee=True)
        assert result.member_id == "A"
        assert not result.used_fallback

    def test_fallback_tie_uses_roster_order(self, engine):
        task = CandidateTask(title="Team offsite planning")
        roster = [
            Member(id="x", role_name="Generalist", current_task_count=1),
            Member(id="y", role_name="Generalist", current_task_count=1),
        ]
        assert engine.evaluate(task, None, roster, require_assignee=True).member_id == "x"


class TestBatch:
    """Batch recommendations score each task on its own."""

    def test_batch_matches_individual_calls(self, engine, team, phases):
        tasks = [
            CandidateTask(title="Define product roadmap", phase_number=1),
            CandidateTask(title="Create checkout wireframes", phase_number=2),
            CandidateTask(title="Write regression tests", phase_number=3),
            CandidateTask(title="Implement payments API", phase_number=4),
            CandidateTask(title="Team offsite planning", phase_number=None),
        ]
        results = engine.recommend_batch(tasks, phases, team)

        assert [r.member_id for r in results] == ["u-pm", "u-des", "u-qa", "u-be", None]
        indexed = index_phases(phases)
        for task, result in zip(tasks, results):
            assert result.task is task
            phase = indexed.get(task.phase_number) if task.phase_number is not None else None
            assert result.member_id == engine.recommend(task, phase, team)

    def test_batch_does_not_accumulate_load(self, engine, roster, testing_phase):
        tasks = [CandidateTask(title=f"Write tests {i}", phase_number=3) for i in range(10)]
        results = engine.recommend_batch(tasks, [testing_phase], roster)
        assert {r.member_id for r in results} == {"A"}

    def test_unknown_phase_number_is_unconstrained(self, engine, roster):
        task = CandidateTask(title="Write regression tests", phase_number=99)
        [result] = engine.recommend_batch([task], [], roster)
        assert result.member_id == "A"
        assert not result.candidates[0].phase_match

    def test_batch_with_required_assignee(self, engine, team):
        tasks = [CandidateTask(title="Team offsite planning")]
        [result] = engine.recommend_batch(tasks, [], team, require_assignee=True)
        assert result.member_id == "u-qa"
        assert result.used_fallback

    def test_duplicate_phase_numbers_keep_first(self):
        indexed = index_phases([Phase(1, "Discovery"), Phase(1, "Build")])
        assert indexed[1].phase_name == "Discovery"

    def test_concurrent_batches(self, engine, team, phases):
        tasks = [
            CandidateTask(title="Define product roadmap", phase_number=1),
            CandidateTask(title="Implement payments API", phase_number=4),
        ]
        expected = [r.member_id for r in engine.recommend_batch(tasks, phases, team)]

        with ThreadPoolExecutor(max_workers=4) as pool:
            futures = [pool.submit(engine.recommend_batch, tasks, phases, team) for _ in range(16)]
            outcomes = [[r.member_id for r in f.result()] for f in futures]

        assert all(outcome == expected for outcome in outcomes)


class TestReconcileToken:
    """Tokens echoed back by text generation."""

    @pytest.fixture
    def context(self, engine, team, phases):
        return engine.build_prompt_context(team, phases)

    def test_known_token(self, engine, context):
        assert engine.reconcile_token("M3", context) == "u-be"

    def test_lowercase_token(self, engine, context):
        assert engine.reconcile_token(" m1 ", context.encoding) == "u-pm"

    def test_plain_mapping(self, engine, context):
        assert engine.reconcile_token("M5", dict(context.mapping)) == "u-biz"

    def test_verbatim_member_id_accepted(self, engine, context):
        assert engine.reconcile_token("u-qa", context) == "u-qa"

    @pytest.mark.parametrize("token", [None, "", "  "])
    def test_missing_token_means_unassigned(self, engine, context, token, caplog):
        with caplog.at_level(logging.WARNING, logger="assignment.decisions"):
            assert engine.reconcile_token(token, context) is None
        assert caplog.records == []

    def test_unknown_token_logged_and_dropped(self, engine, context, caplog):
        with caplog.at_level(logging.WARNING, logger="assignment.decisions"):
            assert engine.reconcile_token("M42", context) is None
        assert "Unrecognized assignee token: M42" in caplog.text

    def test_name_is_not_guessed(self, engine, context):
        assert engine.reconcile_token("Priya", context) is None


class TestDecisionLogging:

    def test_decision_logged(self, engine, regression_task, testing_phase, roster, caplog):
        with caplog.at_level(logging.INFO, logger="assignment.decisions"):
            engine.recommend(regression_task, testing_phase, roster)

        [record] = [r for r in caplog.records if r.name == "assignment.decisions"]
        assert record.getMessage() == "Recommended assignee for task: Write regression tests"
        assert record.extra_data["member_id"] == "A"
        assert record.extra_data["score"] == "4.9"

    def test_unassigned_logged(self, engine, team, caplog):
        with caplog.at_level(logging.INFO, logger="assignment.decisions"):
            engine.recommend(CandidateTask(title="Team offsite planning"), None, team)
        assert "No suitable assignee for task: Team offsite planning" in caplog.text

    def test_batch_decisions_tagged_with_project(self, engine, regression_task, testing_phase, roster, caplog):
        with caplog.at_level(logging.INFO, logger="assignment.decisions"):
            engine.recommend_batch([regression_task], [testing_phase], roster, project_id="proj-42")

        decisions = [r for r in caplog.records if r.name == "assignment.decisions"]
        assert decisions
        assert all(r.project_id == "proj-42" for r in decisions)

    def test_candidate_scores_logged_at_debug(self, engine, regression_task, testing_phase, roster, caplog):
        with caplog.at_level(logging.DEBUG, logger="assignment.decisions"):
            engine.recommend(regression_task, testing_phase, roster)

        debug = [r for r in caplog.records if r.levelno == logging.DEBUG and r.name == "assignment.decisions"]
        assert debug[0].extra_data["scores"] == {"A": "4.9", "B": "-2.5"}


class TestConstruction:

    def test_custom_weights(self, roster, regression_task, testing_phase):
        engine = AssignmentEngine(weights=ScoringWeights(min_score=10))
        assert engine.recommend(regression_task, testing_phase, roster) is None

    def test_from_settings_reads_environment(self, monkeypatch, roster, regression_task, testing_phase):
        monkeypatch.setenv("ASSIGNMENT_MIN_SELECTION_SCORE", "5")
        monkeypatch.setenv("ASSIGNMENT_DESCRIPTION_PREVIEW_CHARS", "10")

        engine = AssignmentEngine.from_settings()

        assert engine.weights.min_score == Decimal("5")
        assert engine.codec.description_chars == 10
        assert engine.recommend(regression_task, testing_phase, roster) is None

    def test_shared_engine_is_cached(self):
        assert get_assignment_engine() is get_assignment_engine()
