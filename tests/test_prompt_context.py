"""Tests for the assignment prompt context."""

from assignment.models import Member, Phase, RoleCategory
from assignment.prompt_context import build_assignment_context, render_rules, render_phases
from assignment.role_matcher import PatternRule, RoleMatcherConfig, default_matcher_config
from assignment.scorer import ScoringWeights


MEMBER_ID = "5d1e2a9c-0000-4000-8000-00000000abcd"


class TestBuildAssignmentContext:

    def test_sections(self, phases):
        roster = [Member(id=MEMBER_ID, role_name="QA Engineer", current_task_count=2)]
        context = build_assignment_context(roster, phases)

        assert context.prompt_text.startswith("TEAM (assign with token):")
        assert "M1: QA Engineer | 2 tasks" in context.prompt_text
        assert "P3: Testing & Quality Assurance" in context.prompt_text
        assert "P6: Phase 6" in context.prompt_text
        assert "ASSIGNMENT RULES" in context.prompt_text
        assert context.mapping == {"M1": MEMBER_ID}

    def test_member_ids_stay_out_of_prompt(self, phases):
        roster = [Member(id=MEMBER_ID, role_name="QA Engineer")]
        assert MEMBER_ID not in build_assignment_context(roster, phases).prompt_text

    def test_empty_roster(self, phases):
        context = build_assignment_context([], phases)
        assert context.prompt_text == ""
        assert context.mapping == {}


class TestRenderRules:

    def test_rules_come_from_the_tables(self):
        text = render_rules(default_matcher_config(), ScoringWeights())
        assert 'Phase name mentions "qa", "quality", "test"' in text
        assert 'role should mention "qa", "test", "quality", "assurance", "tester", "sdet"' in text
        assert 'Task mentions "design", "ui", "ux"' in text

    def test_custom_table_is_rendered(self):
        config = RoleMatcherConfig(
            phase_rules=(PatternRule("ops", ("deploy",), (RoleCategory.ENGINEERING,)),),
            task_rules=(),
            role_keywords={RoleCategory.ENGINEERING: ("devops",)},
        )
        text = render_rules(config, ScoringWeights())
        assert 'Phase name mentions "deploy": role should mention "devops"' in text
        assert "wireframe" not in text

    def test_rule_order_preserved(self):
        text = render_rules(default_matcher_config(), ScoringWeights())
        assert text.index('"concept"') < text.index('"wireframe"') < text.index('"accelerator"')

    def test_phase_heading_follows_weights(self):
        config = default_matcher_config()
        assert "weighs more than task fit" in render_rules(config, ScoringWeights())
        assert "weighs more than task fit" not in render_rules(
            config, ScoringWeights(phase_fit=1, text_fit=5)
        )

    def test_render_phases(self):
        assert render_phases([Phase(1, "Discovery"), Phase(4, "")]) == "P1: Discovery\nP4: Phase 4"
