#!/usr/bin/env python3
"""
Example script showing how to use the Assignment Engine programmatically
"""
import sys
import os
from datetime import date

# Add src to path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), 'src'))

from assignment import AssignmentEngine, CandidateTask, Member, Phase
from capacity import Allocation, CapacityAggregator, CapacityProfile, TaskLoad, build_member
from services import configure_from_settings


TEAM = [
    Member(id="u-pm", name="Priya", role_name="Product Manager", current_task_count=2),
    Member(id="u-des", name="Dana", role_name="UX Designer", role_description="Wireframes and visual design"),
    Member(id="u-be", name="Omar", role_name="Backend Engineer", current_task_count=4),
    Member(id="u-qa", name="Quinn", role_name="QA Engineer", current_task_count=1),
]

PHASES = [
    Phase(1, "Discovery & Strategy"),
    Phase(2, "UX Design"),
    Phase(3, "Build"),
    Phase(4, "Testing & Hardening"),
]


def example_batch_recommendations():
    """Example: Recommend assignees for generated tasks"""
    print("Example 1: Batch Recommendations")
    print("=" * 60)

    tasks = [
        CandidateTask("Interview stakeholders", "Collect requirements", phase_number=1),
        CandidateTask("Create onboarding wireframes", phase_number=2),
        CandidateTask("Implement billing API", phase_number=3),
        CandidateTask("Write regression tests", phase_number=4),
        CandidateTask("Book team offsite"),
    ]

    engine = AssignmentEngine.from_settings()
    for result in engine.recommend_batch(tasks, PHASES, TEAM):
        print(f"{result.task.title:35s} -> {result.member_id or 'unassigned'} (top score {result.top_score})")
    print()


def example_prompt_context():
    """Example: Prompt context and token reconciliation"""
    print("Example 2: Prompt Context")
    print("=" * 60)

    engine = AssignmentEngine.from_settings()
    context = engine.build_prompt_context(TEAM, PHASES)
    print(context.prompt_text)
    print()

    for token in ("M3", "m4", "M9", None):
        print(f"{token!r:6} -> {engine.reconcile_token(token, context)}")
    print()


def example_capacity():
    """Example: Capacity utilization and overworked roster flags"""
    print("Example 3: Capacity Utilization")
    print("=" * 60)

    as_of = date(2025, 3, 10)
    allocations = [
        Allocation("u-be", 20, start_date=date(2025, 1, 1), project_id="p1"),
        Allocation("u-be", 15, start_date=date(2025, 2, 1), end_date=date(2025, 3, 10), project_id="p2"),
        Allocation("u-be", 10, end_date=date(2025, 6, 30), project_id="p3"),
    ]
    profile = CapacityProfile("u-be", max_hours_per_week=40, default_hours_per_week=32)

    aggregator = CapacityAggregator.from_settings()
    snapshot = aggregator.utilization("u-be", allocations, profile, as_of)
    for key, value in snapshot.to_dict().items():
        print(f"  {key}: {value}")

    check = aggregator.check_allocation(Allocation("u-be", 8, project_id="p4"), allocations, profile)
    print(f"  proposed 8h/week: {check.message}")

    tasks = [TaskLoad("u-be", "todo", 12), TaskLoad("u-be", "in_progress", 6)]
    workload = aggregator.member_workload("u-be", tasks, 20, allocations, profile, as_of)
    member = build_member("u-be", "Omar", "Backend Engineer", workload=workload)
    print(f"  roster entry: {member.current_task_count} tasks, overworked={member.is_overworked}")
    print()


if __name__ == "__main__":
    configure_from_settings()

    example_batch_recommendations()
    example_prompt_context()
    example_capacity()

    print("=" * 60)
    print("All examples completed!")
    print("=" * 60)
