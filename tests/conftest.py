"""Pytest configuration and fixtures for the assignment and capacity tests."""

import sys
from datetime import date
from decimal import Decimal
from pathlib import Path

import pytest

# Add src to path for imports
src_path = Path(__file__).parent.parent / "src"
if str(src_path) not in sys.path:
    sys.path.insert(0, str(src_path))

from assignment.models import CandidateTask, Member, Phase
from capacity.models import Allocation, CapacityProfile


# =============================================================================
# ASSIGNMENT FIXTURES
# =============================================================================

@pytest.fixture
def qa_member():
    return Member(id="A", name="Ana", role_name="QA Engineer", current_task_count=1)


@pytest.fixture
def busy_frontend_member():
    return Member(
        id="B",
        name="Ben",
        role_name="Frontend Developer",
        current_task_count=5,
        is_overworked=True,
    )


@pytest.fixture
def roster(qa_member, busy_frontend_member):
    return [qa_member, busy_frontend_member]


@pytest.fixture
def team():
    """A mixed team covering every role category."""
    return [
        Member(id="u-pm", name="Priya", role_name="Product Manager",
               role_description="Owns roadmap and stakeholder alignment", current_task_count=2),
        Member(id="u-des", name="Dana", role_name="UX Designer",
               role_description="Wireframes and visual design", current_task_count=3),
        Member(id="u-be", name="Omar", role_name="Backend Engineer",
               role_description="APIs, databases and infrastructure", current_task_count=4),
        Member(id="u-qa", name="Quinn", role_name="QA Specialist",
               role_description="Test plans and quality assurance", current_task_count=0),
        Member(id="u-biz", name="Sam", role_name="Sales Lead",
               role_description=None, current_task_count=1),
    ]


@pytest.fixture
def phases():
    return [
        Phase(1, "Product Strategy"),
        Phase(2, "UX Design"),
        Phase(3, "Testing & Quality Assurance"),
        Phase(4, "Build Accelerator"),
        Phase(6, None),
    ]


@pytest.fixture
def testing_phase():
    return Phase(phase_number=3, phase_name="Testing & Quality Assurance")


@pytest.fixture
def regression_task():
    return CandidateTask(
        title="Write regression tests",
        description="Cover login flow",
        phase_number=3,
    )


# =============================================================================
# CAPACITY FIXTURES
# =============================================================================

@pytest.fixture
def as_of():
    return date(2025, 3, 10)


@pytest.fixture
def profile_40():
    return CapacityProfile(member_id="A", max_hours_per_week=Decimal("40"),
                           default_hours_per_week=Decimal("32"))


@pytest.fixture
def allocations_45():
    """Three active allocations for member A summing to 45 hours."""
    return [
        Allocation("A", "20", start_date=date(2025, 1, 1), end_date=None, project_id="p1"),
        Allocation("A", 15, start_date=date(2025, 2, 1), end_date=date(2025, 3, 10), project_id="p2"),
        Allocation("A", Decimal("10"), start_date=None, end_date=date(2025, 6, 30), project_id="p3"),
    ]
