"""
Member Workload

Summarizes a member's open tasks against their project allocation and
derives the overworked flag used when scoring assignees.

A member is overworked when either:
- their active allocations exceed their weekly capacity, or
- the estimated hours of their open tasks exceed what their allocation
  covers until those tasks are due.
"""

import logging
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Any, Dict, Iterable, Optional

from assignment.models import Member

from .hours_math import Numeric, parse_hours, percent_of
from .models import UtilizationSnapshot, parse_date

logger = logging.getLogger(__name__)

ARCHIVED_STATUS = "archived"
TRACKED_STATUSES = ("todo", "in_progress", "done")
DEFAULT_WEEKS_UNTIL_DUE = 4


@dataclass(frozen=True)
class TaskLoad:
    """The fields of an assigned task that matter for workload."""
    assignee_id: Optional[str]
    status: str = "todo"
    estimated_hours: Any = None
    due_date: Optional[date] = None

    @classmethod
    def from_dict(cls, row: Dict[str, Any]) -> "TaskLoad":
        assignee_id = row.get("assignee_id")
        return cls(
            assignee_id=str(assignee_id) if assignee_id is not None else None,
            status=row.get("status") or "todo",
            estimated_hours=row.get("estimated_hours"),
            due_date=parse_date(row.get("due_date")),
        )


@dataclass
class MemberWorkload:
    """Open-task load for one member."""
    member_id: str
    task_count: int = 0
    task_count_by_status: Dict[str, int] = field(default_factory=dict)
    total_estimated_hours: Decimal = Decimal("0")
    allocated_hours_per_week: Decimal = Decimal("0")
    weeks_until_due: Decimal = Decimal(DEFAULT_WEEKS_UNTIL_DUE)
    is_over_allocated_by_hours: bool = False
    is_overworked: bool = False
    allocation_utilization: Decimal = Decimal("0")
    utilization: Optional[UtilizationSnapshot] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "member_id": self.member_id,
            "task_count": self.task_count,
            "task_count_by_status": dict(self.task_count_by_status),
            "total_estimated_hours": float(self.total_estimated_hours),
            "allocated_hours_per_week": float(self.allocated_hours_per_week),
            "is_over_allocated_by_hours": self.is_over_allocated_by_hours,
            "is_overworked": self.is_overworked,
            "allocation_utilization": round(float(self.allocation_utilization), 2),
            "workload_summary": self.utilization.to_dict() if self.utilization else None,
        }


def average_weeks_until_due(
    tasks: Iterable[TaskLoad],
    as_of: date,
    default_weeks: int = DEFAULT_WEEKS_UNTIL_DUE,
) -> Decimal:
    """
    Average weeks until due across dated tasks.

    Each task counts days until due divided by 7, never negative. Falls back to
    ``default_weeks`` when no task is dated or the average is zero.
    """
    weeks = [
        Decimal(max(0, (t.due_date - as_of).days)) / 7
        for t in tasks
        if t.due_date is not None
    ]
    if not weeks:
        return Decimal(default_weeks)
    average = sum(weeks, Decimal("0")) / len(weeks)
    return average if average > 0 else Decimal(default_weeks)


def summarize_workload(
    member_id: str,
    tasks: Iterable[TaskLoad],
    allocated_hours_per_week: Numeric = 0,
    snapshot: Optional[UtilizationSnapshot] = None,
    as_of: Optional[date] = None,
    default_weeks: int = DEFAULT_WEEKS_UNTIL_DUE,
) -> MemberWorkload:
    """
    Summarize a member's open tasks.

    Args:
        member_id: Member to summarize
        tasks: Task rows (other assignees and archived tasks are ignored)
        allocated_hours_per_week: The member's allocation on the project
        snapshot: The member's capacity utilization, if computed
        as_of: Reference date for due dates (defaults to today)
        default_weeks: Weeks assumed when tasks carry no due dates

    Returns:
        MemberWorkload
    """
    as_of = as_of or date.today()
    open_tasks = [
        t for t in tasks
        if t.assignee_id == member_id and t.status != ARCHIVED_STATUS
    ]

    by_status = {status: 0 for status in TRACKED_STATUSES}
    estimated = Decimal("0")
    for task in open_tasks:
        if task.status in by_status:
            by_status[task.status] += 1
        estimated += parse_hours(task.estimated_hours)

    allocated = parse_hours(allocated_hours_per_week)
    weeks = average_weeks_until_due(open_tasks, as_of, default_weeks)
    covered_hours = allocated * max(weeks, Decimal("1"))

    by_hours = allocated > 0 and estimated > covered_hours
    over_capacity = bool(snapshot and snapshot.is_over_allocated)

    workload = MemberWorkload(
        member_id=member_id,
        task_count=len(open_tasks),
        task_count_by_status=by_status,
        total_estimated_hours=estimated,
        allocated_hours_per_week=allocated,
        weeks_until_due=weeks,
        is_over_allocated_by_hours=by_hours,
        is_overworked=over_capacity or by_hours,
        allocation_utilization=percent_of(estimated, covered_hours) if allocated > 0 else Decimal("0"),
        utilization=snapshot,
    )
    if workload.is_overworked:
        logger.debug(
            f"Member {member_id} overworked "
            f"(over capacity={over_capacity}, over allocation by hours={by_hours})"
        )
    return workload


def build_member(
    member_id: str,
    name: Optional[str],
    role_name: Optional[str],
    role_description: Optional[str] = None,
    workload: Optional[MemberWorkload] = None,
) -> Member:
    """Build a roster entry from member details and their workload."""
    return Member(
        id=member_id,
        name=name or "Unknown",
        role_name=role_name or "Team Member",
        role_description=role_description or None,
        current_task_count=workload.task_count if workload else 0,
        is_overworked=workload.is_overworked if workload else False,
    )
