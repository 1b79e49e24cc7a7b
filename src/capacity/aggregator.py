"""
Capacity Aggregator

Computes weekly capacity utilization per member from allocation and
capacity-profile snapshots.

Each member is computed independently; there is no shared pool and no
normalization across members. The aggregator keeps only its configuration,
so one instance can serve concurrent callers.
"""

import logging
from datetime import date
from decimal import Decimal
from typing import Dict, Iterable, List, Optional, Tuple

from services.logging_config import log_performance, project_context

from .hours_math import Numeric, floor_zero, parse_hours, percent_of, to_decimal
from .models import (
    Allocation,
    AllocationCheck,
    CapacityProfile,
    UtilizationSnapshot,
    DEFAULT_HOURS_PER_WEEK,
    DEFAULT_MAX_HOURS_PER_WEEK,
    HOURS_PER_WEEK_CEILING,
)
from .workload import DEFAULT_WEEKS_UNTIL_DUE, MemberWorkload, TaskLoad, summarize_workload

logger = logging.getLogger(__name__)


class CapacityAggregator:
    """
    Aggregates a member's concurrent allocations against their capacity.

    Provides:
    - Utilization snapshot for one member as of a date
    - Utilization for a whole team
    - Capacity check for a proposed allocation
    - Capacity profile validation
    - Workload summary combining open tasks and utilization
    """

    def __init__(
        self,
        default_max_hours: Numeric = DEFAULT_MAX_HOURS_PER_WEEK,
        default_hours: Numeric = DEFAULT_HOURS_PER_WEEK,
        respect_start_date: bool = False,
        max_hours_ceiling: Numeric = HOURS_PER_WEEK_CEILING,
        default_weeks_until_due: int = DEFAULT_WEEKS_UNTIL_DUE,
    ):
        self.default_max_hours = to_decimal(default_max_hours)
        self.default_hours = to_decimal(default_hours)
        self.respect_start_date = respect_start_date
        self.max_hours_ceiling = to_decimal(max_hours_ceiling)
        self.default_weeks_until_due = default_weeks_until_due

    @classmethod
    def from_settings(cls, settings=None) -> "CapacityAggregator":
        """Build an aggregator from ``CapacitySettings``."""
        if settings is None:
            from config.settings import get_settings
            settings = get_settings().capacity
        return cls(
            default_max_hours=settings.default_max_hours_per_week,
            default_hours=settings.default_hours_per_week,
            respect_start_date=settings.respect_start_date,
            max_hours_ceiling=settings.max_hours_ceiling,
            default_weeks_until_due=settings.default_weeks_until_due,
        )

    # =========================================================================
    # UTILIZATION
    # =========================================================================

    def active_allocations(
        self,
        member_id: str,
        allocations: Iterable[Allocation],
        as_of: date,
    ) -> List[Allocation]:
        """Allocations of ``member_id`` that are in effect on ``as_of``."""
        return [
            a for a in allocations
            if a.member_id == member_id
            and a.is_active_on(as_of, respect_start_date=self.respect_start_date)
        ]

    def resolve_capacity(
        self,
        member_id: str,
        capacity_profile: Optional[CapacityProfile],
    ) -> Tuple[Decimal, Decimal]:
        """
        Get (max, default) weekly hours for a member.

        A missing or inactive profile, or one that belongs to another member,
        falls back to the configured defaults.
        """
        if capacity_profile is None or not capacity_profile.is_active:
            return self.default_max_hours, self.default_hours
        if capacity_profile.member_id != member_id:
            logger.warning(
                f"Capacity profile for {capacity_profile.member_id} "
                f"supplied for member {member_id}; using defaults"
            )
            return self.default_max_hours, self.default_hours
        return capacity_profile.max_hours, capacity_profile.default_hours

    def utilization(
        self,
        member_id: str,
        allocations: Iterable[Allocation],
        capacity_profile: Optional[CapacityProfile] = None,
        as_of: Optional[date] = None,
    ) -> UtilizationSnapshot:
        """
        Compute a member's weekly utilization.

        Args:
            member_id: Member to compute for
            allocations: Allocation rows (other members' rows are ignored)
            capacity_profile: The member's active capacity profile, if any
            as_of: Snapshot date (defaults to today)

        Returns:
            UtilizationSnapshot
        """
        as_of = as_of or date.today()
        active = self.active_allocations(member_id, allocations, as_of)

        allocated = Decimal("0")
        for allocation in active:
            allocated += allocation.hours

        max_hours, default_hours = self.resolve_capacity(member_id, capacity_profile)

        snapshot = UtilizationSnapshot(
            member_id=member_id,
            as_of=as_of,
            allocated_hours_per_week=allocated,
            max_hours_per_week=max_hours,
            default_hours_per_week=default_hours,
            available_hours_per_week=floor_zero(max_hours - allocated),
            utilization_percentage=percent_of(allocated, max_hours),
            is_over_allocated=allocated > max_hours,
            active_allocation_count=len(active),
        )

        if snapshot.is_over_allocated:
            logger.info(
                f"Member {member_id} over-allocated: "
                f"{allocated} of {max_hours} hours/week as of {as_of}"
            )

        return snapshot

    @log_performance("team_utilization")
    def team_utilization(
        self,
        member_ids: Iterable[str],
        allocations: Iterable[Allocation],
        capacity_profiles: Iterable[CapacityProfile] = (),
        as_of: Optional[date] = None,
        project_id: Optional[str] = None,
    ) -> Dict[str, UtilizationSnapshot]:
        """
        Compute utilization for several members, each independently.

        The first active profile seen for a member is used. Log records
        emitted during the call carry ``project_id``.
        """
        as_of = as_of or date.today()
        allocations = list(allocations)

        profiles: Dict[str, CapacityProfile] = {}
        for profile in capacity_profiles:
            if profile.is_active and profile.member_id not in profiles:
                profiles[profile.member_id] = profile

        with project_context(project_id):
            return {
                member_id: self.utilization(
                    member_id, allocations, profiles.get(member_id), as_of
                )
                for member_id in member_ids
            }

    # =========================================================================
    # ALLOCATION CHECKS
    # =========================================================================

    def check_allocation(
        self,
        proposed: Allocation,
        existing: Iterable[Allocation],
        capacity_profile: Optional[CapacityProfile] = None,
    ) -> AllocationCheck:
        """
        Check whether a proposed allocation fits the member's capacity.

        Existing allocations of the same member count toward the total when
        they conflict with the proposal (see ``Allocation.conflicts_with``).
        """
        requested = parse_hours(proposed.allocated_hours_per_week)
        max_hours, _ = self.resolve_capacity(proposed.member_id, capacity_profile)

        errors = []
        if requested <= 0:
            errors.append("allocated_hours_per_week must be greater than 0")
        if (
            proposed.start_date is not None
            and proposed.end_date is not None
            and proposed.end_date < proposed.start_date
        ):
            errors.append("end_date must be after start_date")

        if errors:
            return AllocationCheck(
                fits=False,
                requested_hours=requested,
                total_hours=requested,
                max_hours=max_hours,
                errors=errors,
            )

        current = Decimal("0")
        for allocation in existing:
            if allocation.member_id == proposed.member_id and allocation.conflicts_with(proposed):
                current += allocation.hours

        total = current + requested
        check = AllocationCheck(
            fits=total <= max_hours,
            current_hours=current,
            requested_hours=requested,
            total_hours=total,
            max_hours=max_hours,
        )
        if not check.fits:
            logger.info(f"Allocation rejected for {proposed.member_id}: {check.message}")
        return check

    def validate_profile(self, capacity_profile: CapacityProfile) -> List[str]:
        """Validate a capacity profile against the configured ceiling."""
        return capacity_profile.validate(ceiling=self.max_hours_ceiling)

    # =========================================================================
    # WORKLOAD
    # =========================================================================

    def member_workload(
        self,
        member_id: str,
        tasks: Iterable[TaskLoad],
        allocated_hours_per_week: Numeric,
        allocations: Iterable[Allocation] = (),
        capacity_profile: Optional[CapacityProfile] = None,
        as_of: Optional[date] = None,
    ) -> MemberWorkload:
        """
        Summarize a member's open tasks together with their utilization.

        Args:
            member_id: Member to summarize
            tasks: Task rows for the project
            allocated_hours_per_week: The member's allocation on the project
            allocations: All of the member's allocations, across projects
            capacity_profile: The member's active capacity profile, if any
            as_of: Snapshot date (defaults to today)

        Returns:
            MemberWorkload with the utilization snapshot attached
        """
        as_of = as_of or date.today()
        snapshot = self.utilization(member_id, allocations, capacity_profile, as_of)
        return summarize_workload(
            member_id,
            tasks,
            allocated_hours_per_week=allocated_hours_per_week,
            snapshot=snapshot,
            as_of=as_of,
            default_weeks=self.default_weeks_until_due,
        )
