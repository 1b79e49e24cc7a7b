"""
Capacity Module

Weekly capacity utilization per team member.

- Utilization: allocated vs. maximum weekly hours as of a date
- Allocation checks: does a proposed allocation fit?
- Workload: open-task load and the overworked flag
"""

from .hours_math import parse_hours, sum_hours
from .models import Allocation, CapacityProfile, UtilizationSnapshot, AllocationCheck
from .aggregator import CapacityAggregator
from .workload import TaskLoad, MemberWorkload, summarize_workload, build_member

__all__ = [
    "parse_hours",
    "sum_hours",
    "Allocation",
    "CapacityProfile",
    "UtilizationSnapshot",
    "AllocationCheck",
    "CapacityAggregator",
    "TaskLoad",
    "MemberWorkload",
    "summarize_workload",
    "build_member",
]
