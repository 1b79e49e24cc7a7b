"""
Capacity Models

Snapshot records for weekly-hour allocations and member capacity.
"""

from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Dict, List, Optional
import logging

from .hours_math import Numeric, parse_hours, hours, percentage

logger = logging.getLogger(__name__)

DEFAULT_MAX_HOURS_PER_WEEK = Decimal("40")
DEFAULT_HOURS_PER_WEEK = Decimal("40")
HOURS_PER_WEEK_CEILING = Decimal("168")


def parse_date(value: Any) -> Optional[date]:
    """
    Read a date from a row value.

    Accepts date, datetime and ISO strings (a time part is ignored).
    Anything else yields None.
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        try:
            return date.fromisoformat(value.strip()[:10])
        except ValueError:
            logger.debug(f"Unparseable date value {value!r}")
            return None
    return None


@dataclass(frozen=True)
class Allocation:
    """
    Weekly hours a member is allocated to a project.

    ``allocated_hours_per_week`` is kept as received; it is parsed leniently
    wherever it is summed.
    """
    member_id: str
    allocated_hours_per_week: Any = Decimal("0")
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    project_id: Optional[str] = None

    @property
    def hours(self) -> Decimal:
        """Allocated hours as a Decimal (0 when unparseable)."""
        return parse_hours(self.allocated_hours_per_week)

    @property
    def is_ongoing(self) -> bool:
        """An allocation missing either date is open-ended."""
        return self.start_date is None or self.end_date is None

    def is_active_on(self, as_of: date, respect_start_date: bool = False) -> bool:
        """
        Check whether the allocation counts toward load on ``as_of``.

        Only ``end_date`` gates activity unless ``respect_start_date`` is set.
        """
        if self.end_date is not None and self.end_date < as_of:
            return False
        if respect_start_date and self.start_date is not None and self.start_date > as_of:
            return False
        return True

    def overlaps(self, other: "Allocation") -> bool:
        """
        Check whether two allocations can be in effect at the same time.

        An open-ended allocation on either side always overlaps.
        """
        if self.is_ongoing or other.is_ongoing:
            return True
        return self.start_date <= other.end_date and self.end_date >= other.start_date

    def conflicts_with(self, proposed: "Allocation") -> bool:
        """
        Check whether this existing allocation counts against ``proposed``.

        A proposal missing either date only conflicts with open-ended
        allocations; a fully dated proposal conflicts with open-ended ones
        and with dated ranges it overlaps.
        """
        if proposed.is_ongoing:
            return self.is_ongoing
        return self.overlaps(proposed)

    @classmethod
    def from_dict(cls, row: Dict[str, Any]) -> "Allocation":
        """Build from a persistence row (``user_id`` or ``member_id``)."""
        member_id = row.get("member_id") or row.get("user_id")
        return cls(
            member_id=str(member_id) if member_id is not None else "",
            allocated_hours_per_week=row.get("allocated_hours_per_week"),
            start_date=parse_date(row.get("start_date")),
            end_date=parse_date(row.get("end_date")),
            project_id=row.get("project_id"),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "member_id": self.member_id,
            "project_id": self.project_id,
            "allocated_hours_per_week": float(self.hours),
            "start_date": self.start_date.isoformat() if self.start_date else None,
            "end_date": self.end_date.isoformat() if self.end_date else None,
        }


@dataclass(frozen=True)
class CapacityProfile:
    """A member's declared weekly working hours."""
    member_id: str
    max_hours_per_week: Numeric = DEFAULT_MAX_HOURS_PER_WEEK
    default_hours_per_week: Numeric = DEFAULT_HOURS_PER_WEEK
    is_active: bool = True
    notes: Optional[str] = None

    @property
    def max_hours(self) -> Decimal:
        return parse_hours(self.max_hours_per_week)

    @property
    def default_hours(self) -> Decimal:
        return parse_hours(self.default_hours_per_week)

    def validate(self, ceiling: Numeric = HOURS_PER_WEEK_CEILING) -> List[str]:
        """
        Validate the profile.

        Returns:
            List of validation errors (empty if valid)
        """
        errors = []
        ceiling_d = parse_hours(ceiling)

        for label, raw, value in (
            ("default_hours_per_week", self.default_hours_per_week, self.default_hours),
            ("max_hours_per_week", self.max_hours_per_week, self.max_hours),
        ):
            if value <= 0 or value > ceiling_d:
                errors.append(f"{label} must be between 0 and {ceiling_d} (got {raw!r})")

        if not errors and self.default_hours > self.max_hours:
            errors.append("default_hours_per_week cannot exceed max_hours_per_week")

        return errors

    @classmethod
    def from_dict(cls, row: Dict[str, Any]) -> "CapacityProfile":
        member_id = row.get("member_id") or row.get("user_id")
        return cls(
            member_id=str(member_id) if member_id is not None else "",
            max_hours_per_week=row.get("max_hours_per_week", DEFAULT_MAX_HOURS_PER_WEEK),
            default_hours_per_week=row.get("default_hours_per_week", DEFAULT_HOURS_PER_WEEK),
            is_active=bool(row.get("is_active", True)),
            notes=row.get("notes"),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "member_id": self.member_id,
            "max_hours_per_week": float(self.max_hours),
            "default_hours_per_week": float(self.default_hours),
            "is_active": self.is_active,
            "notes": self.notes,
        }


@dataclass(frozen=True)
class UtilizationSnapshot:
    """A member's weekly capacity utilization as of a date."""
    member_id: str
    as_of: date
    allocated_hours_per_week: Decimal
    max_hours_per_week: Decimal
    default_hours_per_week: Decimal
    available_hours_per_week: Decimal
    utilization_percentage: Decimal
    is_over_allocated: bool
    active_allocation_count: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "member_id": self.member_id,
            "as_of": self.as_of.isoformat(),
            "allocated_hours_per_week": float(hours(self.allocated_hours_per_week)),
            "max_hours_per_week": float(hours(self.max_hours_per_week)),
            "default_hours_per_week": float(hours(self.default_hours_per_week)),
            "available_hours_per_week": float(hours(self.available_hours_per_week)),
            "utilization_percentage": float(percentage(self.utilization_percentage)),
            "is_over_allocated": self.is_over_allocated,
            "active_allocation_count": self.active_allocation_count,
        }


@dataclass
class AllocationCheck:
    """Result of checking a proposed allocation against capacity."""
    fits: bool
    current_hours: Decimal = Decimal("0")
    requested_hours: Decimal = Decimal("0")
    total_hours: Decimal = Decimal("0")
    max_hours: Decimal = DEFAULT_MAX_HOURS_PER_WEEK
    errors: List[str] = field(default_factory=list)

    @property
    def message(self) -> str:
        if self.errors:
            return "; ".join(self.errors)
        if self.fits:
            return (
                f"Allocation fits: {self.total_hours} of {self.max_hours} hours/week"
            )
        return (
            f"Allocation would exceed maximum capacity of {self.max_hours} hours/week. "
            f"Current allocation: {self.current_hours} hours/week, "
            f"Requested: {self.requested_hours} hours/week, "
            f"Total: {self.total_hours} hours/week"
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "fits": self.fits,
            "current_hours": float(self.current_hours),
            "requested_hours": float(self.requested_hours),
            "total_hours": float(self.total_hours),
            "max_hours": float(self.max_hours),
            "errors": list(self.errors),
            "message": self.message,
        }
