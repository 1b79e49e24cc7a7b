"""
Assignment Models

Snapshot records consumed and produced by the assignment engine.
"""

from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, List, Optional


class RoleCategory(str, Enum):
    """Coarse buckets that free-text roles, phases and tasks map onto."""
    ENGINEERING = "engineering"
    DESIGN = "design"
    QA = "qa"
    PRODUCT = "product"  # Product / strategy
    BUSINESS = "business"


def _task_count(value: Any) -> int:
    try:
        count = int(float(value)) if isinstance(value, str) else int(value)
    except (TypeError, ValueError, OverflowError):
        return 0
    return max(count, 0)


@dataclass(frozen=True)
class Member:
    """A roster entry: someone who can be assigned a task."""
    id: str
    name: str = "Unknown"
    role_name: str = "Team Member"
    role_description: Optional[str] = None
    current_task_count: int = 0
    is_overworked: bool = False

    def __post_init__(self):
        object.__setattr__(self, "current_task_count", _task_count(self.current_task_count))
        object.__setattr__(self, "is_overworked", bool(self.is_overworked))

    @property
    def role_text(self) -> str:
        """Role name and description combined for keyword matching."""
        if self.role_description:
            return f"{self.role_name} {self.role_description}"
        return self.role_name or ""

    @classmethod
    def from_dict(cls, row: Dict[str, Any]) -> "Member":
        """Build from a roster row (``user_id`` or ``id``)."""
        member_id = row.get("id") or row.get("user_id")
        return cls(
            id=str(member_id) if member_id is not None else "",
            name=row.get("name") or "Unknown",
            role_name=row.get("role_name") or "Team Member",
            role_description=row.get("role_description") or None,
            current_task_count=_task_count(row.get("current_task_count", 0)),
            is_overworked=bool(row.get("is_overworked", False)),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "role_name": self.role_name,
            "role_description": self.role_description,
            "current_task_count": self.current_task_count,
            "is_overworked": self.is_overworked,
        }


@dataclass(frozen=True)
class Phase:
    """A named stage of a project's workflow."""
    phase_number: int
    phase_name: Optional[str] = None

    @property
    def display_name(self) -> str:
        if self.phase_name and self.phase_name.strip():
            return self.phase_name
        return f"Phase {self.phase_number}"

    @classmethod
    def from_dict(cls, row: Dict[str, Any]) -> "Phase":
        return cls(
            phase_number=int(row["phase_number"]),
            phase_name=row.get("phase_name"),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "phase_number": self.phase_number,
            "phase_name": self.display_name,
        }


@dataclass(frozen=True)
class CandidateTask:
    """A task awaiting an assignee. Never mutated by the engine."""
    title: str
    description: Optional[str] = None
    phase_number: Optional[int] = None

    @property
    def text(self) -> str:
        if self.description:
            return f"{self.title} {self.description}"
        return self.title or ""

    @classmethod
    def from_dict(cls, row: Dict[str, Any]) -> "CandidateTask":
        phase_number = row.get("phase_number")
        try:
            phase_number = int(phase_number) if phase_number is not None else None
        except (TypeError, ValueError):
            phase_number = None
        return cls(
            title=row.get("title") or "",
            description=row.get("description") or None,
            phase_number=phase_number,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "title": self.title,
            "description": self.description,
            "phase_number": self.phase_number,
        }


@dataclass(frozen=True)
class ScoredCandidate:
    """A member's score for one task."""
    member_id: str
    score: Decimal
    phase_match: bool = False
    text_match: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "member_id": self.member_id,
            "score": float(self.score),
            "phase_match": self.phase_match,
            "text_match": self.text_match,
        }


@dataclass
class AssignmentRecommendation:
    """Outcome of recommending an assignee for one task."""
    task: CandidateTask
    member_id: Optional[str] = None
    candidates: List[ScoredCandidate] = field(default_factory=list)
    used_fallback: bool = False

    @property
    def is_assigned(self) -> bool:
        return self.member_id is not None

    @property
    def top_score(self) -> Optional[Decimal]:
        return self.candidates[0].score if self.candidates else None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "task": self.task.to_dict(),
            "assignee_id": self.member_id,
            "used_fallback": self.used_fallback,
            "candidates": [c.to_dict() for c in self.candidates],
        }
