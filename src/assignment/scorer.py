"""
Assignee Scorer

Point-based scoring of one task against each member of a roster.

Score = phase fit + text fit - load penalty - overworked penalty

With the default weights an overworked member whose role fits the phase
(3 - 2 = 1) can still beat a non-matching generalist, while an overworked
member with only a text match (2 - 2 = 0) never gets recommended.
"""

import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Iterable, List, Optional, Sequence

from capacity.hours_math import Numeric, to_decimal

from .models import CandidateTask, Member, Phase, ScoredCandidate
from .role_matcher import RoleMatcher

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ScoringWeights:
    """The one weight table used to score candidates."""
    phase_fit: Decimal = Decimal("3")
    text_fit: Decimal = Decimal("2")
    task_load_penalty: Decimal = Decimal("0.1")
    overworked_penalty: Decimal = Decimal("2")
    min_score: Decimal = Decimal("0")

    def __post_init__(self):
        for name in ("phase_fit", "text_fit", "task_load_penalty", "overworked_penalty", "min_score"):
            object.__setattr__(self, name, to_decimal(getattr(self, name)))

    @classmethod
    def from_settings(cls, settings=None) -> "ScoringWeights":
        """Build weights from ``AssignmentSettings``."""
        if settings is None:
            from config.settings import get_settings
            settings = get_settings().assignment
        return cls(
            phase_fit=settings.phase_fit_weight,
            text_fit=settings.text_fit_weight,
            task_load_penalty=settings.task_load_penalty,
            overworked_penalty=settings.overworked_penalty,
            min_score=settings.min_selection_score,
        )

    def with_overrides(self, **overrides: Numeric) -> "ScoringWeights":
        values = {
            "phase_fit": self.phase_fit,
            "text_fit": self.text_fit,
            "task_load_penalty": self.task_load_penalty,
            "overworked_penalty": self.overworked_penalty,
            "min_score": self.min_score,
        }
        values.update(overrides)
        return ScoringWeights(**values)


class AssigneeScorer:
    """Scores and ranks roster members for a task."""

    def __init__(
        self,
        matcher: Optional[RoleMatcher] = None,
        weights: Optional[ScoringWeights] = None,
    ):
        self.matcher = matcher or RoleMatcher()
        self.weights = weights or ScoringWeights()

    def score(
        self,
        task: CandidateTask,
        phase: Optional[Phase],
        member: Member,
    ) -> ScoredCandidate:
        """
        Score one member for a task.

        Args:
            task: The task to place
            phase: The task's phase, or None when unknown (no phase bonus)
            member: The candidate

        Returns:
            ScoredCandidate
        """
        phase_categories = self.matcher.roles_for_phase(phase.display_name) if phase else frozenset()
        text_categories = self.matcher.roles_for_task_text(task.title, task.description)
        return self._score(member, phase_categories, text_categories)

    def _score(self, member: Member, phase_categories, text_categories) -> ScoredCandidate:
        w = self.weights
        total = Decimal("0")

        phase_match = bool(phase_categories) and self.matcher.role_text_matches_categories(
            member.role_name, member.role_description, phase_categories
        )
        if phase_match:
            total += w.phase_fit

        text_match = bool(text_categories) and self.matcher.role_text_matches_categories(
            member.role_name, member.role_description, text_categories
        )
        if text_match:
            total += w.text_fit

        total -= w.task_load_penalty * max(member.current_task_count, 0)

        if member.is_overworked:
            total -= w.overworked_penalty

        return ScoredCandidate(
            member_id=member.id,
            score=total,
            phase_match=phase_match,
            text_match=text_match,
        )

    def rank(
        self,
        task: CandidateTask,
        phase: Optional[Phase],
        roster: Iterable[Member],
    ) -> List[ScoredCandidate]:
        """
        Score every member and sort best first.

        The sort is stable, so equal scores keep roster order.
        """
        # Classify the task once for the whole roster
        phase_categories = self.matcher.roles_for_phase(phase.display_name) if phase else frozenset()
        text_categories = self.matcher.roles_for_task_text(task.title, task.description)

        scored = [self._score(m, phase_categories, text_categories) for m in roster]
        return sorted(scored, key=lambda c: c.score, reverse=True)

    def select(self, ranked: Sequence[ScoredCandidate]) -> Optional[str]:
        """Pick the top candidate if it scores above the minimum."""
        if not ranked:
            return None
        best = ranked[0]
        if best.score > self.weights.min_score:
            return best.member_id
        return None

    @staticmethod
    def fallback(roster: Iterable[Member]) -> Optional[str]:
        """Pick the least-loaded member, first in roster order on ties."""
        chosen: Optional[Member] = None
        for member in roster:
            if chosen is None or member.current_task_count < chosen.current_task_count:
                chosen = member
        return chosen.id if chosen else None
