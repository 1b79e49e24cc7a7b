"""
Assignment Engine

Recommends an assignee for generated or newly created tasks.

Each task is scored against the roster on its own; there is no global
optimization across a batch and the roster is not updated between tasks.
The engine is a pure function of its inputs: it performs no I/O and keeps
no state between calls, so concurrent callers need no locking as long as
they do not mutate the snapshots they pass in.
"""

import logging
from functools import lru_cache
from typing import Dict, Iterable, List, Mapping, Optional, Union

from services.logging_config import AssignmentDecisionLogger, log_performance, project_context

from .models import AssignmentRecommendation, CandidateTask, Member, Phase
from .prompt_context import AssignmentPromptContext, build_assignment_context
from .role_matcher import RoleMatcher
from .scorer import AssigneeScorer, ScoringWeights
from .short_ids import ShortIdCodec, ShortIdEncoding, UnrecognizedTokenError

logger = logging.getLogger(__name__)


def index_phases(phases: Iterable[Phase]) -> Dict[int, Phase]:
    """Map phase numbers to phases; the first of any duplicates wins."""
    indexed: Dict[int, Phase] = {}
    for phase in phases:
        if phase.phase_number in indexed:
            logger.warning(f"Duplicate phase number {phase.phase_number}; keeping first")
            continue
        indexed[phase.phase_number] = phase
    return indexed


class AssignmentEngine:
    """
    Picks (or declines to pick) an assignee for a task.

    Provides:
    - Single-task and batch recommendations
    - Least-loaded fallback when an assignee is required
    - Reconciliation of assignee tokens returned by text generation
    - Prompt context for text generation
    """

    def __init__(
        self,
        matcher: Optional[RoleMatcher] = None,
        weights: Optional[ScoringWeights] = None,
        codec: Optional[ShortIdCodec] = None,
        decision_logger: Optional[AssignmentDecisionLogger] = None,
    ):
        self.matcher = matcher or RoleMatcher()
        self.scorer = AssigneeScorer(matcher=self.matcher, weights=weights)
        self.codec = codec or ShortIdCodec()
        self.decisions = decision_logger or AssignmentDecisionLogger()

    @classmethod
    def from_settings(cls, settings=None) -> "AssignmentEngine":
        """Build an engine from ``AssignmentSettings``."""
        if settings is None:
            from config.settings import get_settings
            settings = get_settings().assignment
        return cls(
            weights=ScoringWeights.from_settings(settings),
            codec=ShortIdCodec(description_chars=settings.description_preview_chars),
        )

    @property
    def weights(self) -> ScoringWeights:
        return self.scorer.weights

    # =========================================================================
    # RECOMMENDATIONS
    # =========================================================================

    def evaluate(
        self,
        task: CandidateTask,
        phase: Optional[Phase],
        roster: Iterable[Member],
        require_assignee: bool = False,
    ) -> AssignmentRecommendation:
        """
        Score the roster for a task and pick the winner.

        Args:
            task: Task to place
            phase: The task's phase (None = unconstrained)
            roster: Candidate members, in a stable order
            require_assignee: Fall back to the least-loaded member when no
                candidate scores above the minimum

        Returns:
            AssignmentRecommendation with ranked candidates
        """
        roster = list(roster)
        ranked = self.scorer.rank(task, phase, roster)
        self.decisions.log_candidates(task.title, ranked)

        member_id = self.scorer.select(ranked)
        used_fallback = False
        if member_id is None and require_assignee:
            member_id = self.scorer.fallback(roster)
            used_fallback = member_id is not None

        score = None
        if member_id is not None:
            score = next(c.score for c in ranked if c.member_id == member_id)
        self.decisions.log_decision(task.title, member_id, score, used_fallback)

        return AssignmentRecommendation(
            task=task,
            member_id=member_id,
            candidates=ranked,
            used_fallback=used_fallback,
        )

    def recommend(
        self,
        task: CandidateTask,
        phase: Optional[Phase],
        roster: Iterable[Member],
    ) -> Optional[str]:
        """Return the recommended member id, or None to leave unassigned."""
        return self.evaluate(task, phase, roster).member_id

    @log_performance("recommend_batch")
    def recommend_batch(
        self,
        tasks: Iterable[CandidateTask],
        phases: Iterable[Phase],
        roster: Iterable[Member],
        require_assignee: bool = False,
        project_id: Optional[str] = None,
    ) -> List[AssignmentRecommendation]:
        """
        Recommend assignees for several tasks, each independently.

        A task whose phase number is missing or unknown is unconstrained
        by phase. Log records emitted during the batch carry ``project_id``.
        """
        with project_context(project_id):
            phase_index = index_phases(phases)
            roster = list(roster)
            results = []
            for task in tasks:
                phase = phase_index.get(task.phase_number) if task.phase_number is not None else None
                results.append(self.evaluate(task, phase, roster, require_assignee=require_assignee))

            assigned = sum(1 for r in results if r.is_assigned)
            logger.info(f"Recommended assignees for {assigned} of {len(results)} tasks")
        return results

    # =========================================================================
    # TEXT GENERATION BOUNDARY
    # =========================================================================

    def build_prompt_context(
        self,
        roster: Iterable[Member],
        phases: Iterable[Phase],
    ) -> AssignmentPromptContext:
        """Render roster, phases and rules for an external text generator."""
        return build_assignment_context(
            roster,
            phases,
            config=self.matcher.config,
            weights=self.weights,
            codec=self.codec,
        )

    def reconcile_token(
        self,
        token: Optional[str],
        mapping: Union[ShortIdEncoding, AssignmentPromptContext, Mapping[str, str]],
    ) -> Optional[str]:
        """
        Turn an assignee token from text generation into a member id.

        Accepts a known short token or, verbatim, a member id from the same
        roster. Anything else is logged and treated as "no assignee".
        """
        if isinstance(mapping, (ShortIdEncoding, AssignmentPromptContext)):
            mapping = mapping.mapping
        if token is None or not str(token).strip():
            return None
        token = str(token)
        try:
            return self.codec.decode(token, mapping)
        except UnrecognizedTokenError:
            stripped = token.strip()
            if stripped in mapping.values():
                return stripped
            self.decisions.log_rejected_token(token)
            return None


@lru_cache
def get_assignment_engine() -> AssignmentEngine:
    """Get the shared engine built from settings."""
    return AssignmentEngine.from_settings()
