"""
Task Assignment Module

Recommends who should take a newly generated or created task.

- Role matching: phase names, task text and roles -> role categories
- Assignee scoring: phase fit, text fit, load and overwork
- Short IDs: compact member tokens for external text generation
- Engine: single and batch recommendations

NOT IN SCOPE:
- Scheduling tasks in time
- Optimizing assignments across a batch
- Persisting recommendations
"""

from .models import (
    RoleCategory,
    Member,
    Phase,
    CandidateTask,
    ScoredCandidate,
    AssignmentRecommendation,
)
from .role_matcher import RoleMatcher, RoleMatcherConfig, PatternRule, default_matcher_config
from .scorer import AssigneeScorer, ScoringWeights
from .short_ids import ShortIdCodec, ShortIdEncoding, UnrecognizedTokenError
from .prompt_context import AssignmentPromptContext, build_assignment_context
from .engine import AssignmentEngine, get_assignment_engine

__all__ = [
    "RoleCategory",
    "Member",
    "Phase",
    "CandidateTask",
    "ScoredCandidate",
    "AssignmentRecommendation",
    "RoleMatcher",
    "RoleMatcherConfig",
    "PatternRule",
    "default_matcher_config",
    "AssigneeScorer",
    "ScoringWeights",
    "ShortIdCodec",
    "ShortIdEncoding",
    "UnrecognizedTokenError",
    "AssignmentPromptContext",
    "build_assignment_context",
    "AssignmentEngine",
    "get_assignment_engine",
]
