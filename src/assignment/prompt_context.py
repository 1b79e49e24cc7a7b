"""
Assignment Prompt Context

Renders the roster, the phases and the assignment rules as text for an
external text generator that proposes assignees.

The rules are rendered from the same RoleMatcherConfig and ScoringWeights
the scorer uses; they are not restated anywhere else. Members appear only
as short tokens, which the caller reconciles through the ShortIdCodec.
"""

from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional

from .models import Member, Phase, RoleCategory
from .role_matcher import PatternRule, RoleMatcherConfig, default_matcher_config
from .scorer import ScoringWeights
from .short_ids import ShortIdCodec, ShortIdEncoding


@dataclass(frozen=True)
class AssignmentPromptContext:
    """Prompt text plus the token mapping needed to read the answer."""
    prompt_text: str
    encoding: ShortIdEncoding

    @property
    def mapping(self) -> Dict[str, str]:
        return self.encoding.mapping


def _quoted(words: Iterable[str]) -> str:
    return ", ".join(f'"{w}"' for w in words)


def _category_words(config: RoleMatcherConfig, categories: Iterable[RoleCategory]) -> List[str]:
    words: List[str] = []
    for category in categories:
        for word in config.role_keywords.get(category, ()):
            if word not in words:
                words.append(word)
    return words


def _rule_lines(config: RoleMatcherConfig, rules: Iterable[PatternRule], subject: str) -> List[str]:
    return [
        f"- {subject} mentions {_quoted(rule.keywords)}: "
        f"role should mention {_quoted(_category_words(config, rule.categories))}"
        for rule in rules
    ]


def render_rules(config: RoleMatcherConfig, weights: ScoringWeights) -> str:
    """Render the assignment rules as numbered instructions."""
    if weights.phase_fit > weights.text_fit:
        phase_heading = "1. Phase fit, weighs more than task fit:"
    else:
        phase_heading = "1. Phase fit:"
    lines = [
        "ASSIGNMENT RULES (first matching line wins in each list):",
        phase_heading,
        *_rule_lines(config, config.phase_rules, "Phase name"),
        "2. Task fit, from title and description:",
        *_rule_lines(config, config.task_rules, "Task"),
        "3. Among matching members prefer fewer current tasks.",
        "4. Avoid [BUSY] members unless they are the only match.",
        "5. If no member's role fits, set assignee_id to null.",
        "Use the member token (M1, M2, ...) for assignee_id, never a name.",
    ]
    return "\n".join(lines)


def render_phases(phases: Iterable[Phase]) -> str:
    return "\n".join(f"P{p.phase_number}: {p.display_name}" for p in phases)


def build_assignment_context(
    roster: Iterable[Member],
    phases: Iterable[Phase],
    config: Optional[RoleMatcherConfig] = None,
    weights: Optional[ScoringWeights] = None,
    codec: Optional[ShortIdCodec] = None,
) -> AssignmentPromptContext:
    """
    Build the team section of a task-generation prompt.

    Returns an empty prompt (and empty mapping) for an empty roster.
    """
    config = config or default_matcher_config()
    weights = weights or ScoringWeights()
    codec = codec or ShortIdCodec()

    encoding = codec.encode(roster)
    if not encoding.mapping:
        return AssignmentPromptContext(prompt_text="", encoding=encoding)

    sections = [
        "TEAM (assign with token):",
        encoding.text,
        "",
        "PHASES:",
        render_phases(phases),
        "",
        render_rules(config, weights),
    ]
    return AssignmentPromptContext(prompt_text="\n".join(sections), encoding=encoding)
