"""
Role Matcher

Maps free-text phase names, task text and member roles onto coarse role
categories using ordered keyword tables.

Tables are ordered and the first rule whose pattern matches decides the
result (first match wins, not best match). Reordering a table changes
behavior; ``tests/test_role_matcher.py`` pins the default order.

Keywords match case-insensitively at the start of a word, so "test"
matches "Testing" but "ui" does not match inside "Build".
"""

import re
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import FrozenSet, Iterable, Mapping, Optional, Pattern, Sequence, Tuple

from .models import RoleCategory

EMPTY: FrozenSet[RoleCategory] = frozenset()


def keyword_pattern(keywords: Iterable[str]) -> Optional[Pattern]:
    """
    Compile keywords into one case-insensitive word-start pattern.

    Matching is anchored at the start of a word, not anywhere in the text:
    "test" matches "Testing" and "ui" does not match inside "Build", but
    "design" does not match "Redesign" and "test" does not match "unittest".
    Add such compounds as their own keywords when they should count.
    """
    alternatives = [re.escape(k.strip()) for k in keywords if k and k.strip()]
    if not alternatives:
        return None
    return re.compile(r"\b(?:" + "|".join(alternatives) + ")", re.IGNORECASE)


@dataclass(frozen=True)
class PatternRule:
    """One row of an ordered classification table."""
    name: str
    keywords: Tuple[str, ...]
    categories: Tuple[RoleCategory, ...]
    pattern: Optional[Pattern] = field(init=False, repr=False, compare=False)

    def __post_init__(self):
        object.__setattr__(self, "keywords", tuple(self.keywords))
        object.__setattr__(self, "categories", tuple(RoleCategory(c) for c in self.categories))
        object.__setattr__(self, "pattern", keyword_pattern(self.keywords))

    def matches(self, text: Optional[str]) -> bool:
        if not text or self.pattern is None:
            return False
        return self.pattern.search(text) is not None


@dataclass(frozen=True)
class RoleMatcherConfig:
    """
    Keyword tables used by a RoleMatcher.

    ``phase_rules`` and ``task_rules`` are ordered; ``role_keywords`` lists
    the words in a member's role text that signal each category.
    """
    phase_rules: Tuple[PatternRule, ...]
    task_rules: Tuple[PatternRule, ...]
    role_keywords: Mapping[RoleCategory, Tuple[str, ...]]

    def __post_init__(self):
        object.__setattr__(self, "phase_rules", tuple(self.phase_rules))
        object.__setattr__(self, "task_rules", tuple(self.task_rules))
        object.__setattr__(
            self,
            "role_keywords",
            MappingProxyType({
                RoleCategory(category): tuple(words)
                for category, words in dict(self.role_keywords).items()
            }),
        )


# Phase name -> expected role categories, in match order
PHASE_TABLE = (
    ("strategy", ("concept", "discovery", "strategy", "planning", "framing",
                  "research", "requirements"), (RoleCategory.PRODUCT,)),
    ("design", ("design", "ui", "ux", "wireframe", "mockup", "visual"),
     (RoleCategory.DESIGN,)),
    ("build", ("build", "develop", "implement", "code", "engineering",
               "accelerator", "technical", "architecture", "api", "backend",
               "frontend", "database"), (RoleCategory.ENGINEERING,)),
    ("quality", ("qa", "quality", "test", "hardening", "verification",
                 "assurance"), (RoleCategory.QA,)),
    ("analysis", ("analysis", "user stories", "stories", "specification"),
     (RoleCategory.PRODUCT,)),
)

# Task title + description -> role categories, in match order
TASK_TABLE = (
    ("design", ("design", "ui", "ux", "wireframe", "mockup", "visual"),
     (RoleCategory.DESIGN,)),
    ("engineering", ("code", "implement", "develop", "build", "api", "backend",
                     "frontend", "database", "engineer", "infrastructure"),
     (RoleCategory.ENGINEERING,)),
    ("qa", ("test", "qa", "quality", "verify", "verification"),
     (RoleCategory.QA,)),
    ("product", ("product", "strategy", "requirements", "stakeholder",
                 "roadmap"), (RoleCategory.PRODUCT,)),
    ("business", ("business", "sales", "marketing", "outreach", "partnership"),
     (RoleCategory.BUSINESS,)),
)

# Role text keywords per category
ROLE_KEYWORDS = {
    RoleCategory.PRODUCT: ("product", "strategy", "business", "analyst", "owner", "manager"),
    RoleCategory.DESIGN: ("design", "ui", "ux", "visual", "creative"),
    RoleCategory.ENGINEERING: ("engineer", "developer", "architect", "technical",
                               "programmer", "coder", "backend", "frontend",
                               "full-stack", "software"),
    RoleCategory.QA: ("qa", "test", "quality", "assurance", "tester", "sdet"),
    RoleCategory.BUSINESS: ("business", "sales", "marketing", "development", "partnership"),
}


def build_rules(table: Sequence[tuple]) -> Tuple[PatternRule, ...]:
    """Build ordered rules from ``(name, keywords, categories)`` rows."""
    return tuple(
        PatternRule(name=name, keywords=keywords, categories=categories)
        for name, keywords, categories in table
    )


def default_matcher_config() -> RoleMatcherConfig:
    """Build a fresh copy of the default keyword tables."""
    return RoleMatcherConfig(
        phase_rules=build_rules(PHASE_TABLE),
        task_rules=build_rules(TASK_TABLE),
        role_keywords=ROLE_KEYWORDS,
    )


class RoleMatcher:
    """
    Classifies phases, task text and roles into role categories.

    Stateless apart from its configuration; safe to share across threads.
    """

    def __init__(self, config: Optional[RoleMatcherConfig] = None):
        self.config = config or default_matcher_config()
        self._role_patterns = {
            category: keyword_pattern(words)
            for category, words in self.config.role_keywords.items()
        }

    @staticmethod
    def first_match(text: Optional[str], rules: Sequence[PatternRule]) -> Optional[PatternRule]:
        """Return the first rule in table order matching ``text``."""
        if not text:
            return None
        for rule in rules:
            if rule.matches(text):
                return rule
        return None

    def roles_for_phase(self, phase_name: Optional[str]) -> FrozenSet[RoleCategory]:
        """
        Categories a phase calls for.

        An empty result means the phase does not constrain who fits.
        """
        rule = self.first_match(phase_name, self.config.phase_rules)
        return frozenset(rule.categories) if rule else EMPTY

    def roles_for_task_text(
        self,
        title: Optional[str],
        description: Optional[str] = None,
    ) -> FrozenSet[RoleCategory]:
        """
        Categories implied by a task's title and description.

        An empty result earns no one a bonus; it rejects no one either.
        """
        text = " ".join(part for part in (title, description) if part)
        rule = self.first_match(text, self.config.task_rules)
        return frozenset(rule.categories) if rule else EMPTY

    def role_text_matches_categories(
        self,
        role_name: Optional[str],
        role_description: Optional[str],
        categories: Iterable[RoleCategory],
    ) -> bool:
        """Check whether a role mentions a keyword of any given category."""
        text = " ".join(part for part in (role_name, role_description) if part)
        if not text:
            return False
        for category in categories:
            pattern = self._role_patterns.get(category)
            if pattern is not None and pattern.search(text):
                return True
        return False
