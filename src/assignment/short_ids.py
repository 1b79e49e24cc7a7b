"""
Short ID Codec

Swaps member identifiers for ordinal tokens (M1, M2, ...) before roster
context is handed to an external text generator, and turns the tokens it
echoes back into real identifiers.

Decoding is strict: a token that is not in the mapping raises
UnrecognizedTokenError. Nothing is guessed.
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Mapping

from .models import Member

logger = logging.getLogger(__name__)

TOKEN_PREFIX = "M"
DESCRIPTION_PREVIEW_CHARS = 50


class UnrecognizedTokenError(LookupError):
    """Raised when a token does not belong to the roster mapping."""
    def __init__(self, token: str):
        self.token = token
        super().__init__(f"Unrecognized member token: {token!r}")


@dataclass(frozen=True)
class ShortIdEncoding:
    """Display lines plus the token -> member id lookup."""
    lines: List[str] = field(default_factory=list)
    mapping: Dict[str, str] = field(default_factory=dict)

    @property
    def text(self) -> str:
        return "\n".join(self.lines)

    def token_for(self, member_id: str) -> str:
        for token, mapped in self.mapping.items():
            if mapped == member_id:
                return token
        raise KeyError(member_id)


def normalize_token(token: str) -> str:
    return token.strip().upper()


class ShortIdCodec:
    """Encodes a roster into short tokens and decodes tokens back."""

    def __init__(self, description_chars: int = DESCRIPTION_PREVIEW_CHARS):
        self.description_chars = description_chars

    def describe(self, token: str, member: Member) -> str:
        """
        Render one compact roster line.

        Example: ``M3: Engineer (Builds payment APIs) | 4 tasks [BUSY]``
        """
        line = f"{token}: {member.role_name}"
        if member.role_description:
            line += f" ({member.role_description[:self.description_chars]})"
        noun = "task" if member.current_task_count == 1 else "tasks"
        line += f" | {member.current_task_count} {noun}"
        if member.is_overworked:
            line += " [BUSY]"
        return line

    def encode(self, roster: Iterable[Member]) -> ShortIdEncoding:
        """
        Assign M1..Mn in roster order.

        A member id already encoded is skipped so the mapping stays 1:1.
        """
        lines: List[str] = []
        mapping: Dict[str, str] = {}
        seen = set()

        for member in roster:
            if member.id in seen:
                logger.warning(f"Duplicate member {member.id} in roster; keeping first occurrence")
                continue
            seen.add(member.id)
            token = f"{TOKEN_PREFIX}{len(mapping) + 1}"
            mapping[token] = member.id
            lines.append(self.describe(token, member))

        return ShortIdEncoding(lines=lines, mapping=mapping)

    @staticmethod
    def decode(token: str, mapping: Mapping[str, str]) -> str:
        """
        Resolve a token to a member id.

        Raises:
            UnrecognizedTokenError: If the token is not in the mapping
        """
        if not isinstance(token, str) or not token.strip():
            raise UnrecognizedTokenError(str(token))
        key = normalize_token(token)
        if key not in mapping:
            raise UnrecognizedTokenError(token)
        return mapping[key]
