"""Matching of ``_role`` route requirements at dispatch time.

A requirement is a list of role ids. ``editor+admin`` grants access to an
actor holding either role, ``editor,admin`` only to one holding both.
"""
from __future__ import annotations

from typing import AbstractSet, Iterable, List, Literal, Optional, Tuple

from viewaccess.policy import ROLE_AND_DELIMITER, ROLE_OR_DELIMITER

Mode = Literal["any", "all"]


def parse_role_requirement(requirement: str) -> Tuple[Mode, List[str]]:
    if ROLE_AND_DELIMITER in requirement:
        mode: Mode = "all"
        parts = requirement.split(ROLE_AND_DELIMITER)
    else:
        mode = "any"
        parts = requirement.split(ROLE_OR_DELIMITER)
    return mode, [p.strip() for p in parts if p.strip()]


def role_requirement_allows(
    requirement: Optional[str], roles: AbstractSet[str] | Iterable[str]
) -> bool:
    """Return True if an actor holding ``roles`` satisfies ``requirement``.

    An empty or missing requirement matches nobody; callers decide what a
    route without a requirement means.
    """
    if not requirement:
        return False
    mode, required = parse_role_requirement(requirement)
    if not required:
        return False
    held = roles if isinstance(roles, (set, frozenset)) else set(roles)
    if mode == "all":
        return all(role_id in held for role_id in required)
    return any(role_id in held for role_id in required)
