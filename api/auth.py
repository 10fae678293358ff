"""Authentication helpers: API key check and actor header parsing."""
from __future__ import annotations

from typing import FrozenSet, Optional

from viewaccess.config import get_settings


def verify_api_key(key: Optional[str]) -> bool:
    """Return True if provided key matches configured `API_KEY` env var."""
    if not key:
        return False
    expected = get_settings().api_key
    return expected is not None and key == expected


def parse_actor_roles(header: Optional[str]) -> FrozenSet[str]:
    """Split a comma separated role header into role ids."""
    if not header:
        return frozenset()
    return frozenset(part.strip() for part in header.split(",") if part.strip())
