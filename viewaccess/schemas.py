from typing import Any, Dict, FrozenSet, Optional

from pydantic import BaseModel, Field


class ActorModel(BaseModel):
    id: Optional[str] = None
    roles: FrozenSet[str] = frozenset()


class ValidationResult(BaseModel):
    """Outcome of validating submitted access options.

    ``value`` always holds the normalized selection, even when ``errors`` is
    non-empty; callers must not persist it unless ``valid`` is true.
    """

    value: Dict[str, Any] = Field(default_factory=dict)
    errors: Dict[str, str] = Field(default_factory=dict)

    @property
    def valid(self) -> bool:
        return not self.errors


class PluginDefinition(BaseModel):
    id: str
    title: str
    help: str
