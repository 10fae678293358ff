"""Access policies for listing displays.

A policy is a small immutable value: it answers whether an actor may see a
display, renders the route requirement handed to the router, summarizes
itself for administrators and reports the roles it depends on.
"""
from __future__ import annotations

from collections.abc import Hashable
from typing import (
    AbstractSet,
    Any,
    ClassVar,
    Dict,
    FrozenSet,
    Iterable,
    List,
    Mapping,
    Optional,
    Protocol,
    Tuple,
    Union,
    runtime_checkable,
)

from viewaccess.exceptions import StaleRoleReferenceError
from viewaccess.roles import RoleNameLookup, RoleStore
from viewaccess.schemas import ValidationResult

ROLE_OR_DELIMITER = "+"
ROLE_AND_DELIMITER = ","

NO_ROLES_LABEL = "No role(s) selected"
MULTIPLE_ROLES_LABEL = "Multiple roles"
ROLE_REQUIRED_MESSAGE = 'You must select at least one role if type is "by role"'
ROLE_SELECTION_TYPE_MESSAGE = "Role selection must be a mapping or a list of role ids"

Selection = Union[Mapping[str, Any], Iterable[str]]


@runtime_checkable
class Actor(Protocol):
    roles: AbstractSet[str]


@runtime_checkable
class AccessPolicy(Protocol):
    plugin_id: ClassVar[str]

    def evaluate(self, actor: Actor) -> bool: ...

    def to_route_requirement(self) -> Optional[str]: ...

    def summary_label(self, role_names: RoleNameLookup) -> str: ...

    def calculate_dependencies(self, role_store: RoleStore) -> Dict[str, List[str]]: ...

    def to_options(self) -> Dict[str, Any]: ...


def is_valid_role_id(role_id: Any) -> bool:
    return (
        isinstance(role_id, str)
        and bool(role_id.strip())
        and role_id == role_id.strip()
        and ROLE_OR_DELIMITER not in role_id
        and ROLE_AND_DELIMITER not in role_id
    )


class UnrestrictedPolicy:
    """Grants everyone access and contributes nothing to the route."""

    plugin_id: ClassVar[str] = "none"
    title: ClassVar[str] = "None"
    help: ClassVar[str] = "Will be available to all users."

    @classmethod
    def default_options(cls) -> Dict[str, Any]:
        return {}

    @classmethod
    def from_options(cls, options: Optional[Mapping[str, Any]] = None) -> "UnrestrictedPolicy":
        return cls()

    @classmethod
    def validate(cls, options: Optional[Mapping[str, Any]] = None) -> ValidationResult:
        return ValidationResult()

    @classmethod
    def options_from_value(cls, value: Mapping[str, Any]) -> Dict[str, Any]:
        return {}

    def evaluate(self, actor: Actor) -> bool:
        return True

    def to_route_requirement(self) -> Optional[str]:
        return None

    def summary_label(self, role_names: RoleNameLookup) -> str:
        return "Unrestricted"

    def calculate_dependencies(self, role_store: RoleStore) -> Dict[str, List[str]]:
        return {}

    def to_options(self) -> Dict[str, Any]:
        return {}

    def __eq__(self, other):
        return isinstance(other, UnrestrictedPolicy)

    def __hash__(self):
        return hash(self.plugin_id)

    def __repr__(self):
        return "UnrestrictedPolicy()"


class RoleAccessPolicy:
    """Grants access to actors holding any of the selected roles."""

    plugin_id: ClassVar[str] = "role"
    title: ClassVar[str] = "Role"
    help: ClassVar[str] = (
        "Access will be granted to users with any of the specified roles."
    )

    __slots__ = ("_roles", "_role_set")

    def __init__(self, selected_roles: Iterable[str] = ()):
        roles: List[str] = []
        for role_id in selected_roles:
            if not is_valid_role_id(role_id):
                raise ValueError(f"Invalid role id: {role_id!r}")
            if role_id not in roles:
                roles.append(role_id)
        self._roles: Tuple[str, ...] = tuple(roles)
        self._role_set: FrozenSet[str] = frozenset(roles)

    @classmethod
    def create(cls, selected_roles: Iterable[str]) -> "RoleAccessPolicy":
        return cls(selected_roles)

    @classmethod
    def default_options(cls) -> Dict[str, Any]:
        return {"role": []}

    @classmethod
    def from_options(cls, options: Optional[Mapping[str, Any]] = None) -> "RoleAccessPolicy":
        selection = (options or {}).get("role") or []
        return cls(_selected_keys(selection))

    @property
    def selected_roles(self) -> Tuple[str, ...]:
        """Selected role ids in the order they were configured."""
        return self._roles

    def evaluate(self, actor: Actor) -> bool:
        held = actor.roles
        if len(held) < len(self._role_set):
            return any(role_id in self._role_set for role_id in held)
        return any(role_id in held for role_id in self._roles)

    def to_route_requirement(self) -> Optional[str]:
        if not self._roles:
            return None
        return ROLE_OR_DELIMITER.join(self._roles)

    def summary_label(self, role_names: RoleNameLookup) -> str:
        count = len(self._roles)
        if count < 1:
            return NO_ROLES_LABEL
        if count > 1:
            return MULTIPLE_ROLES_LABEL
        role_id = self._roles[0]
        names = role_names.names_by_id()
        if role_id not in names:
            raise StaleRoleReferenceError(role_id)
        return names[role_id]

    @classmethod
    def validate(cls, selection: Optional[Selection]) -> ValidationResult:
        """Validate submitted role checkboxes.

        ``selection`` is either a mapping of checkbox key to value, where a
        falsy value means unchecked, or a list, tuple or set of role ids; any
        other type is a field error. The returned value is the filtered
        mapping regardless of validity.
        """
        errors: Dict[str, str] = {}
        if not _is_selection(selection):
            errors["role"] = ROLE_SELECTION_TYPE_MESSAGE
            return ValidationResult(value={}, errors=errors)
        filtered = _filter_selection(selection)
        if not filtered:
            errors["role"] = ROLE_REQUIRED_MESSAGE
        else:
            bad = [k for k in filtered if not is_valid_role_id(k)]
            if bad:
                errors["role"] = "Invalid role id(s): " + ", ".join(map(repr, bad))
        return ValidationResult(value=filtered, errors=errors)

    @classmethod
    def options_from_value(cls, value: Mapping[str, Any]) -> Dict[str, Any]:
        return {"role": list(value.keys())}

    def calculate_dependencies(self, role_store: RoleStore) -> Dict[str, List[str]]:
        dependencies: Dict[str, List[str]] = {}
        for role_id in self._roles:
            record = role_store.load(role_id)
            if record is None:
                continue
            dependencies.setdefault(record.dependency_key, []).append(
                record.dependency_name
            )
        return dependencies

    def to_options(self) -> Dict[str, Any]:
        return {"role": list(self._roles)}

    def __eq__(self, other):
        if not isinstance(other, RoleAccessPolicy):
            return NotImplemented
        return self._roles == other._roles

    def __hash__(self):
        return hash(self._roles)

    def __repr__(self):
        return f"RoleAccessPolicy({list(self._roles)!r})"


def _is_selection(selection: Any) -> bool:
    if selection is None or isinstance(selection, Mapping):
        return True
    if not isinstance(selection, (list, tuple, set, frozenset)):
        return False
    return all(isinstance(item, Hashable) for item in selection)


def _filter_selection(selection: Optional[Selection]) -> Dict[str, Any]:
    if not selection or not _is_selection(selection):
        return {}
    if isinstance(selection, Mapping):
        return {key: value for key, value in selection.items() if value}
    return {role_id: role_id for role_id in selection if role_id}


def _selected_keys(selection: Selection) -> List[str]:
    return list(_filter_selection(selection).keys())
