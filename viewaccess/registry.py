"""Lookup of access plugins by id."""
from __future__ import annotations

from typing import Any, Dict, List, Mapping, Optional, Type, Union

from viewaccess.exceptions import UnknownAccessPluginError
from viewaccess.policy import AccessPolicy, RoleAccessPolicy, UnrestrictedPolicy
from viewaccess.schemas import PluginDefinition, ValidationResult

PolicyClass = Type[Union[UnrestrictedPolicy, RoleAccessPolicy]]

ACCESS_PLUGINS: Dict[str, PolicyClass] = {
    UnrestrictedPolicy.plugin_id: UnrestrictedPolicy,
    RoleAccessPolicy.plugin_id: RoleAccessPolicy,
}


def get_plugin(access_type: str) -> PolicyClass:
    try:
        return ACCESS_PLUGINS[access_type]
    except KeyError:
        raise UnknownAccessPluginError(access_type) from None


def plugin_definitions() -> List[PluginDefinition]:
    return [
        PluginDefinition(id=cls.plugin_id, title=cls.title, help=cls.help)
        for cls in ACCESS_PLUGINS.values()
    ]


def build_policy(
    access_type: str, options: Optional[Mapping[str, Any]] = None
) -> AccessPolicy:
    return get_plugin(access_type).from_options(options)


def validate_options(
    access_type: str, options: Optional[Mapping[str, Any]] = None
) -> ValidationResult:
    """Validate submitted plugin options.

    Role options are validated on their ``role`` field; other plugins take
    no options.
    """
    plugin = get_plugin(access_type)
    if plugin is RoleAccessPolicy:
        return plugin.validate((options or {}).get("role"))
    return plugin.validate(options)
