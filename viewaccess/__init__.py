"""Role-based access control for listing displays."""
from viewaccess.policy import AccessPolicy, RoleAccessPolicy, UnrestrictedPolicy

__all__ = ["AccessPolicy", "RoleAccessPolicy", "UnrestrictedPolicy"]
