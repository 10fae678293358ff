"""Exceptions raised by access policies and their collaborators."""


class StaleRoleReferenceError(LookupError):
    """A configured role id no longer resolves to a role."""

    def __init__(self, role_id: str):
        super().__init__(f"Role '{role_id}' is referenced but does not exist")
        self.role_id = role_id


class UnknownAccessPluginError(ValueError):
    def __init__(self, access_type: str):
        super().__init__(f"Unknown access plugin: {access_type}")
        self.access_type = access_type
